"""Resilience components for the indexer client."""

from indexer_client.resilience.fallback import FallbackController, FallbackPolicy, with_fallback

__all__ = [
    "FallbackController",
    "FallbackPolicy",
    "with_fallback",
]
