"""Configuration module: settings and per-operation fallback policies."""

from indexer_client.config.fallback_policies import load_fallback_policies
from indexer_client.config.settings import IndexerSettings

__all__ = [
    "IndexerSettings",
    "load_fallback_policies",
]
