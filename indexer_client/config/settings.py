"""Pydantic Settings for the indexer client.

All environment variables use the INDEXER_ prefix.
Example: INDEXER_BASE_URL=https://indexer.0xmail.box, INDEXER_DEV=true
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

from indexer_client.resilience.fallback import FallbackPolicy


class IndexerSettings(BaseSettings):
    """Client configuration validated from environment variables."""

    # Backend
    base_url: str  # e.g. "https://indexer.0xmail.box"
    dev: bool = False  # Sends x-dev: true on every request
    request_timeout_ms: int = Field(default=30000, ge=1)

    # Dev-mode fallback
    fallback_enabled: bool = False
    fallback_timeout_ms: int = Field(default=2000, ge=1)
    fallback_policies_path: str | None = None  # Per-operation overrides (YAML)

    # Referral consumption
    referral_param: str = Field(default="referral", min_length=1)
    referral_storage_key: str = Field(default="indexer_referral_code", min_length=1)
    referral_storage_path: str | None = None  # JSON file; in-memory when unset

    log_level: str = "INFO"

    model_config = {"env_prefix": "INDEXER_"}

    def fallback_policy(self) -> FallbackPolicy:
        """Uniform fallback policy built from the flat settings.

        Substitution stays off unless ``dev`` is set, whatever
        ``fallback_enabled`` says.
        """
        return FallbackPolicy(
            enabled=self.fallback_enabled and self.dev,
            timeout_ms=self.fallback_timeout_ms,
        )
