"""IndexerService: the client composed with dev-mode fallback and referrals.

Dependencies are injected via the constructor; ``from_settings`` wires the
default ones. There is no module-level client instance.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from indexer_client.config.fallback_policies import DEFAULT_KEY, load_fallback_policies
from indexer_client.config.settings import IndexerSettings
from indexer_client.errors import IndexerApiError
from indexer_client.mocks import IndexerMockData
from indexer_client.models.auth import IndexerUserAuth
from indexer_client.network.client import IndexerClient
from indexer_client.referral.consumption import ReferralConsumption
from indexer_client.referral.share import build_share_url
from indexer_client.referral.storage import (
    JsonFileReferralStorage,
    MemoryReferralStorage,
    ReferralStorage,
)
from indexer_client.resilience.fallback import FallbackController

logger = logging.getLogger(__name__)


class IndexerService:
    """High-level operations for a consuming application.

    Endpoints with a synthetic counterpart go through the fallback controller.
    Substitution is honoured only when the client runs in dev mode.
    Everything else is available on ``service.client``.
    """

    def __init__(
        self,
        client: IndexerClient,
        *,
        fallback: FallbackController | None = None,
        referrals: ReferralConsumption | None = None,
    ) -> None:
        fallback = fallback or FallbackController()
        if fallback.substitutes and not client.executor.dev:
            logger.warning("Fallback substitution requested outside dev mode, disabling it")
            fallback = fallback.without_substitution()

        self._client = client
        self._fallback = fallback
        self._referrals = referrals or ReferralConsumption()

    @classmethod
    def from_settings(
        cls,
        settings: IndexerSettings,
        *,
        storage: ReferralStorage | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> IndexerService:
        client = IndexerClient(
            settings.base_url,
            settings.dev,
            settings.request_timeout_ms,
            transport=transport,
        )

        policies = load_fallback_policies(
            settings.fallback_policies_path,
            default=settings.fallback_policy(),
        )
        fallback = FallbackController(policies[DEFAULT_KEY], policies)

        if storage is None:
            storage = (
                JsonFileReferralStorage(settings.referral_storage_path)
                if settings.referral_storage_path
                else MemoryReferralStorage()
            )
        referrals = ReferralConsumption(
            storage,
            key=settings.referral_storage_key,
            param=settings.referral_param,
        )

        return cls(client, fallback=fallback, referrals=referrals)

    @property
    def client(self) -> IndexerClient:
        return self._client

    @property
    def referrals(self) -> ReferralConsumption:
        return self._referrals

    @property
    def fallback(self) -> FallbackController:
        return self._fallback

    # ------------------------------------------------------------------
    # Fallback-wrapped endpoints
    # ------------------------------------------------------------------

    async def get_points_leaderboard(self, count: int = 10) -> dict:
        return await self._fallback.run(
            "get_points_leaderboard",
            lambda: self._client.get_points_leaderboard(count),
            lambda: IndexerMockData.get_leaderboard(count),
        )

    async def get_points_site_stats(self) -> dict:
        return await self._fallback.run(
            "get_points_site_stats",
            self._client.get_points_site_stats,
            IndexerMockData.get_site_stats,
        )

    async def validate_username(self, username: str) -> dict:
        return await self._fallback.run(
            "validate_username",
            lambda: self._client.validate_username(username),
            lambda: IndexerMockData.get_validate_username(username),
        )

    async def get_referral_stats(self, referral_code: str) -> dict:
        return await self._fallback.run(
            "get_referral_stats",
            lambda: self._client.get_referral_stats(referral_code),
            lambda: IndexerMockData.get_referral_stats(referral_code),
        )

    async def get_delegated_from(self, wallet_address: str, auth: IndexerUserAuth) -> dict:
        return await self._fallback.run(
            "get_delegated_from",
            lambda: self._client.get_delegated_from(wallet_address, auth),
            lambda: IndexerMockData.get_delegated_from(wallet_address),
        )

    async def get_wallet_accounts(
        self,
        wallet_address: str,
        auth: IndexerUserAuth,
        referral_code: str | None = None,
    ) -> dict:
        return await self._fallback.run(
            "get_wallet_accounts",
            lambda: self._client.get_wallet_accounts(wallet_address, auth, referral_code),
            lambda: IndexerMockData.get_wallet_accounts(wallet_address),
        )

    # ------------------------------------------------------------------
    # Referral flows
    # ------------------------------------------------------------------

    async def register_wallet(self, wallet_address: str, auth: IndexerUserAuth) -> dict:
        """Fetch the wallet's accounts, applying the pending referral code once.

        The code is cleared as soon as the real request succeeds, even when
        that happens after the fallback timer already returned synthetic
        data. A failure leaves it in place for a retry.
        """
        referral_code = self._referrals.consume()

        async def register() -> dict:
            result = await self._client.get_wallet_accounts(wallet_address, auth, referral_code)
            if referral_code:
                self._referrals.clear(expected=referral_code)
            return result

        def synthesize() -> dict:
            if referral_code:
                logger.info("Keeping referral code until the real registration succeeds")
            return IndexerMockData.get_wallet_accounts(wallet_address)

        return await self._fallback.run("get_wallet_accounts", register, synthesize)

    async def get_share_url(
        self,
        base_url: str,
        wallet_address: str,
        auth: IndexerUserAuth,
    ) -> str:
        """Share link for *base_url* carrying the wallet's referral code."""
        response = await self._client.get_referral_code(wallet_address, auth)
        data: Any = response.get("data") if isinstance(response, dict) else None
        code = data.get("referralCode") if isinstance(data, dict) else None
        if not code:
            raise IndexerApiError("Failed to get referral code: response carried no code")
        return build_share_url(base_url, code, param=self._referrals.param)
