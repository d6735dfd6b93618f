"""Indexer API client: one method per endpoint.

Every method builds the path, query and body, attaches auth headers where the
endpoint is signature-protected, and delegates to the RequestExecutor. A
non-2xx envelope is turned into IndexerApiError whose message embeds the
server's error string, so callers handle both failure tiers with one except.

Endpoints reachable only from the mail server (points/add, authenticate,
addresses/:address/verify) are deliberately absent.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import urlencode

import httpx

from indexer_client.errors import IndexerApiError
from indexer_client.models.auth import IndexerUserAuth
from indexer_client.models.requests import (
    MailTemplateCreateRequest,
    MailTemplatesListParams,
    MailTemplateUpdateRequest,
    WebhookCreateRequest,
    WebhooksListParams,
)
from indexer_client.models.responses import ErrorBody, NetworkResponse
from indexer_client.network.auth_headers import build_auth_headers, encode_uri_component
from indexer_client.network.executor import RequestExecutor

logger = logging.getLogger(__name__)

REFERRAL_HEADER = "x-referral"


def _seg(value: object) -> str:
    return encode_uri_component(str(value))


class IndexerClient:
    """Client for the public and signature-protected indexer endpoints.

    Parameters
    ----------
    endpoint_url:
        Indexer base URL.
    dev:
        Send ``x-dev: true`` on every request.
    timeout_ms:
        Per-request transport timeout (default 30000).
    transport:
        Optional httpx transport passed to the executor.
    """

    def __init__(
        self,
        endpoint_url: str,
        dev: bool = False,
        timeout_ms: int = 30000,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._executor = RequestExecutor(
            endpoint_url,
            dev=dev,
            timeout_ms=timeout_ms,
            transport=transport,
        )

    @property
    def executor(self) -> RequestExecutor:
        return self._executor

    async def _call(
        self,
        action: str,
        method: str,
        path: str,
        *,
        auth: IndexerUserAuth | None = None,
        body: Any = None,
        headers: dict[str, str] | None = None,
        query: dict[str, str] | None = None,
        cancel: asyncio.Event | None = None,
    ) -> Any:
        request_headers = build_auth_headers(auth) if auth is not None else {}
        if headers:
            request_headers.update(headers)

        url = f"{path}?{urlencode(query)}" if query else path

        response = await self._executor.execute(
            url,
            method,
            headers=request_headers or None,
            body=body,
            cancel=cancel,
        )
        if not response.ok:
            raise self._api_error(action, response)
        return response.data

    @staticmethod
    def _api_error(
        action: str,
        response: NetworkResponse[Any],
        detailed: bool = False,
    ) -> IndexerApiError:
        body = response.error_body or ErrorBody()
        if detailed:
            reason = body.error or body.message or body.dump_raw() or f"HTTP {response.status}"
        else:
            reason = body.describe()
        logger.warning(
            "Indexer call failed to %s (status %d)",
            action,
            response.status,
            extra={"status": response.status, "operation": action},
        )
        return IndexerApiError(
            f"Failed to {action}: {reason}",
            status=response.status,
            body=body,
        )

    # =================================================================
    # Public endpoints (no authentication)
    # =================================================================

    async def validate_username(self, username: str) -> dict:
        """GET /users/:username/validate"""
        return await self._call("validate username", "GET", f"/users/{_seg(username)}/validate")

    async def get_message(
        self,
        chain_id: int,
        wallet_address: str,
        domain: str,
        url: str,
    ) -> dict:
        """Deterministic sign-in message. GET /wallets/:wallet/message"""
        return await self._call(
            "get message",
            "GET",
            f"/wallets/{_seg(wallet_address)}/message",
            query={"chainId": str(chain_id), "domain": domain, "url": url},
        )

    async def get_points_leaderboard(
        self, count: int = 10, cancel: asyncio.Event | None = None
    ) -> dict:
        """GET /points/leaderboard/:count"""
        return await self._call(
            "get points leaderboard", "GET", f"/points/leaderboard/{count}", cancel=cancel
        )

    async def get_points_site_stats(self, cancel: asyncio.Event | None = None) -> dict:
        """GET /points/site-stats"""
        return await self._call("get site stats", "GET", "/points/site-stats", cancel=cancel)

    async def get_referral_stats(self, referral_code: str) -> dict:
        """POST /referrals/:code/stats"""
        return await self._call(
            "get referral stats", "POST", f"/referrals/{_seg(referral_code)}/stats", body={}
        )

    async def resolve_name_to_address(self, name: str) -> dict:
        """ENS/SNS name to wallet address. GET /wallets/named/:name"""
        return await self._call("resolve name", "GET", f"/wallets/named/{_seg(name)}")

    # =================================================================
    # Signature-protected endpoints
    # =================================================================

    async def get_wallet_accounts(
        self,
        wallet_address: str,
        auth: IndexerUserAuth,
        referral_code: str | None = None,
        cancel: asyncio.Event | None = None,
    ) -> dict:
        """Email accounts for a wallet. GET /wallets/:wallet/accounts

        The first call for a new wallet registers it; *referral_code* is sent
        as ``x-referral`` and credited to the referrer on that call only.
        """
        headers = {REFERRAL_HEADER: referral_code} if referral_code else None
        return await self._call(
            "get wallet accounts",
            "GET",
            f"/wallets/{_seg(wallet_address)}/accounts",
            auth=auth,
            headers=headers,
            cancel=cancel,
        )

    async def get_delegated_to(self, wallet_address: str, auth: IndexerUserAuth) -> dict:
        """Latest delegate of a wallet. GET /delegations/from/:wallet"""
        return await self._call(
            "get delegation", "GET", f"/delegations/from/{_seg(wallet_address)}", auth=auth
        )

    async def get_delegated_from(self, wallet_address: str, auth: IndexerUserAuth) -> dict:
        """Wallets that delegated to this wallet. GET /delegations/to/:wallet"""
        return await self._call(
            "get delegators", "GET", f"/delegations/to/{_seg(wallet_address)}", auth=auth
        )

    async def create_nonce(self, username: str, auth: IndexerUserAuth) -> dict:
        """POST /users/:username/nonce"""
        return await self._call(
            "create nonce", "POST", f"/users/{_seg(username)}/nonce", auth=auth, body={}
        )

    async def get_nonce(self, username: str, auth: IndexerUserAuth) -> dict:
        """GET /users/:username/nonce"""
        return await self._call("get nonce", "GET", f"/users/{_seg(username)}/nonce", auth=auth)

    async def get_entitlement(self, wallet_address: str, auth: IndexerUserAuth) -> dict:
        """GET /wallets/:wallet/entitlements/"""
        return await self._call(
            "get entitlement", "GET", f"/wallets/{_seg(wallet_address)}/entitlements/", auth=auth
        )

    async def get_points_balance(self, wallet_address: str, auth: IndexerUserAuth) -> dict:
        """GET /wallets/:wallet/points"""
        return await self._call(
            "get points balance", "GET", f"/wallets/{_seg(wallet_address)}/points", auth=auth
        )

    async def get_referral_code(self, wallet_address: str, auth: IndexerUserAuth) -> dict:
        """Get or create the wallet's referral code. POST /wallets/:wallet/referral"""
        response = await self._executor.post(
            f"/wallets/{_seg(wallet_address)}/referral",
            body={},
            headers=build_auth_headers(auth),
        )
        if not response.ok:
            raise self._api_error("get referral code", response, detailed=True)
        return response.data

    async def get_wallet_names(self, wallet_address: str, auth: IndexerUserAuth) -> dict:
        """ENS/SNS names owned by a wallet. GET /wallets/:wallet/names"""
        return await self._call(
            "get wallet names", "GET", f"/wallets/{_seg(wallet_address)}/names", auth=auth
        )

    # =================================================================
    # Mail templates
    # =================================================================

    async def create_mail_template(
        self,
        wallet_address: str,
        auth: IndexerUserAuth,
        template: MailTemplateCreateRequest,
    ) -> dict:
        return await self._call(
            "create template",
            "POST",
            f"/wallets/{_seg(wallet_address)}/templates",
            auth=auth,
            body=template.to_body(),
        )

    async def get_mail_templates(
        self,
        wallet_address: str,
        auth: IndexerUserAuth,
        params: MailTemplatesListParams | None = None,
    ) -> dict:
        return await self._call(
            "get templates",
            "GET",
            f"/wallets/{_seg(wallet_address)}/templates",
            auth=auth,
            query=params.to_query() if params else None,
        )

    async def get_mail_template(
        self, wallet_address: str, template_id: str, auth: IndexerUserAuth
    ) -> dict:
        return await self._call(
            "get template",
            "GET",
            f"/wallets/{_seg(wallet_address)}/templates/{_seg(template_id)}",
            auth=auth,
        )

    async def update_mail_template(
        self,
        wallet_address: str,
        template_id: str,
        auth: IndexerUserAuth,
        updates: MailTemplateUpdateRequest,
    ) -> dict:
        return await self._call(
            "update template",
            "PUT",
            f"/wallets/{_seg(wallet_address)}/templates/{_seg(template_id)}",
            auth=auth,
            body=updates.to_body(),
        )

    async def delete_mail_template(
        self, wallet_address: str, template_id: str, auth: IndexerUserAuth
    ) -> dict:
        """Soft delete. DELETE /wallets/:wallet/templates/:id"""
        return await self._call(
            "delete template",
            "DELETE",
            f"/wallets/{_seg(wallet_address)}/templates/{_seg(template_id)}",
            auth=auth,
        )

    # =================================================================
    # Mail webhooks
    # =================================================================

    async def create_webhook(
        self,
        wallet_address: str,
        auth: IndexerUserAuth,
        webhook: WebhookCreateRequest,
    ) -> dict:
        return await self._call(
            "create webhook",
            "POST",
            f"/wallets/{_seg(wallet_address)}/webhooks",
            auth=auth,
            body=webhook.to_body(),
        )

    async def get_webhooks(
        self,
        wallet_address: str,
        auth: IndexerUserAuth,
        params: WebhooksListParams | None = None,
    ) -> dict:
        return await self._call(
            "get webhooks",
            "GET",
            f"/wallets/{_seg(wallet_address)}/webhooks",
            auth=auth,
            query=params.to_query() if params else None,
        )

    async def get_webhook(
        self, wallet_address: str, webhook_id: str, auth: IndexerUserAuth
    ) -> dict:
        return await self._call(
            "get webhook",
            "GET",
            f"/wallets/{_seg(wallet_address)}/webhooks/{_seg(webhook_id)}",
            auth=auth,
        )

    async def delete_webhook(
        self, wallet_address: str, webhook_id: str, auth: IndexerUserAuth
    ) -> dict:
        return await self._call(
            "delete webhook",
            "DELETE",
            f"/wallets/{_seg(wallet_address)}/webhooks/{_seg(webhook_id)}",
            auth=auth,
        )
