"""Shared fixtures and a fake indexer backend for the indexer client suite."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from urllib.parse import unquote

import httpx
import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from indexer_client.config.settings import IndexerSettings
from indexer_client.models.auth import IndexerUserAuth
from indexer_client.network.client import IndexerClient
from indexer_client.referral.consumption import ReferralConsumption
from indexer_client.referral.storage import MemoryReferralStorage

BASE_URL = "https://indexer.test"
WALLET = "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0"
REFERRAL_CODE = "ABC123DEF"


# ---------------------------------------------------------------------------
# Fake indexer backend
# ---------------------------------------------------------------------------


def _ok(data: object) -> dict:
    return {
        "success": True,
        "data": data,
        "error": None,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def _fail(status: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"success": False, "error": error})


def create_fake_indexer() -> FastAPI:
    """Minimal FastAPI app that speaks the indexer's envelope.

    Every request is recorded in ``app.state.requests`` as
    {method, path, query, headers, body}.
    """
    app = FastAPI()
    app.state.requests = []

    @app.middleware("http")
    async def record(request: Request, call_next):
        body = await request.body()
        app.state.requests.append(
            {
                "method": request.method,
                "path": request.url.path,
                "raw_path": request.scope.get("raw_path", b"").decode(),
                "query": dict(request.query_params),
                "headers": dict(request.headers),
                "body": body.decode() if body else "",
            }
        )
        return await call_next(request)

    def _signed(request: Request) -> bool:
        return bool(request.headers.get("x-signature") and request.headers.get("x-signer"))

    @app.get("/points/leaderboard/{count}")
    async def leaderboard(count: int):
        entries = [
            {"walletAddress": f"0x{i:040x}", "chainType": "evm", "pointsEarned": str(100 - i)}
            for i in range(min(count, 3))
        ]
        return _ok({"leaderboard": entries})

    @app.get("/points/site-stats")
    async def site_stats():
        return _ok({"totalPoints": "42", "totalUsers": 7})

    @app.get("/users/{username}/validate")
    async def validate(username: str):
        if username == "invalid-address":
            return _fail(400, "Invalid username format")
        return _ok({"isValid": True, "address": username})

    @app.get("/wallets/{wallet}/message")
    async def message(wallet: str, request: Request):
        return _ok({"message": f"Sign in {wallet}", **dict(request.query_params)})

    @app.get("/wallets/{wallet}/accounts")
    async def accounts(wallet: str, request: Request):
        if not _signed(request):
            return _fail(401, "Missing signature")
        return _ok(
            {
                "walletAddress": wallet,
                "referral": request.headers.get("x-referral"),
                "message": unquote(request.headers.get("x-message", "")),
            }
        )

    @app.get("/delegations/to/{wallet}")
    async def delegated_from(wallet: str, request: Request):
        if not _signed(request):
            return _fail(401, "Missing signature")
        return _ok({"walletAddress": wallet, "delegatedFrom": [], "total": 0})

    @app.post("/wallets/{wallet}/referral")
    async def referral_code(wallet: str, request: Request):
        if not _signed(request):
            return JSONResponse(status_code=403, content={"message": "Signature rejected"})
        return _ok({"walletAddress": wallet, "referralCode": REFERRAL_CODE, "totalRedemptions": 0})

    @app.post("/referrals/{code}/stats")
    async def referral_stats(code: str):
        if code == "UNKNOWN":
            return _fail(404, "Referral code not found")
        return _ok({"referralCode": code, "totalReferred": 2, "referredWallets": []})

    @app.get("/wallets/{wallet}/templates")
    async def list_templates(wallet: str, request: Request):
        return {"success": True, "templates": [], "total": 0, "hasMore": False, "verified": True}

    @app.post("/wallets/{wallet}/templates")
    async def create_template(wallet: str, request: Request):
        payload = await request.json()
        return {"success": True, "template": {"id": "t-1", **payload}, "verified": True}

    @app.put("/wallets/{wallet}/templates/{template_id}")
    async def update_template(wallet: str, template_id: str, request: Request):
        payload = await request.json()
        return {"success": True, "template": {"id": template_id, **payload}, "verified": True}

    @app.delete("/wallets/{wallet}/templates/{template_id}")
    async def delete_template(wallet: str, template_id: str):
        if template_id == "missing":
            return _fail(404, "Template not found")
        return {"success": True, "message": "Template deleted", "verified": True}

    @app.post("/wallets/{wallet}/webhooks")
    async def create_webhook(wallet: str, request: Request):
        payload = await request.json()
        return {"success": True, "webhook": {"id": "w-1", "isActive": True, **payload}}

    @app.get("/wallets/{wallet}/webhooks")
    async def list_webhooks(wallet: str):
        return {"success": True, "webhooks": [], "total": 0, "hasMore": False}

    @app.get("/wallets/{wallet}/webhooks/{webhook_id}")
    async def get_webhook(wallet: str, webhook_id: str):
        return {"success": True, "webhook": {"id": webhook_id}}

    @app.get("/slow")
    async def slow():
        await asyncio.sleep(5)
        return _ok({"slow": True})

    @app.get("/boom")
    async def boom():
        return PlainTextResponse("upstream exploded", status_code=502)

    @app.post("/echo")
    async def echo(request: Request):
        raw = await request.body()
        return {"body": raw.decode(), "content_type": request.headers.get("content-type")}

    @app.get("/empty")
    async def empty():
        return PlainTextResponse("", status_code=204)

    return app


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_indexer() -> FastAPI:
    return create_fake_indexer()


@pytest.fixture
def transport(fake_indexer: FastAPI) -> httpx.ASGITransport:
    return httpx.ASGITransport(app=fake_indexer)


@pytest.fixture
def client(transport: httpx.ASGITransport) -> IndexerClient:
    return IndexerClient(BASE_URL, transport=transport)


@pytest.fixture
def auth() -> IndexerUserAuth:
    return IndexerUserAuth(
        message="Sign in to 0xMail\nNonce: 42",
        signature="0xdeadbeef\r\n",
        signer=WALLET,
    )


@pytest.fixture
def referrals() -> ReferralConsumption:
    return ReferralConsumption(MemoryReferralStorage())


@pytest.fixture
def settings() -> IndexerSettings:
    """Test settings with safe defaults."""
    return IndexerSettings(base_url=BASE_URL)


@pytest.fixture
def wallet() -> str:
    return WALLET
