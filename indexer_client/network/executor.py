"""Request executor: sends one HTTP request and wraps the outcome.

Any response that carries an HTTP status, including 4xx/5xx, is returned as
a NetworkResponse envelope. Only transport failures with no response at all
(DNS error, refused connection, client timeout) raise, as TransportError.
A caller-supplied cancellation event aborts the in-flight request and raises
RequestCancelledError.

SECURITY: Only method, URL and status are logged. Headers are never logged
because they carry signatures and signed messages.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any

import httpx
from pydantic import BaseModel

from indexer_client.errors import RequestCancelledError, TransportError
from indexer_client.models.responses import NetworkResponse

logger = logging.getLogger(__name__)

ALLOWED_METHODS = frozenset({"GET", "POST", "PUT", "DELETE", "PATCH"})


class RequestExecutor:
    """Sends requests to the indexer and normalizes the results.

    Parameters
    ----------
    base_url:
        Indexer base URL (e.g. "https://indexer.0xmail.box"). Relative request
        URLs are appended to it.
    dev:
        When true, every request carries ``x-dev: true``. Fixed for the
        lifetime of the executor.
    timeout_ms:
        Per-request transport timeout (default 30000).
    transport:
        Optional httpx transport, mainly for tests (e.g. httpx.ASGITransport).
    """

    def __init__(
        self,
        base_url: str,
        *,
        dev: bool = False,
        timeout_ms: int = 30000,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._dev = dev
        self._timeout_ms = timeout_ms
        self._transport = transport

        self._default_headers: dict[str, str] = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if dev:
            self._default_headers["x-dev"] = "true"

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def dev(self) -> bool:
        return self._dev

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    def build_url(self, url: str) -> str:
        if url.startswith(("http://", "https://")):
            return url
        return f"{self._base_url}{url}"

    def build_headers(self, headers: dict[str, str] | None = None) -> dict[str, str]:
        """Default headers with the per-call *headers* merged on top."""
        merged = dict(self._default_headers)
        if headers:
            merged.update(headers)
        return merged

    @staticmethod
    def encode_body(body: Any) -> dict[str, Any]:
        """Map *body* to httpx request kwargs.

        Objects are sent as JSON. A string that parses as JSON is sent as that
        JSON, any other string is sent unchanged. ``None`` and ``""`` send no body.
        """
        if body is None or body == "":
            return {}
        if isinstance(body, BaseModel):
            return {"json": body.model_dump(mode="json", by_alias=True, exclude_none=True)}
        if isinstance(body, (bytes, bytearray)):
            return {"content": bytes(body)}
        if isinstance(body, str):
            try:
                return {"json": json.loads(body)}
            except ValueError:
                return {"content": body}
        return {"json": body}

    async def execute(
        self,
        url: str,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        body: Any = None,
        cancel: asyncio.Event | None = None,
    ) -> NetworkResponse[Any]:
        """Send one request and wrap the response in the envelope.

        Raises
        ------
        TransportError
            If no response was received.
        RequestCancelledError
            If *cancel* was set before the response arrived.
        ValueError
            If *method* is not one of GET/POST/PUT/DELETE/PATCH.
        """
        method = method.upper()
        if method not in ALLOWED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        full_url = self.build_url(url)
        request_headers = self.build_headers(headers)
        body_kwargs = self.encode_body(body)

        logger.debug(
            "Indexer request %s %s",
            method,
            full_url,
            extra={"url": full_url, "method": method},
        )

        started = time.monotonic()
        try:
            if cancel is None:
                response = await self._send(method, full_url, request_headers, body_kwargs)
            else:
                response = await self._send_cancellable(
                    method, full_url, request_headers, body_kwargs, cancel
                )
        except httpx.RequestError as exc:
            diagnostic = str(exc) or type(exc).__name__
            logger.error(
                "Indexer network error for %s %s: %s",
                method,
                full_url,
                diagnostic,
                extra={"url": full_url, "method": method},
            )
            raise TransportError(
                f"Indexer API request failed: {diagnostic}",
                url=full_url,
                method=method,
            ) from exc

        duration_ms = round((time.monotonic() - started) * 1000, 1)
        logger.debug(
            "Indexer response %d for %s %s",
            response.status_code,
            method,
            full_url,
            extra={
                "url": full_url,
                "method": method,
                "status": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        return NetworkResponse.from_transport(
            status=response.status_code,
            status_text=response.reason_phrase,
            payload=self._parse_body(response),
            headers=dict(response.headers.items()),
        )

    async def get(
        self, url: str, headers: dict[str, str] | None = None, cancel: asyncio.Event | None = None
    ) -> NetworkResponse[Any]:
        return await self.execute(url, "GET", headers=headers, cancel=cancel)

    async def post(
        self,
        url: str,
        body: Any = None,
        headers: dict[str, str] | None = None,
        cancel: asyncio.Event | None = None,
    ) -> NetworkResponse[Any]:
        return await self.execute(url, "POST", headers=headers, body=body, cancel=cancel)

    async def put(
        self,
        url: str,
        body: Any = None,
        headers: dict[str, str] | None = None,
        cancel: asyncio.Event | None = None,
    ) -> NetworkResponse[Any]:
        return await self.execute(url, "PUT", headers=headers, body=body, cancel=cancel)

    async def patch(
        self,
        url: str,
        body: Any = None,
        headers: dict[str, str] | None = None,
        cancel: asyncio.Event | None = None,
    ) -> NetworkResponse[Any]:
        return await self.execute(url, "PATCH", headers=headers, body=body, cancel=cancel)

    async def delete(
        self, url: str, headers: dict[str, str] | None = None, cancel: asyncio.Event | None = None
    ) -> NetworkResponse[Any]:
        return await self.execute(url, "DELETE", headers=headers, cancel=cancel)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body_kwargs: dict[str, Any],
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=self._timeout_ms / 1000,
        ) as client:
            return await client.request(method, url, headers=headers, **body_kwargs)

    async def _send_cancellable(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body_kwargs: dict[str, Any],
        cancel: asyncio.Event,
    ) -> httpx.Response:
        if cancel.is_set():
            raise RequestCancelledError(f"Indexer API request cancelled: {method} {url}")

        send_task = asyncio.ensure_future(self._send(method, url, headers, body_kwargs))
        cancel_task = asyncio.ensure_future(cancel.wait())

        try:
            done, _ = await asyncio.wait(
                {send_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            send_task.cancel()
            cancel_task.cancel()
            raise

        if send_task in done:
            cancel_task.cancel()
            return send_task.result()

        send_task.cancel()
        await asyncio.gather(send_task, return_exceptions=True)
        logger.info(
            "Indexer request cancelled by caller: %s %s",
            method,
            url,
            extra={"url": url, "method": method},
        )
        raise RequestCancelledError(f"Indexer API request cancelled: {method} {url}")

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text
