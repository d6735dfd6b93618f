"""Unit tests for the request executor."""

from __future__ import annotations

import asyncio
import json
import logging
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from indexer_client.errors import RequestCancelledError, TransportError
from indexer_client.models.responses import ErrorBody
from indexer_client.network.executor import RequestExecutor

BASE_URL = "https://indexer.test"


@pytest.fixture
def executor(transport: httpx.ASGITransport) -> RequestExecutor:
    return RequestExecutor(BASE_URL, transport=transport)


class TestHeaders:
    def test_default_headers(self):
        headers = RequestExecutor(BASE_URL).build_headers()
        assert headers == {"Content-Type": "application/json", "Accept": "application/json"}

    def test_dev_flag_adds_marker_header(self):
        headers = RequestExecutor(BASE_URL, dev=True).build_headers()
        assert headers["x-dev"] == "true"

    def test_per_call_headers_merged_over_defaults(self):
        headers = RequestExecutor(BASE_URL).build_headers({"Accept": "text/plain", "x-a": "1"})
        assert headers["Accept"] == "text/plain"
        assert headers["x-a"] == "1"
        assert headers["Content-Type"] == "application/json"

    def test_per_call_headers_do_not_leak_into_later_calls(self):
        executor = RequestExecutor(BASE_URL)
        executor.build_headers({"x-signature": "sig"})
        assert "x-signature" not in executor.build_headers()


class TestUrlAndBody:
    def test_relative_url_appended_to_base(self):
        assert RequestExecutor(BASE_URL + "/").build_url("/points/site-stats") == (
            "https://indexer.test/points/site-stats"
        )

    def test_absolute_url_used_as_is(self):
        url = "https://other.test/x"
        assert RequestExecutor(BASE_URL).build_url(url) == url

    def test_object_body_sent_as_json(self):
        assert RequestExecutor.encode_body({"a": 1}) == {"json": {"a": 1}}

    def test_empty_object_body_still_sent(self):
        assert RequestExecutor.encode_body({}) == {"json": {}}

    def test_json_string_body_parsed(self):
        assert RequestExecutor.encode_body('{"a": 1}') == {"json": {"a": 1}}

    def test_non_json_string_passed_through(self):
        assert RequestExecutor.encode_body("not json") == {"content": "not json"}

    @pytest.mark.parametrize("body", [None, ""])
    def test_falsy_body_sends_nothing(self, body):
        assert RequestExecutor.encode_body(body) == {}


class TestExecute:
    @pytest.mark.asyncio
    async def test_success_wrapped_in_envelope(self, executor: RequestExecutor):
        response = await executor.get("/points/site-stats")

        assert response.ok is True
        assert response.success is True
        assert response.status == 200
        assert response.status_text == "OK"
        assert response.data["data"]["totalUsers"] == 7
        assert response.headers["content-type"] == "application/json"

    @pytest.mark.asyncio
    async def test_error_status_returned_not_raised(self, executor: RequestExecutor):
        response = await executor.get("/users/invalid-address/validate")

        assert response.ok is False
        assert response.status == 400
        assert isinstance(response.data, ErrorBody)
        assert response.data.error == "Invalid username format"

    @pytest.mark.asyncio
    async def test_unparseable_error_body_kept_raw(self, executor: RequestExecutor):
        response = await executor.get("/boom")

        assert response.status == 502
        assert response.data.raw == "upstream exploded"

    @pytest.mark.asyncio
    async def test_empty_success_body_is_none(self, executor: RequestExecutor):
        response = await executor.get("/empty")
        assert response.ok is True
        assert response.data is None

    @pytest.mark.asyncio
    async def test_dev_header_sent_on_every_request(self, fake_indexer, transport):
        executor = RequestExecutor(BASE_URL, dev=True, transport=transport)

        await executor.get("/points/site-stats")
        await executor.post("/referrals/ABC/stats", body={})

        assert all(r["headers"].get("x-dev") == "true" for r in fake_indexer.state.requests)

    @pytest.mark.asyncio
    async def test_string_body_that_is_not_json_sent_verbatim(
        self, executor: RequestExecutor
    ):
        response = await executor.post("/echo", body="plain text")
        assert response.data["body"] == "plain text"

    @pytest.mark.asyncio
    async def test_object_body_serialized(self, executor: RequestExecutor):
        response = await executor.post("/echo", body={"templateName": "t"})
        assert json.loads(response.data["body"]) == {"templateName": "t"}

    @pytest.mark.asyncio
    async def test_rejects_unknown_method(self, executor: RequestExecutor):
        with pytest.raises(ValueError, match="Unsupported HTTP method"):
            await executor.execute("/points/site-stats", "TRACE")


class TestTransportFailures:
    @pytest.mark.asyncio
    async def test_connection_error_raises_transport_error(self):
        executor = RequestExecutor(BASE_URL)

        with patch(
            "httpx.AsyncClient.request",
            new_callable=AsyncMock,
            side_effect=httpx.ConnectError("Connection refused"),
        ):
            with pytest.raises(TransportError, match="Indexer API request failed: Connection refused"):
                await executor.get("/points/site-stats")

    @pytest.mark.asyncio
    async def test_timeout_raises_transport_error(self):
        executor = RequestExecutor(BASE_URL, timeout_ms=10)

        with patch(
            "httpx.AsyncClient.request",
            new_callable=AsyncMock,
            side_effect=httpx.ReadTimeout("timed out"),
        ):
            with pytest.raises(TransportError):
                await executor.get("/points/site-stats")

    @pytest.mark.asyncio
    async def test_transport_error_carries_url_and_method(self):
        executor = RequestExecutor(BASE_URL)

        with patch(
            "httpx.AsyncClient.request",
            new_callable=AsyncMock,
            side_effect=httpx.ConnectError("refused"),
        ):
            with pytest.raises(TransportError) as exc_info:
                await executor.post("/x", body={})

        assert exc_info.value.details == {"url": f"{BASE_URL}/x", "method": "POST"}

    @pytest.mark.asyncio
    async def test_headers_never_logged(self, caplog: pytest.LogCaptureFixture):
        executor = RequestExecutor(BASE_URL)

        with caplog.at_level(logging.DEBUG, logger="indexer_client"):
            with patch(
                "httpx.AsyncClient.request",
                new_callable=AsyncMock,
                side_effect=httpx.ConnectError("refused"),
            ):
                with pytest.raises(TransportError):
                    await executor.get("/x", headers={"x-signature": "SECRET-SIG"})

        assert "SECRET-SIG" not in caplog.text
        assert f"{BASE_URL}/x" in caplog.text


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancel_event_aborts_request(self, executor: RequestExecutor):
        cancel = asyncio.Event()

        async def trigger() -> None:
            await asyncio.sleep(0.05)
            cancel.set()

        trigger_task = asyncio.create_task(trigger())
        with pytest.raises(RequestCancelledError):
            await executor.get("/slow", cancel=cancel)
        await trigger_task

    @pytest.mark.asyncio
    async def test_already_set_event_fails_fast(self):
        executor = RequestExecutor(BASE_URL)
        cancel = asyncio.Event()
        cancel.set()

        with patch("httpx.AsyncClient.request", new_callable=AsyncMock) as mock_request:
            with pytest.raises(RequestCancelledError):
                await executor.get("/points/site-stats", cancel=cancel)

        mock_request.assert_not_called()

    @pytest.mark.asyncio
    async def test_unset_event_does_not_interfere(self, executor: RequestExecutor):
        response = await executor.get("/points/site-stats", cancel=asyncio.Event())
        assert response.ok is True

    @pytest.mark.asyncio
    async def test_cancellation_is_not_a_transport_error(self):
        assert not issubclass(RequestCancelledError, TransportError)
