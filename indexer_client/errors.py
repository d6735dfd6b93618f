"""Error hierarchy for the indexer client.

All client-specific errors extend IndexerError. Failures come in two tiers:
transport failures (no response at all) are raised by the request executor,
application failures (a response with a non-2xx status) are returned as an
envelope and turned into IndexerApiError by the endpoint methods.

SECURITY: Error messages carry URL, method and status only. Never embed
signatures or signed messages.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from indexer_client.models.responses import ErrorBody


class IndexerError(Exception):
    """Base error for all indexer client errors."""

    message: str = "Indexer client error"

    def __init__(self, message: str | None = None, **kwargs: object) -> None:
        self.message = message or self.__class__.message
        self.details = kwargs
        super().__init__(self.message)


class TransportError(IndexerError):
    """No response was received (DNS failure, refused connection, timeout)."""

    message = "Indexer API request failed"


class RequestCancelledError(IndexerError):
    """The caller-supplied cancellation signal fired before a response arrived."""

    message = "Indexer API request cancelled"


class IndexerApiError(IndexerError):
    """The backend answered with a failure status."""

    message = "Indexer API returned an error"

    def __init__(
        self,
        message: str | None = None,
        *,
        status: int | None = None,
        body: ErrorBody | None = None,
        **kwargs: object,
    ) -> None:
        super().__init__(message, **kwargs)
        self.status = status
        self.body = body


class FallbackTimeoutError(IndexerError):
    """The fallback timer fired while substitution was disabled."""

    message = "Operation timed out"
