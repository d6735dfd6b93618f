"""Client library for the 0xMail indexer API.

Signature-authenticated requests, a uniform response envelope, dev-mode
fallback to synthetic data and single-use referral code consumption.
"""

from indexer_client.config import IndexerSettings, load_fallback_policies
from indexer_client.errors import (
    FallbackTimeoutError,
    IndexerApiError,
    IndexerError,
    RequestCancelledError,
    TransportError,
)
from indexer_client.logging_config import configure_logging
from indexer_client.mocks import IndexerMockData
from indexer_client.models import (
    ErrorBody,
    IndexerUserAuth,
    ListParams,
    MailTemplateCreateRequest,
    MailTemplateUpdateRequest,
    NetworkResponse,
    WebhookCreateRequest,
)
from indexer_client.network import (
    IndexerClient,
    RequestExecutor,
    build_auth_headers,
    encode_uri_component,
)
from indexer_client.referral import (
    JsonFileReferralStorage,
    MemoryReferralStorage,
    ReferralConsumption,
    ReferralState,
    build_share_url,
)
from indexer_client.resilience import FallbackController, FallbackPolicy, with_fallback
from indexer_client.service import IndexerService

__all__ = [
    "ErrorBody",
    "FallbackController",
    "FallbackPolicy",
    "FallbackTimeoutError",
    "IndexerApiError",
    "IndexerClient",
    "IndexerError",
    "IndexerMockData",
    "IndexerService",
    "IndexerSettings",
    "IndexerUserAuth",
    "JsonFileReferralStorage",
    "ListParams",
    "MailTemplateCreateRequest",
    "MailTemplateUpdateRequest",
    "MemoryReferralStorage",
    "NetworkResponse",
    "ReferralConsumption",
    "ReferralState",
    "RequestCancelledError",
    "RequestExecutor",
    "TransportError",
    "WebhookCreateRequest",
    "build_auth_headers",
    "build_share_url",
    "configure_logging",
    "encode_uri_component",
    "load_fallback_policies",
    "with_fallback",
]
