"""Public models for the indexer client."""

from indexer_client.models.auth import IndexerUserAuth
from indexer_client.models.requests import (
    ListParams,
    MailTemplateCreateRequest,
    MailTemplatesListParams,
    MailTemplateUpdateRequest,
    WebhookCreateRequest,
    WebhooksListParams,
)
from indexer_client.models.responses import ErrorBody, NetworkResponse

__all__ = [
    "ErrorBody",
    "IndexerUserAuth",
    "ListParams",
    "MailTemplateCreateRequest",
    "MailTemplateUpdateRequest",
    "MailTemplatesListParams",
    "NetworkResponse",
    "WebhookCreateRequest",
    "WebhooksListParams",
]
