"""Pydantic request bodies and list parameters for the mail endpoints.

Bodies are sent with camelCase keys, which is what the indexer expects.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_body(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class MailTemplateCreateRequest(_CamelModel):
    """Body for POST /wallets/:wallet/templates."""

    template_name: str = Field(..., min_length=1)
    body_content: str


class MailTemplateUpdateRequest(_CamelModel):
    """Body for PUT /wallets/:wallet/templates/:id. Unset fields are left alone."""

    template_name: str | None = Field(default=None, min_length=1)
    body_content: str | None = None


class WebhookCreateRequest(_CamelModel):
    """Body for POST /wallets/:wallet/webhooks."""

    webhook_url: str = Field(..., min_length=1)


class ListParams(BaseModel):
    """Query parameters shared by the template and webhook list endpoints."""

    active: bool | None = None
    limit: int | None = Field(default=None, ge=1)
    offset: int | None = Field(default=None, ge=0)

    def to_query(self) -> dict[str, str]:
        """Serialize set values only; booleans as ``true``/``false``."""
        query: dict[str, str] = {}
        if self.active is not None:
            query["active"] = "true" if self.active else "false"
        if self.limit is not None:
            query["limit"] = str(self.limit)
        if self.offset is not None:
            query["offset"] = str(self.offset)
        return query


MailTemplatesListParams = ListParams
WebhooksListParams = ListParams
