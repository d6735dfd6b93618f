"""Wallet-signature credential passed to signature-protected endpoints.

SECURITY: The credential is never persisted or logged by this package. Its
repr hides the signed message and the signature.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class IndexerUserAuth(BaseModel):
    """Message, signature and claimed signer for one call."""

    model_config = ConfigDict(frozen=True)

    message: str = Field(repr=False)
    signature: str = Field(repr=False)
    signer: str
