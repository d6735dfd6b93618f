"""Authentication headers for signature-protected endpoints.

- x-signature: the signature with every CR/LF removed
- x-message:   the signed message, percent-encoded once (the indexer decodes it)
- x-signer:    the claimed signer address, unchanged

No signature or address validation happens here; the indexer verifies.
"""

from __future__ import annotations

import re
from urllib.parse import quote

from indexer_client.models.auth import IndexerUserAuth

# Characters encodeURIComponent leaves alone besides alphanumerics
_URI_COMPONENT_SAFE = "-_.!~*'()"

_CRLF = re.compile(r"[\r\n]")


def encode_uri_component(value: str) -> str:
    """Percent-encode *value* the way JavaScript's encodeURIComponent does."""
    return quote(value, safe=_URI_COMPONENT_SAFE)


def build_auth_headers(auth: IndexerUserAuth) -> dict[str, str]:
    """Turn a credential into the three auth headers."""
    return {
        "x-signature": _CRLF.sub("", auth.signature),
        "x-message": encode_uri_component(auth.message),
        "x-signer": auth.signer,
    }
