"""Share links carrying a referral code."""

from __future__ import annotations

from urllib.parse import urlencode, urlsplit, urlunsplit

from indexer_client.referral.consumption import DEFAULT_REFERRAL_PARAM, strip_query_param


def build_share_url(base_url: str, referral_code: str, param: str = DEFAULT_REFERRAL_PARAM) -> str:
    """Return *base_url* with ``param=referral_code`` set, replacing any existing value."""
    stripped, _ = strip_query_param(base_url, param)
    parts = urlsplit(stripped)
    if not parts.scheme or not parts.netloc:
        raise ValueError(f"Share URL must be absolute: {base_url!r}")
    query = f"{parts.query}&" if parts.query else ""
    query += urlencode({param: referral_code})
    return urlunsplit(parts._replace(query=query))
