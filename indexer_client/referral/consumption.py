"""Referral code consumption state machine.

Makes sure a referral code found in the entry URL is applied to at most one
account-registration call.

State machine:
- Empty -> Pending: a referral parameter is detected in the entry URL. A code
  detected while another is stored replaces it (last detected wins). The
  parameter is stripped from the URL either way.
- Pending -> Consuming: consume() returns the stored code without removing it.
  Repeated calls return the same code.
- Consuming -> Empty: clear(), called by the caller only after the
  referral-bearing request has succeeded.
- Pending -> Pending: set_code() overwrites the stored code unconditionally.

If the request fails after consume(), the code stays stored so the caller can
retry with it later. Only clear() removes it.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from urllib.parse import unquote_plus, urlsplit, urlunsplit

from indexer_client.referral.storage import MemoryReferralStorage, ReferralStorage

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "indexer_referral_code"
DEFAULT_REFERRAL_PARAM = "referral"


class ReferralState(str, Enum):
    """Lifecycle states of the stored referral code."""

    EMPTY = "empty"
    PENDING = "pending"
    CONSUMING = "consuming"


def strip_query_param(url: str, param: str) -> tuple[str, list[str]]:
    """Remove every *param* from *url*'s query string.

    Returns the stripped URL and the removed (decoded) values in order. Every
    other query segment is kept byte for byte.
    """
    parts = urlsplit(url)
    kept: list[str] = []
    values: list[str] = []
    for segment in parts.query.split("&") if parts.query else []:
        name, _, value = segment.partition("=")
        if unquote_plus(name) == param:
            values.append(unquote_plus(value))
        else:
            kept.append(segment)
    if not values:
        return url, []
    return urlunsplit(parts._replace(query="&".join(kept))), values


class ReferralConsumption:
    """Single-slot referral code holder.

    Args:
        storage: Persistent key-value storage (in-memory when omitted).
        key: Storage key the code is kept under.
        param: Query parameter carrying the code in entry URLs.
    """

    def __init__(
        self,
        storage: ReferralStorage | None = None,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        param: str = DEFAULT_REFERRAL_PARAM,
    ) -> None:
        self._storage = storage if storage is not None else MemoryReferralStorage()
        self._key = key
        self._param = param
        self._consumed = False
        self._lock = threading.Lock()

    @property
    def param(self) -> str:
        return self._param

    @property
    def state(self) -> ReferralState:
        with self._lock:
            if not self._storage.get(self._key):
                return ReferralState.EMPTY
            return ReferralState.CONSUMING if self._consumed else ReferralState.PENDING

    def detect_from_url(self, url: str) -> str:
        """Store the URL's referral code and return the URL without it.

        A detected code replaces any stored one, so the last detected code
        wins across application loads.
        """
        stripped, values = strip_query_param(url, self._param)
        code = values[0].strip() if values else ""
        if not code:
            return stripped

        with self._lock:
            if self._storage.get(self._key):
                logger.debug("Replacing stored referral code with newly detected one")
            self._storage.set(self._key, code)
            self._consumed = False

        logger.info("Referral code detected in entry URL")
        return stripped

    def consume(self) -> str | None:
        """Return the stored code without removing it, or None."""
        with self._lock:
            code = self._storage.get(self._key) or None
            if code is not None:
                self._consumed = True
            return code

    def clear(self, expected: str | None = None) -> bool:
        """Forget the code. Call only after the referral-bearing call succeeded.

        With *expected*, the record is removed only while it still holds that
        code, so a code stored after the call was sent survives. Returns
        whether anything was removed.
        """
        with self._lock:
            stored = self._storage.get(self._key)
            if not stored or (expected is not None and stored != expected):
                return False
            self._storage.delete(self._key)
            self._consumed = False
        logger.info("Referral code cleared after successful registration")
        return True

    def set_code(self, code: str) -> None:
        """Overwrite the stored code (e.g. a code the user pasted)."""
        code = code.strip()
        if not code:
            raise ValueError("Referral code must not be blank")
        with self._lock:
            self._storage.set(self._key, code)
            self._consumed = False
