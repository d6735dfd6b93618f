"""Timeout race with synthetic-data substitution for dev mode.

Per call state machine:
- Racing: the operation and a timer of ``timeout_ms`` run concurrently.
- Resolved: the operation finished first with a value, which is returned.
- Failed: the operation raised or the timer fired, and the policy is
  disabled. The original exception is re-raised (FallbackTimeoutError when
  the timer won, since there is no original exception).
- Substituted: same trigger, policy enabled. A warning is logged and the
  synthesized value is returned. The original error is swallowed.

The timer never cancels the operation. When the timer wins, the operation
keeps running as a detached task and whatever it produces is dropped.

Substitution hides real backend failures. Enable it in development only.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field

from indexer_client.errors import FallbackTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Strong references to abandoned operations until they settle
_detached: set[asyncio.Future] = set()


class FallbackPolicy(BaseModel):
    """Whether to substitute synthetic data, and how long to wait first."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    timeout_ms: int = Field(default=2000, ge=1)


def _discard_late_result(future: asyncio.Future) -> None:
    """Done-callback for an operation that lost the race."""
    _detached.discard(future)
    if future.cancelled():
        return
    exc = future.exception()  # Marks the exception as retrieved
    logger.debug(
        "Discarded late %s from abandoned operation",
        "failure" if exc is not None else "result",
    )


async def with_fallback(
    operation: Callable[[], Awaitable[T]],
    synthesize: Callable[[], T | Awaitable[T]],
    policy: FallbackPolicy,
    *,
    name: str = "operation",
) -> T:
    """Race *operation* against ``policy.timeout_ms``.

    Raises
    ------
    Exception
        Whatever *operation* raised, when the policy is disabled.
    FallbackTimeoutError
        If the timer fired first and the policy is disabled.
    """
    task = asyncio.ensure_future(operation())
    timer = asyncio.ensure_future(asyncio.sleep(policy.timeout_ms / 1000))

    try:
        done, _ = await asyncio.wait({task, timer}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        timer.cancel()
        task.cancel()
        raise

    reason: BaseException | None = None
    if task in done:
        timer.cancel()
        try:
            return task.result()
        except Exception as exc:
            reason = exc
    else:
        _detached.add(task)
        task.add_done_callback(_discard_late_result)

    if not policy.enabled:
        if reason is not None:
            raise reason
        raise FallbackTimeoutError(f"{name} timed out after {policy.timeout_ms}ms")

    logger.warning(
        "[DevMode] %s failed, returning synthetic data: %s",
        name,
        reason if reason is not None else f"timed out after {policy.timeout_ms}ms",
        extra={
            "operation": name,
            "fallback_reason": type(reason).__name__ if reason is not None else "timeout",
        },
    )

    result = synthesize()
    if inspect.isawaitable(result):
        result = await result
    return result


class FallbackController:
    """Applies a default fallback policy, with optional per-operation overrides.

    Args:
        default_policy: Policy for operations without an override.
        policies: Operation name -> policy overrides (see load_fallback_policies).
    """

    def __init__(
        self,
        default_policy: FallbackPolicy | None = None,
        policies: dict[str, FallbackPolicy] | None = None,
    ) -> None:
        self._policies = dict(policies or {})
        self._default = default_policy or self._policies.get("default") or FallbackPolicy()

    @property
    def default_policy(self) -> FallbackPolicy:
        return self._default

    @property
    def substitutes(self) -> bool:
        """True if any policy would return synthetic data."""
        return self._default.enabled or any(p.enabled for p in self._policies.values())

    def policy_for(self, name: str) -> FallbackPolicy:
        return self._policies.get(name, self._default)

    def without_substitution(self) -> FallbackController:
        """Copy with substitution disabled everywhere, timeouts unchanged."""

        def _off(policy: FallbackPolicy) -> FallbackPolicy:
            return policy.model_copy(update={"enabled": False})

        return FallbackController(
            _off(self._default),
            {name: _off(policy) for name, policy in self._policies.items()},
        )

    async def run(
        self,
        name: str,
        operation: Callable[[], Awaitable[T]],
        synthesize: Callable[[], T | Awaitable[T]],
    ) -> T:
        return await with_fallback(operation, synthesize, self.policy_for(name), name=name)
