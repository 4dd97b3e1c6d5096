"""Per-client quota accounting.

Two algorithms are supported:

- Token bucket: capacity refills continuously (``rate`` units per
  ``period_seconds``) up to ``capacity``. Refill is computed lazily from the
  elapsed time at check time; there is no background task.
- Fixed window: a counter that resets to zero once ``period_seconds`` have
  elapsed since the window opened. The window opens on the first request
  after a reset, not on a wall-clock boundary.

A missing record is a fresh bucket at full capacity or an empty window.
"""

from __future__ import annotations

import math
import time
from typing import Callable, Iterable

from trademark_api.adapters.rate_limit.base import (
    AbstractQuotaStore,
    AdmissionResult,
    FixedWindowState,
    QuotaPolicy,
    QuotaState,
    TokenBucketState,
)


def refill_tokens(policy: QuotaPolicy, state: TokenBucketState, now: float) -> float:
    """Tokens available at ``now``, capped at the bucket capacity."""

    elapsed = max(0.0, now - state.last_refill_at)
    refilled = state.tokens + elapsed / policy.period_seconds * policy.rate
    return min(float(policy.max_tokens), refilled)


def consume_token_bucket(
    policy: QuotaPolicy,
    state: TokenBucketState | None,
    now: float,
) -> tuple[TokenBucketState | None, AdmissionResult]:
    """Take one token if available.

    Returns:
        Tuple of (state to store or None to leave it untouched, result).
    """

    if state is None:
        state = TokenBucketState(tokens=float(policy.max_tokens), last_refill_at=now)

    tokens = refill_tokens(policy, state, now)
    if tokens >= 1:
        return (
            TokenBucketState(tokens=tokens - 1, last_refill_at=now),
            AdmissionResult(ok=True, quota_name=policy.name),
        )

    wait = math.ceil((1 - tokens) * policy.period_seconds / policy.rate)
    return None, AdmissionResult(ok=False, retry_after=now + wait, quota_name=policy.name)


def consume_fixed_window(
    policy: QuotaPolicy,
    state: FixedWindowState | None,
    now: float,
) -> tuple[FixedWindowState | None, AdmissionResult]:
    """Count one request against the current window if it has room.

    Returns:
        Tuple of (state to store or None to leave it untouched, result).
    """

    if state is None or now - state.window_start >= policy.period_seconds:
        state = FixedWindowState(window_start=now, count=0)

    if state.count < policy.rate:
        return (
            FixedWindowState(window_start=state.window_start, count=state.count + 1),
            AdmissionResult(ok=True, quota_name=policy.name),
        )

    retry_after = state.window_start + policy.period_seconds
    return None, AdmissionResult(ok=False, retry_after=retry_after, quota_name=policy.name)


class QuotaLedger:
    """Consumes units from named quotas, one client key at a time.

    Attributes:
        policies: Quota configuration by name; fixed at construction.
    """

    def __init__(
        self,
        store: AbstractQuotaStore,
        policies: Iterable[QuotaPolicy],
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._clock = clock
        self.policies: dict[str, QuotaPolicy] = {}
        for policy in policies:
            if policy.name in self.policies:
                raise ValueError(f"duplicate quota name: {policy.name!r}")
            self.policies[policy.name] = policy

    def _policy(self, quota_name: str) -> QuotaPolicy:
        try:
            return self.policies[quota_name]
        except KeyError:
            raise ValueError(f"unknown quota: {quota_name!r}") from None

    def consume(self, quota_name: str, key: str) -> AdmissionResult:
        """Atomically consume one unit of ``quota_name`` for ``key``.

        Rejections leave the stored record untouched.

        Args:
            quota_name: Configured quota tier.
            key: Client identifier.

        Returns:
            AdmissionResult; ``retry_after`` is set only on rejection.

        Raises:
            ValueError: If the quota is unknown or the key is empty.
        """

        policy = self._policy(quota_name)
        return self._store.transact(quota_name, key, lambda state: self._decide(policy, state))

    def check(self, quota_name: str, key: str) -> AdmissionResult:
        """Report what ``consume`` would decide now without spending a unit.

        The decision is computed under the same transaction as ``consume`` so
        it reflects a consistent snapshot, but the stored record is never
        written.

        Raises:
            ValueError: If the quota is unknown or the key is empty.
        """

        policy = self._policy(quota_name)

        def update(state: QuotaState | None) -> tuple[None, AdmissionResult]:
            _, result = self._decide(policy, state)
            return None, result

        return self._store.transact(quota_name, key, update)

    def _decide(
        self,
        policy: QuotaPolicy,
        state: QuotaState | None,
    ) -> tuple[QuotaState | None, AdmissionResult]:
        # Clock is read inside the transaction so results are ordered
        # consistently with the writes.
        now = self._clock()
        if policy.kind == "token_bucket":
            if state is not None and not isinstance(state, TokenBucketState):
                state = None
            return consume_token_bucket(policy, state, now)
        if state is not None and not isinstance(state, FixedWindowState):
            state = None
        return consume_fixed_window(policy, state, now)

    def peek(self, quota_name: str, key: str) -> QuotaState | None:
        """Return the stored record for inspection without consuming."""

        self._policy(quota_name)
        return self._store.get(quota_name, key)
