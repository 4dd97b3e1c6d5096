"""Quota types and the quota state store interface.

The ledger depends on this abstraction (not the concrete implementation) so
the in-process store can later be replaced by a shared one (e.g. Redis with a
Lua script, or a database row lock) without touching the algorithms.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Literal, TypeVar, Union

QuotaKind = Literal["token_bucket", "fixed_window"]

T = TypeVar("T")


@dataclass(frozen=True)
class QuotaPolicy:
    """Static configuration for one quota tier.

    Attributes:
        name: Tier name (e.g. "minute").
        kind: Algorithm used to evaluate the tier.
        rate: Units granted per period.
        period_seconds: Length of the period.
        capacity: Token bucket ceiling; defaults to ``rate``. Ignored by
            fixed windows.
    """

    name: str
    kind: QuotaKind
    rate: int
    period_seconds: float
    capacity: int | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("quota name must be a non-empty string")
        if self.kind not in ("token_bucket", "fixed_window"):
            raise ValueError(f"unknown quota kind: {self.kind!r}")
        if self.rate < 1:
            raise ValueError("rate must be >= 1")
        if self.period_seconds <= 0:
            raise ValueError("period_seconds must be > 0")
        if self.capacity is not None and self.capacity < 1:
            raise ValueError("capacity must be >= 1")

    @property
    def max_tokens(self) -> int:
        return self.capacity if self.capacity is not None else self.rate


@dataclass(frozen=True)
class TokenBucketState:
    tokens: float
    last_refill_at: float


@dataclass(frozen=True)
class FixedWindowState:
    window_start: float
    count: int


QuotaState = Union[TokenBucketState, FixedWindowState]

# Receives the stored state (None on first use) and returns the state to
# store (None keeps the current one) plus the value handed back to the caller.
QuotaUpdate = Callable[[QuotaState | None], tuple[QuotaState | None, T]]


@dataclass(frozen=True)
class AdmissionResult:
    """Outcome of consuming one unit from a quota.

    Attributes:
        ok: Whether the unit was granted.
        retry_after: UNIX epoch seconds when the rejecting quota would admit
            again; None when ``ok`` is True.
        quota_name: Quota that produced this decision.
    """

    ok: bool
    retry_after: float | None = None
    quota_name: str | None = None


class AbstractQuotaStore(ABC):
    """Persistent state for (quota name, client key) pairs."""

    @abstractmethod
    def transact(self, quota_name: str, key: str, update: QuotaUpdate[T]) -> T:
        """Run a read-modify-write on one quota record atomically.

        No other ``transact`` call for the same (quota_name, key) may observe
        the record between the read and the write.

        Args:
            quota_name: Tier name.
            key: Client identifier.
            update: Pure function computing the new state from the old one.

        Returns:
            Whatever ``update`` returned as its second element.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, quota_name: str, key: str) -> QuotaState | None:
        """Read a quota record without modifying it."""
        raise NotImplementedError
