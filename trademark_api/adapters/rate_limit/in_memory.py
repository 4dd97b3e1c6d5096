"""In-memory quota state store.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: every transaction runs under a single lock, so two requests
  racing on the same key can never both spend the last unit.
"""

from __future__ import annotations

import threading

from trademark_api.adapters.rate_limit.base import (
    AbstractQuotaStore,
    QuotaState,
    QuotaUpdate,
    T,
)


class InMemoryQuotaStore(AbstractQuotaStore):
    """Quota records kept in a dict keyed by (quota name, client key)."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._records: dict[tuple[str, str], QuotaState] = {}

    def transact(self, quota_name: str, key: str, update: QuotaUpdate[T]) -> T:
        if not key:
            raise ValueError("key must be a non-empty string")

        record_key = (quota_name, key)
        with self._lock:
            new_state, result = update(self._records.get(record_key))
            if new_state is not None:
                self._records[record_key] = new_state
            return result

    def get(self, quota_name: str, key: str) -> QuotaState | None:
        with self._lock:
            return self._records.get((quota_name, key))

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
