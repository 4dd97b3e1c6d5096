"""In-memory result store (per-process, lost on restart)."""

from __future__ import annotations

import threading

from trademark_api.adapters.storage.base import AbstractResultStore
from trademark_api.schemas.trademarks import ResultBatch


class InMemoryResultStore(AbstractResultStore):
    """Thread-safe list of batches with a per-client index."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._batches: list[ResultBatch] = []
        self._ids: set[str] = set()
        self._by_client: dict[str, list[int]] = {}

    def save(self, batch: ResultBatch) -> None:
        with self._lock:
            if batch.batch_id in self._ids:
                return
            self._ids.add(batch.batch_id)
            self._batches.append(batch.model_copy(deep=True))
            self._by_client.setdefault(batch.client_identifier, []).append(
                len(self._batches) - 1
            )

    def latest(self, client_identifier: str | None = None) -> ResultBatch | None:
        with self._lock:
            if client_identifier is None:
                candidates = list(enumerate(self._batches))
            else:
                candidates = [
                    (i, self._batches[i]) for i in self._by_client.get(client_identifier, [])
                ]
            if not candidates:
                return None
            _, batch = max(candidates, key=lambda item: (item[1].created_at, item[0]))
            return batch.model_copy(deep=True)

    def count(self, client_identifier: str | None = None) -> int:
        with self._lock:
            if client_identifier is None:
                return len(self._batches)
            return len(self._by_client.get(client_identifier, []))
