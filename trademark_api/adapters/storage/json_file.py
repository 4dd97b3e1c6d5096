"""JSON-backed result store.

The document is read and indexed once at startup; afterwards reads are
served from the in-memory index and every save rewrites the document through
a temp file and an atomic rename, so a crash never leaves a half-written
store behind. Writes are serialized with an in-process lock; run a single
writer per file.

Document shape::

    {"trademarks": [{"batchId": ..., "names": [...], "createdAt": ..., "ipAddress": ...}]}
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any
from uuid import uuid4

from pydantic import ValidationError

from trademark_api.adapters.storage.base import AbstractResultStore
from trademark_api.core.errors import PersistenceAppError
from trademark_api.schemas.trademarks import ResultBatch

logger = logging.getLogger(__name__)

_COLLECTION = "trademarks"


class JsonFileResultStore(AbstractResultStore):
    """Result batches persisted to a single JSON file, indexed by client.

    Records that fail validation are kept in the document untouched but are
    left out of the index.
    """

    def __init__(self, store_path: str | Path) -> None:
        self._store_path = Path(store_path).resolve()
        self._lock = threading.RLock()
        self._records: list[Any] = []
        self._batches: list[ResultBatch] = []
        self._ids: set[str] = set()
        self._by_client: dict[str, list[int]] = {}
        self._ensure_storage()
        self._load_index()

    def _ensure_storage(self) -> None:
        try:
            self._store_path.parent.mkdir(parents=True, exist_ok=True)
            if not self._store_path.exists():
                self._write_state({_COLLECTION: []})
        except OSError as exc:
            raise PersistenceAppError(
                code="result_store_unavailable",
                message="Result store could not be initialised",
                details={"hint": str(self._store_path)},
            ) from exc

    def _load_records(self) -> list[Any]:
        try:
            payload = json.loads(self._store_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as exc:
            raise PersistenceAppError(
                code="result_store_unreadable",
                message="Stored results could not be read",
            ) from exc

        records = payload.get(_COLLECTION) if isinstance(payload, dict) else None
        if not isinstance(records, list):
            raise PersistenceAppError(
                code="result_store_corrupt",
                message="Stored results have an unexpected shape",
            )
        return records

    def _load_index(self) -> None:
        self._records = self._load_records()
        skipped = 0
        for record in self._records:
            batch = self._to_batch(record)
            if batch is None or batch.batch_id in self._ids:
                skipped += 1
                continue
            self._index(batch)
        logger.info(
            "result_store.loaded",
            extra={"batches": len(self._batches), "skipped_records": skipped},
        )

    def _index(self, batch: ResultBatch) -> None:
        self._ids.add(batch.batch_id)
        self._batches.append(batch)
        self._by_client.setdefault(batch.client_identifier, []).append(len(self._batches) - 1)

    def _write_state(self, payload: dict[str, Any]) -> None:
        tmp = self._store_path.with_name(f"{self._store_path.name}.{uuid4().hex}.tmp")
        try:
            tmp.write_text(json.dumps(payload, ensure_ascii=True, indent=2) + "\n", encoding="utf-8")
            tmp.replace(self._store_path)
        finally:
            tmp.unlink(missing_ok=True)

    @staticmethod
    def _to_batch(record: Any) -> ResultBatch | None:
        if not isinstance(record, dict):
            return None
        try:
            return ResultBatch.model_validate(record)
        except ValidationError:
            logger.warning("result_store.skipped_invalid_record")
            return None

    def save(self, batch: ResultBatch) -> None:
        with self._lock:
            if batch.batch_id in self._ids:
                return
            stored = batch.model_copy(deep=True)
            records = [*self._records, stored.model_dump(mode="json", by_alias=True)]
            try:
                self._write_state({_COLLECTION: records})
            except OSError as exc:
                raise PersistenceAppError(
                    code="result_store_write_failed",
                    message="Generated names could not be saved",
                ) from exc
            self._records = records
            self._index(stored)

        logger.debug("result_store.saved", extra={"records": len(records)})

    def latest(self, client_identifier: str | None = None) -> ResultBatch | None:
        with self._lock:
            if client_identifier is None:
                positions = range(len(self._batches))
            else:
                positions = self._by_client.get(client_identifier, [])
            if not positions:
                return None
            # Stable on ties: the later record wins
            position = max(positions, key=lambda i: (self._batches[i].created_at, i))
            return self._batches[position].model_copy(deep=True)

    def count(self, client_identifier: str | None = None) -> int:
        with self._lock:
            if client_identifier is None:
                return len(self._batches)
            return len(self._by_client.get(client_identifier, []))
