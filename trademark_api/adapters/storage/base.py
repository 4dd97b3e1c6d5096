"""Result store interface.

Batches are appended, never updated in place; "latest" is computed at read
time from creation time, with insertion order breaking ties.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from trademark_api.schemas.trademarks import ResultBatch


class AbstractResultStore(ABC):
    """Append-only record store for generated batches, indexed by client."""

    @abstractmethod
    def save(self, batch: ResultBatch) -> None:
        """Append ``batch``; a second save of the same ``batch_id`` is a no-op.

        Raises:
            PersistenceAppError: If the batch cannot be durably recorded.
        """
        raise NotImplementedError

    @abstractmethod
    def latest(self, client_identifier: str | None = None) -> ResultBatch | None:
        """Most recent batch for one client, or across all clients when None."""
        raise NotImplementedError

    @abstractmethod
    def count(self, client_identifier: str | None = None) -> int:
        """Number of stored batches, optionally for a single client."""
        raise NotImplementedError
