"""Result store adapters.

``create_result_store`` picks the JSON file store when a path is configured
and the in-memory store otherwise.
"""

from __future__ import annotations

from trademark_api.adapters.storage.base import AbstractResultStore
from trademark_api.adapters.storage.in_memory import InMemoryResultStore
from trademark_api.adapters.storage.json_file import JsonFileResultStore


def create_result_store(store_path: str | None) -> AbstractResultStore:
    if store_path:
        return JsonFileResultStore(store_path)
    return InMemoryResultStore()


__all__ = [
    "AbstractResultStore",
    "InMemoryResultStore",
    "JsonFileResultStore",
    "create_result_store",
]
