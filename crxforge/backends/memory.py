"""In-memory backends used by the test suite and local experiments.

Thread-safe so the orchestrator's worker pool can share one instance.
"""

from __future__ import annotations

import copy
import threading
from typing import Any

from crxforge.core.errors import NotFoundError


class MemoryObjectStore:
    """Dict-backed ``ObjectStore``.

    ``tag_writes`` counts ``put_tags`` calls per key, which lets tests
    assert that no tag write happened.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.objects: dict[str, bytes] = {}
        self.content_types: dict[str, str] = {}
        self.tags: dict[str, dict[str, str]] = {}
        self.tag_writes: dict[str, int] = {}

    def get(self, key: str) -> bytes:
        with self._lock:
            try:
                return self.objects[key]
            except KeyError:
                raise NotFoundError(f"No such key: {key}") from None

    def put(
        self,
        key: str,
        data: bytes,
        content_type: str,
        grants: dict[str, str] | None = None,
    ) -> None:
        with self._lock:
            self.objects[key] = bytes(data)
            self.content_types[key] = content_type
            self.tags.pop(key, None)

    def head(self, key: str) -> bool:
        with self._lock:
            return key in self.objects

    def put_tags(self, key: str, tags: dict[str, str]) -> None:
        with self._lock:
            if key not in self.objects:
                raise NotFoundError(f"No such key: {key}")
            self.tags[key] = dict(tags)
            self.tag_writes[key] = self.tag_writes.get(key, 0) + 1

    def get_tags(self, key: str) -> dict[str, str]:
        with self._lock:
            if key not in self.objects:
                raise NotFoundError(f"No such key: {key}")
            return dict(self.tags.get(key, {}))

    def keys(self, prefix: str = "") -> list[str]:
        with self._lock:
            return sorted(k for k in self.objects if k.startswith(prefix))


class MemoryKeyValueStore:
    """Dict-backed ``KeyValueStore`` keyed by table then ``ID``."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.tables: dict[str, dict[str, dict[str, Any]]] = {}

    def list_tables(self) -> list[str]:
        with self._lock:
            return sorted(self.tables)

    def create_table(self, table: str) -> None:
        with self._lock:
            if table in self.tables:
                raise RuntimeError(f"Table already exists: {table}")
            self.tables[table] = {}

    def query(self, table: str, identity: str) -> list[dict[str, Any]]:
        with self._lock:
            rows = self._table(table)
            item = rows.get(identity)
            return [copy.deepcopy(item)] if item is not None else []

    def put_item(self, table: str, item: dict[str, Any]) -> None:
        with self._lock:
            self._table(table)[item["ID"]["S"]] = copy.deepcopy(item)

    def _table(self, table: str) -> dict[str, dict[str, Any]]:
        try:
            return self.tables[table]
        except KeyError:
            raise NotFoundError(f"No such table: {table}") from None
