"""Capability protocols consumed by the publish pipeline.

The pipeline never talks to S3, DynamoDB, the Chromium packer or puffin
directly; it depends on these Protocols. Concrete backends live next to
this module:

- ``S3ObjectStore`` / ``MemoryObjectStore``          -> ``ObjectStore``
- ``DynamoDBStore`` / ``MemoryKeyValueStore``       -> ``KeyValueStore``
- ``ChromiumPacker``                                -> ``Packer``
- ``PuffinDiffTool``                                -> ``DiffTool``
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ObjectStore(Protocol):
    """Hierarchical-key blob storage with object tags."""

    def get(self, key: str) -> bytes:
        """Return the object's bytes. Raises ``NotFoundError`` if absent."""
        ...

    def put(
        self,
        key: str,
        data: bytes,
        content_type: str,
        grants: dict[str, str] | None = None,
    ) -> None:
        """Store ``data`` under ``key`` with the given access grants."""
        ...

    def head(self, key: str) -> bool:
        """Return ``True`` if an object exists under ``key``."""
        ...

    def put_tags(self, key: str, tags: dict[str, str]) -> None:
        """Replace the object's complete tag set."""
        ...

    def get_tags(self, key: str) -> dict[str, str]:
        """Return the object's tag set. Raises ``NotFoundError`` if absent."""
        ...


@runtime_checkable
class KeyValueStore(Protocol):
    """Table-oriented key-value store with a single string hash key ``ID``."""

    def list_tables(self) -> list[str]:
        ...

    def create_table(self, table: str) -> None:
        ...

    def query(self, table: str, identity: str) -> list[dict[str, Any]]:
        """Return the items whose ``ID`` equals ``identity``."""
        ...

    def put_item(self, table: str, item: dict[str, Any]) -> None:
        """Write ``item``, replacing any item with the same ``ID``."""
        ...


@runtime_checkable
class Packer(Protocol):
    """Packs and signs a staged directory into a single artifact file."""

    def pack(self, input_dir: Path, output_file: Path, private_key_file: Path) -> Path:
        ...


@runtime_checkable
class DiffTool(Protocol):
    """Produces a binary delta from ``source`` to ``destination``."""

    def diff(self, source: Path, destination: Path, output: Path) -> None:
        """Write the delta to ``output``. Raises ``DiffError`` on failure."""
        ...
