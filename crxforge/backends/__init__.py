"""Capability protocols and their concrete backends."""

from crxforge.backends.memory import MemoryKeyValueStore, MemoryObjectStore
from crxforge.backends.protocols import DiffTool, KeyValueStore, ObjectStore, Packer

__all__ = [
    "DiffTool",
    "KeyValueStore",
    "ObjectStore",
    "Packer",
    "MemoryKeyValueStore",
    "MemoryObjectStore",
]
