"""Hashing helpers for change detection, patch namespacing and identities.

All digests are lowercase SHA-256 hex strings.
"""

from __future__ import annotations

import base64
import hashlib
from collections.abc import Iterable
from pathlib import Path

_CHUNK_SIZE = 1 << 20

# Component ids spell the hex digest with the letters a-p.
_HEX_TO_ID = str.maketrans("0123456789abcdef", "abcdefghijklmnop")


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def sha256_file(path: Path) -> str:
    """Return the SHA-256 hex digest of a file's contents."""
    digest = hashlib.sha256()
    with Path(path).open("rb") as fh:
        for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def sha256_tree(entries: Iterable[tuple[str, Path]]) -> str:
    """Hash a set of build inputs given as ``(relative_name, path)`` pairs.

    Entries are sorted by name, and each contributes its name and its
    bytes, so the digest changes when any file is renamed, added, removed
    or edited, and is independent of traversal order.
    """
    digest = hashlib.sha256()
    for name, path in sorted(entries, key=lambda e: e[0]):
        digest.update(name.encode("utf-8"))
        digest.update(b"\0")
        digest.update(bytes.fromhex(sha256_file(path)))
    return digest.hexdigest()


def component_id_from_public_key(public_key_b64: str) -> str:
    """Derive the 32-character component id from a base64 public key.

    The id is the first 32 hex digits of SHA-256 over the decoded key,
    with each digit ``0-f`` rewritten as ``a-p``.
    """
    digest = sha256_hex(base64.b64decode(public_key_b64))
    return digest[:32].translate(_HEX_TO_ID)
