"""Unit tests for hashing helpers."""

from __future__ import annotations

import base64
import hashlib
from pathlib import Path

from crxforge.core.hasher import (
    component_id_from_public_key,
    sha256_file,
    sha256_hex,
    sha256_tree,
)


def _write(path: Path, data: bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


class TestDigests:

    def test_sha256_hex_matches_hashlib(self):
        assert sha256_hex(b"abc") == hashlib.sha256(b"abc").hexdigest()

    def test_sha256_file_matches_bytes(self, tmp_path: Path):
        data = b"x" * (3 * 1024 * 1024 + 7)
        path = _write(tmp_path / "big.bin", data)
        assert sha256_file(path) == sha256_hex(data)


class TestTreeHash:

    def test_independent_of_entry_order(self, tmp_path: Path):
        a = _write(tmp_path / "a.txt", b"alpha")
        b = _write(tmp_path / "b.txt", b"beta")
        assert sha256_tree([("a.txt", a), ("b.txt", b)]) == sha256_tree([("b.txt", b), ("a.txt", a)])

    def test_changes_when_content_changes(self, tmp_path: Path):
        a = _write(tmp_path / "a.txt", b"alpha")
        before = sha256_tree([("a.txt", a)])
        a.write_bytes(b"alpha2")
        assert sha256_tree([("a.txt", a)]) != before

    def test_changes_when_file_renamed(self, tmp_path: Path):
        a = _write(tmp_path / "a.txt", b"alpha")
        assert sha256_tree([("a.txt", a)]) != sha256_tree([("renamed.txt", a)])

    def test_changes_when_file_added(self, tmp_path: Path):
        a = _write(tmp_path / "a.txt", b"alpha")
        b = _write(tmp_path / "b.txt", b"")
        assert sha256_tree([("a.txt", a)]) != sha256_tree([("a.txt", a), ("b.txt", b)])

    def test_empty_tree_is_hash_of_nothing(self):
        assert sha256_tree([]) == hashlib.sha256().hexdigest()


class TestComponentId:

    def test_id_uses_letters_a_to_p(self, public_key: str, component_id: str):
        result = component_id_from_public_key(public_key)
        assert result == component_id
        assert len(result) == 32
        assert set(result) <= set("abcdefghijklmnop")

    def test_digit_mapping(self):
        key = base64.b64encode(b"\x00").decode()
        digest = hashlib.sha256(b"\x00").hexdigest()[:32]
        expected = "".join("abcdefghijklmnop"["0123456789abcdef".index(c)] for c in digest)
        assert component_id_from_public_key(key) == expected
