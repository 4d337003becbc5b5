"""Unit tests for the ArtifactPublisher."""

from __future__ import annotations

from pathlib import Path

import pytest

from crxforge.backends.memory import MemoryObjectStore
from crxforge.core.errors import PartialBatchFailure
from crxforge.core.publisher import (
    CRX_CONTENT_TYPE,
    PATCH_CONTENT_TYPE,
    ArtifactPublisher,
    component_name_tag,
    patch_key,
)
from crxforge.models.version import Version

ID = "abcdefghijklmnopabcdefghijklmnop"


@pytest.fixture
def publisher(object_store: MemoryObjectStore) -> ArtifactPublisher:
    return ArtifactPublisher(object_store, {"GrantRead": "id=cdn"})


class _FlakyStore(MemoryObjectStore):
    """Rejects puts for keys ending with one of ``reject``."""

    def __init__(self, *reject: str) -> None:
        super().__init__()
        self.reject = reject

    def put(self, key, data, content_type, grants=None):
        if key.endswith(self.reject):
            raise ConnectionError(f"refused {key}")
        super().put(key, data, content_type, grants)


class _RecordingStore(MemoryObjectStore):
    def __init__(self) -> None:
        super().__init__()
        self.grants_seen: list[dict[str, str] | None] = []

    def put(self, key, data, content_type, grants=None):
        self.grants_seen.append(grants)
        super().put(key, data, content_type, grants)


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------


class TestNaming:

    def test_whitespace_becomes_dash(self):
        assert component_name_tag("Brave Ad Block Updater") == "Brave-Ad-Block-Updater"

    def test_disallowed_characters_removed(self):
        assert component_name_tag("Local Data (en_US) #1!") == "Local-Data-en_US-1"

    def test_allowed_punctuation_kept(self):
        assert component_name_tag("a+b=c.d_e:f/g@h-i") == "a+b=c.d_e:f/g@h-i"

    def test_patch_key_layout(self):
        assert patch_key(ID, "ff", "aa.puff") == f"release/{ID}/patches/ff/aa.puff"


# ---------------------------------------------------------------------------
# Uploads
# ---------------------------------------------------------------------------


class TestUploads:

    def test_publish_artifact_key_and_content_type(
        self, publisher: ArtifactPublisher, object_store: MemoryObjectStore
    ):
        key = publisher.publish_artifact(ID, Version.parse("1.0.3"), b"crx")
        assert key == f"release/{ID}/extension_1_0_3.crx"
        assert object_store.objects[key] == b"crx"
        assert object_store.content_types[key] == CRX_CONTENT_TYPE

    def test_grants_passed_to_every_put(self, tmp_path: Path):
        store = _RecordingStore()
        patches = tmp_path / "patches"
        patches.mkdir()
        (patches / "aa.puff").write_bytes(b"p")
        publisher = ArtifactPublisher(store, {"GrantRead": "id=cdn"})
        publisher.publish_artifact(ID, Version.parse("1.0.1"), b"crx")
        publisher.publish_patches(ID, "ff", patches)
        assert store.grants_seen == [{"GrantRead": "id=cdn"}] * 2

    def test_publish_patches_uploads_all(
        self, publisher: ArtifactPublisher, object_store: MemoryObjectStore, tmp_path: Path
    ):
        patches = tmp_path / "patches"
        patches.mkdir()
        (patches / "aa.puff").write_bytes(b"a")
        (patches / "bb.puff").write_bytes(b"b")
        (patches / "ignored.txt").write_bytes(b"x")
        keys = publisher.publish_patches(ID, "ff", patches)
        assert keys == [patch_key(ID, "ff", "aa.puff"), patch_key(ID, "ff", "bb.puff")]
        assert object_store.content_types[keys[0]] == PATCH_CONTENT_TYPE

    def test_missing_patch_directory_uploads_nothing(
        self, publisher: ArtifactPublisher, tmp_path: Path
    ):
        assert publisher.publish_patches(ID, "ff", tmp_path / "absent") == []

    def test_partial_failure_reports_and_continues(self, tmp_path: Path):
        store = _FlakyStore("aa.puff")
        patches = tmp_path / "patches"
        patches.mkdir()
        (patches / "aa.puff").write_bytes(b"a")
        (patches / "bb.puff").write_bytes(b"b")
        publisher = ArtifactPublisher(store)
        with pytest.raises(PartialBatchFailure) as excinfo:
            publisher.publish_patches(ID, "ff", patches)
        assert set(excinfo.value.failures) == {"aa.puff"}
        assert patch_key(ID, "ff", "bb.puff") in store.objects


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------


class TestUpdateLatestTag:

    def test_first_version_tagged_latest(
        self, publisher: ArtifactPublisher, object_store: MemoryObjectStore
    ):
        key = publisher.publish_artifact(ID, Version.parse("1.0.0"), b"v0")
        assert publisher.update_latest_tag(ID, Version.parse("1.0.0"), "Ad Block") is False
        assert object_store.tags[key] == {"Ad-Block": "1.0.0", "version": "Ad-Block/latest"}
        assert object_store.tag_writes == {key: 1}

    def test_previous_release_demoted(
        self, publisher: ArtifactPublisher, object_store: MemoryObjectStore
    ):
        old = publisher.publish_artifact(ID, Version.parse("1.0.1"), b"v1")
        publisher.update_latest_tag(ID, Version.parse("1.0.1"), "Ad Block")
        new = publisher.publish_artifact(ID, Version.parse("1.0.2"), b"v2")

        assert publisher.update_latest_tag(ID, Version.parse("1.0.2"), "Ad Block") is True
        assert object_store.tags[new] == {"Ad-Block": "1.0.2", "version": "Ad-Block/latest"}
        assert object_store.tags[old] == {"Ad-Block": "1.0.1"}

    def test_absent_previous_release_is_not_tagged(
        self, publisher: ArtifactPublisher, object_store: MemoryObjectStore
    ):
        new = publisher.publish_artifact(ID, Version.parse("1.0.5"), b"v5")
        assert publisher.update_latest_tag(ID, Version.parse("1.0.5"), "Ad Block") is False
        assert object_store.tag_writes == {new: 1}
