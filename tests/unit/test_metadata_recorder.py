"""Unit tests for the MetadataRecorder."""

from __future__ import annotations

import pytest

from crxforge.backends.memory import MemoryKeyValueStore
from crxforge.core.errors import NotFoundError, PersistenceInconsistency
from crxforge.core.metadata_recorder import MetadataRecorder
from crxforge.core.version_ledger import VersionLedger
from crxforge.models.ledger import PatchManifestEntry
from crxforge.models.publish import ComponentDescriptor

DESCRIPTOR = ComponentDescriptor(
    identity="abcdefghijklmnopabcdefghijklmnop", title="Ad Block", version="1.0.2"
)


class TestRecord:

    def test_writes_enabled_record(self, kv_store: MemoryKeyValueStore):
        ledger = VersionLedger(kv_store)
        ledger.ensure_table()
        entry = PatchManifestEntry(name="aa", diff_name="aa.puff", diff_hash="h", diff_size=1)

        record = MetadataRecorder(ledger).record(DESCRIPTOR, "sha", {"aa": entry}, content_hash="ch")

        assert record.disabled is False
        assert record.version == "1.0.2"
        assert ledger.get_record(DESCRIPTOR.identity) == record

    def test_failure_before_upload_propagates(self, kv_store: MemoryKeyValueStore):
        recorder = MetadataRecorder(VersionLedger(kv_store))
        with pytest.raises(NotFoundError):
            recorder.record(DESCRIPTOR, "sha", {})

    def test_failure_after_upload_is_inconsistency(self, kv_store: MemoryKeyValueStore):
        recorder = MetadataRecorder(VersionLedger(kv_store))
        with pytest.raises(PersistenceInconsistency) as excinfo:
            recorder.record(DESCRIPTOR, "sha", {}, storage_key="release/x/extension_1_0_2.crx")
        assert excinfo.value.storage_key == "release/x/extension_1_0_2.crx"
        assert isinstance(excinfo.value.__cause__, NotFoundError)
