"""Version Ledger: current published state per component identity.

The ledger is the source of truth for "what is live": one record per
identity, overwritten on every publish. It decides the next version from
that record and a freshly computed content hash.

Design:
- Single write path: ``record_publish()``.
- No client-side locking: callers serialize publishes per identity.
- Table creation is lazy and idempotent (check-then-create).
"""

from __future__ import annotations

import logging

from crxforge.backends.protocols import KeyValueStore
from crxforge.models.ledger import LedgerRecord, PatchManifest
from crxforge.models.version import FIRST_VERSION, Version

logger = logging.getLogger(__name__)

DEFAULT_TABLE_NAME = "Extensions"


class VersionLedger:
    """Reads and writes component records in a key-value table.

    Parameters
    ----------
    store:
        The key-value capability.
    table_name:
        Name of the ledger table.
    """

    def __init__(self, store: KeyValueStore, table_name: str = DEFAULT_TABLE_NAME) -> None:
        self._store = store
        self.table_name = table_name

    # ------------------------------------------------------------------
    # Table lifecycle
    # ------------------------------------------------------------------

    def ensure_table(self) -> bool:
        """Create the ledger table if it does not exist.

        Returns ``True`` when the table was created by this call.
        """
        if self.table_name in self._store.list_tables():
            return False
        self._store.create_table(self.table_name)
        logger.info("Created ledger table %s", self.table_name)
        return True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_record(self, identity: str) -> LedgerRecord | None:
        """Return the current record for ``identity``, or None."""
        items = self._store.query(self.table_name, identity)
        if len(items) != 1:
            return None
        return LedgerRecord.from_item(items[0])

    def get_next_version(self, identity: str, content_hash: str) -> Version | None:
        """Decide the version for a new build of ``identity``.

        Returns ``None`` when the stored content hash equals
        ``content_hash`` (nothing to publish), the first version when no
        record exists, and otherwise the stored version's successor.
        """
        record = self.get_record(identity)
        if record is None or not record.version:
            logger.debug("%s has no ledger record, starting at %s", identity, FIRST_VERSION)
            return FIRST_VERSION
        if record.content_hash is not None and record.content_hash == content_hash:
            logger.info("%s unchanged at %s (content hash %s)", identity, record.version, content_hash)
            return None
        return Version.parse(record.version).next()

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def record_publish(
        self,
        identity: str,
        version: Version | str,
        sha256: str,
        title: str,
        disabled: bool = False,
        patches: PatchManifest | None = None,
        content_hash: str | None = None,
    ) -> LedgerRecord:
        """Overwrite the record for ``identity`` and return what was written.

        This is the ONLY write method.
        """
        record = LedgerRecord(
            identity=identity,
            sha256=sha256,
            version=str(version),
            title=title,
            disabled=disabled,
            content_hash=content_hash,
            patches=patches or {},
        )
        self._store.put_item(self.table_name, record.to_item())
        logger.info(
            "Recorded %s version %s (sha256 %s, %d patches)",
            identity,
            record.version,
            sha256,
            len(record.patches),
        )
        return record
