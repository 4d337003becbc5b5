"""Metadata Recorder: the last step of a successful publish."""

from __future__ import annotations

import logging

from crxforge.core.errors import PersistenceInconsistency
from crxforge.core.version_ledger import VersionLedger
from crxforge.models.ledger import LedgerRecord, PatchManifest
from crxforge.models.publish import ComponentDescriptor

logger = logging.getLogger(__name__)


class MetadataRecorder:
    """Writes the ledger record for a published artifact."""

    def __init__(self, ledger: VersionLedger) -> None:
        self._ledger = ledger

    def record(
        self,
        descriptor: ComponentDescriptor,
        artifact_hash: str,
        patches: PatchManifest,
        content_hash: str | None = None,
        storage_key: str = "",
    ) -> LedgerRecord:
        """Record ``descriptor`` as the live release.

        ``storage_key`` names the already uploaded artifact; when given,
        a failed ledger write is raised as ``PersistenceInconsistency``.
        """
        try:
            return self._ledger.record_publish(
                descriptor.identity,
                descriptor.version,
                artifact_hash,
                descriptor.title,
                disabled=False,
                patches=patches,
                content_hash=content_hash,
            )
        except Exception as exc:
            if not storage_key:
                raise
            logger.error(
                "Ledger update for %s failed after %s was uploaded: %s",
                descriptor.identity,
                storage_key,
                exc,
            )
            raise PersistenceInconsistency(
                f"{storage_key} was published but the ledger still points at the "
                f"previous release of {descriptor.identity}: {exc}",
                storage_key,
            ) from exc
