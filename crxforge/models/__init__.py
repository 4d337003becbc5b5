"""crxforge data models: all Pydantic v2, all frozen (immutable)."""

from crxforge.models.ledger import LedgerRecord, PatchManifest, PatchManifestEntry
from crxforge.models.publish import (
    ComponentDescriptor,
    ComponentJob,
    PublishResult,
    PublishState,
    StagedFile,
)
from crxforge.models.version import FIRST_VERSION, Version

__all__ = [
    # version
    "Version",
    "FIRST_VERSION",
    # ledger
    "LedgerRecord",
    "PatchManifest",
    "PatchManifestEntry",
    # publish
    "ComponentDescriptor",
    "ComponentJob",
    "PublishResult",
    "PublishState",
    "StagedFile",
]
