"""Read-only audit of storage tags against ledger records.

Storage and ledger are updated without a transaction, so a failed run can
leave a new artifact tagged ``latest`` while the ledger still names the
previous release. ``reconcile`` reports such drift for operators; it never
writes to either store.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from crxforge.backends.protocols import ObjectStore
from crxforge.core.delta_generator import release_key
from crxforge.core.errors import NotFoundError, VersionError
from crxforge.core.publisher import LATEST_TAG_KEY, component_name_tag
from crxforge.core.version_ledger import VersionLedger
from crxforge.models.version import Version

logger = logging.getLogger(__name__)


class ReconcileFinding(BaseModel):
    """Drift found for one identity. ``problems`` is empty when consistent."""

    model_config = ConfigDict(frozen=True)

    identity: str
    ledger_version: str | None = None
    problems: list[str] = []

    @property
    def consistent(self) -> bool:
        return not self.problems


def reconcile(
    ledger: VersionLedger,
    store: ObjectStore,
    identities: Iterable[str],
) -> list[ReconcileFinding]:
    """Compare each identity's ledger record with its storage objects.

    Checks that the ledger's version exists in storage and carries the
    latest marker, and that the next version (an upload whose ledger write
    never happened) does not exist.
    """
    findings: list[ReconcileFinding] = []
    for identity in identities:
        record = ledger.get_record(identity)
        if record is None:
            findings.append(ReconcileFinding(identity=identity, problems=["no ledger record"]))
            continue

        problems: list[str] = []
        try:
            version = Version.parse(record.version)
        except VersionError as exc:
            findings.append(
                ReconcileFinding(identity=identity, ledger_version=record.version, problems=[str(exc)])
            )
            continue

        key = release_key(identity, version.artifact_filename)
        name_tag = component_name_tag(record.title)
        try:
            tags = store.get_tags(key)
        except NotFoundError:
            problems.append(f"ledger version {version} missing from storage ({key})")
        else:
            if tags.get(LATEST_TAG_KEY) != f"{name_tag}/latest":
                problems.append(f"{key} is not tagged as latest")
            if tags.get(name_tag) != str(version):
                problems.append(f"{key} tag {name_tag!r} is {tags.get(name_tag)!r}")

        orphan_key = release_key(identity, version.next().artifact_filename)
        if store.head(orphan_key):
            problems.append(f"{orphan_key} exists in storage but is not in the ledger")

        if problems:
            logger.warning("%s drift: %s", identity, "; ".join(problems))
        findings.append(
            ReconcileFinding(identity=identity, ledger_version=str(version), problems=problems)
        )
    return findings
