"""Artifact Publisher: uploads releases and patches, maintains latest tags.

Storage layout::

    release/{identity}/extension_X_Y_Z.crx
    release/{identity}/patches/{artifact_hash}/{previous_sha256}.puff

Tagging: the newest release carries ``{<component tag>: <version>}`` and
``{"version": "<component tag>/latest"}``; the release before it keeps only
the component tag.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from crxforge.backends.protocols import ObjectStore
from crxforge.core.delta_generator import PATCH_SUFFIX, release_key
from crxforge.core.errors import PartialBatchFailure
from crxforge.models.version import Version

logger = logging.getLogger(__name__)

CRX_CONTENT_TYPE = "application/x-chrome-extension"
PATCH_CONTENT_TYPE = "application/octet-stream"
LATEST_TAG_KEY = "version"

# Characters S3 accepts in tag keys and values.
_TAG_DISALLOWED = re.compile(r"[^a-zA-Z0-9+\-=._:/@]+")


def component_name_tag(title: str) -> str:
    """Turn a component title into a valid tag key."""
    return _TAG_DISALLOWED.sub("", re.sub(r"\s", "-", title))


def patch_key(identity: str, artifact_hash: str, filename: str) -> str:
    return f"release/{identity}/patches/{artifact_hash}/{filename}"


class ArtifactPublisher:
    """Publishes artifacts and patches to object storage.

    Parameters
    ----------
    store:
        Object storage capability.
    grants:
        Access grants applied to every uploaded object.
    """

    def __init__(self, store: ObjectStore, grants: dict[str, str] | None = None) -> None:
        self._store = store
        self._grants = dict(grants or {})

    # ------------------------------------------------------------------
    # Uploads
    # ------------------------------------------------------------------

    def publish_artifact(self, identity: str, version: Version, data: bytes) -> str:
        """Upload the packed artifact and return its storage key."""
        key = release_key(identity, version.artifact_filename)
        self._store.put(key, data, CRX_CONTENT_TYPE, self._grants)
        logger.info("Uploaded component to %s", key)
        return key

    def publish_patches(self, identity: str, artifact_hash: str, patch_dir: Path) -> list[str]:
        """Upload every patch in ``patch_dir``.

        All uploads are attempted; failures are collected and raised
        together as ``PartialBatchFailure``.
        """
        patch_dir = Path(patch_dir)
        if not patch_dir.is_dir():
            logger.info("Directory %s does not exist, no patches found.", patch_dir)
            return []

        uploaded: list[str] = []
        failures: dict[str, str] = {}
        for path in sorted(patch_dir.glob(f"*{PATCH_SUFFIX}")):
            key = patch_key(identity, artifact_hash, path.name)
            try:
                self._store.put(key, path.read_bytes(), PATCH_CONTENT_TYPE, self._grants)
            except Exception as exc:
                logger.error("Upload failed for %s: %s", key, exc)
                failures[path.name] = str(exc)
                continue
            uploaded.append(key)
            logger.info("Uploaded patch to %s", key)

        if failures:
            raise PartialBatchFailure(
                f"{len(failures)} of {len(failures) + len(uploaded)} patch uploads "
                f"failed for {identity}",
                failures,
            )
        return uploaded

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def update_latest_tag(self, identity: str, version: Version, title: str) -> bool:
        """Mark ``version`` as latest and demote the release before it.

        Returns ``True`` if a previous release was re-tagged. A previous
        release that does not exist in storage is left alone.
        """
        name_tag = component_name_tag(title)
        key = release_key(identity, version.artifact_filename)
        logger.info(
            "Updating tags for %s: %s = %s, %s = %s/latest",
            key,
            name_tag,
            version,
            LATEST_TAG_KEY,
            name_tag,
        )
        self._store.put_tags(
            key,
            {name_tag: str(version), LATEST_TAG_KEY: f"{name_tag}/latest"},
        )

        if version.build == 0:
            return False
        previous = version.previous()
        previous_key = release_key(identity, previous.artifact_filename)
        if not self._store.head(previous_key):
            logger.debug("No previous release at %s, nothing to demote", previous_key)
            return False

        self._store.put_tags(previous_key, {name_tag: str(previous)})
        logger.info("Updated tags for %s: %s = %s", previous_key, name_tag, previous)
        return True
