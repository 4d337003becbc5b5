"""Delta Generator: binary patches from earlier releases to a new artifact.

Working tree layout::

    {build_root}/previous/{identity}/{sha256}.crx          earlier releases
    {build_root}/patches/{identity}/{artifact_hash}/*.puff generated deltas

Both directories are recreated on every run, so generating twice for the
same artifact and the same window yields identical patch names and hashes.
"""

from __future__ import annotations

import logging
from pathlib import Path

from crxforge.backends.protocols import DiffTool, ObjectStore
from crxforge.core.errors import DiffError, NotFoundError
from crxforge.core.hasher import sha256_file, sha256_hex
from crxforge.core.staging import recreate_directory
from crxforge.models.ledger import PatchManifest, PatchManifestEntry
from crxforge.models.version import Version

logger = logging.getLogger(__name__)

ARTIFACT_SUFFIX = ".crx"
PATCH_SUFFIX = ".puff"


def release_key(identity: str, filename: str) -> str:
    """Storage key of a released artifact."""
    return f"release/{identity}/{filename}"


class DeltaGenerator:
    """Fetches a window of earlier releases and diffs them against a new one.

    Parameters
    ----------
    store:
        Object storage holding earlier releases.
    diff_tool:
        External binary-diff capability.
    build_root:
        Root of the working tree.
    """

    def __init__(self, store: ObjectStore, diff_tool: DiffTool, build_root: Path) -> None:
        self._store = store
        self._diff_tool = diff_tool
        self.build_root = Path(build_root)

    def previous_dir(self, identity: str) -> Path:
        return self.build_root / "previous" / identity

    def patch_dir(self, identity: str, artifact_hash: str) -> Path:
        return self.build_root / "patches" / identity / artifact_hash

    # ------------------------------------------------------------------
    # Previous-version window
    # ------------------------------------------------------------------

    def fetch_previous_versions(self, identity: str, version: Version, count: int) -> list[Path]:
        """Download up to ``count`` releases preceding ``version``.

        Each file is saved as ``<its sha256>.crx``. Versions missing from
        storage are logged and skipped.
        """
        download_dir = recreate_directory(self.previous_dir(identity))
        fetched: list[Path] = []
        for previous in version.previous_window(count):
            key = release_key(identity, previous.artifact_filename)
            logger.info("Downloading %s", previous.artifact_filename)
            try:
                data = self._store.get(key)
            except NotFoundError:
                logger.warning("Failed to download %s, object does not exist.", key)
                continue
            path = download_dir / f"{sha256_hex(data)}{ARTIFACT_SUFFIX}"
            path.write_bytes(data)
            fetched.append(path)
            logger.debug("Downloaded %s", key)
        logger.info("Fetched %d previous versions of %s", len(fetched), identity)
        return fetched

    # ------------------------------------------------------------------
    # Patch generation
    # ------------------------------------------------------------------

    def generate_patches(self, artifact_path: Path, identity: str, artifact_hash: str) -> PatchManifest:
        """Diff every previous artifact against ``artifact_path``.

        A diff failure is logged and skipped; the remaining previous
        artifacts are still processed.
        """
        output_dir = recreate_directory(self.patch_dir(identity, artifact_hash))
        previous_dir = self.previous_dir(identity)
        sources = sorted(previous_dir.glob(f"*{ARTIFACT_SUFFIX}")) if previous_dir.is_dir() else []

        for source in sources:
            output = output_dir / f"{source.stem}{PATCH_SUFFIX}"
            logger.info("Generating patch: %s", output)
            try:
                self._diff_tool.diff(source, Path(artifact_path), output)
            except DiffError as exc:
                logger.error("Patch generation from %s failed: %s", source.name, exc)
                output.unlink(missing_ok=True)

        manifest = self.collect_patch_manifest(identity, artifact_hash)
        logger.info("Generated %d/%d patches for %s", len(manifest), len(sources), identity)
        return manifest

    def collect_patch_manifest(self, identity: str, artifact_hash: str) -> PatchManifest:
        """Describe the patches currently on disk for an artifact."""
        patch_dir = self.patch_dir(identity, artifact_hash)
        if not patch_dir.is_dir():
            logger.info("Directory %s does not exist, no patches found.", patch_dir)
            return {}
        manifest: PatchManifest = {}
        for path in sorted(patch_dir.glob(f"*{PATCH_SUFFIX}")):
            manifest[path.stem] = PatchManifestEntry(
                name=path.stem,
                diff_name=path.name,
                diff_hash=sha256_file(path),
                diff_size=path.stat().st_size,
            )
        return manifest
