"""Publish orchestrator: the central coordinator for crxforge runs.

The orchestrator wires the VersionLedger, DeltaGenerator, ArtifactPublisher
and MetadataRecorder into one pipeline per component:

    hash inputs -> decide version -> stage -> pack/sign -> hash artifact
    -> fetch previous window -> generate deltas -> upload -> tag -> record

Components run concurrently and independently; a failure in one is logged
and reported on its ``PublishResult`` without touching the others. Within a
component every step is sequential. Nothing here locks across processes:
at most one publish per identity may be in flight.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from crxforge.backends.protocols import DiffTool, KeyValueStore, ObjectStore, Packer
from crxforge.config import PublishConfig
from crxforge.core.crx import read_descriptor
from crxforge.core.delta_generator import DeltaGenerator
from crxforge.core.errors import ConfigurationError, CrxForgeError
from crxforge.core.hasher import component_id_from_public_key, sha256_file, sha256_tree
from crxforge.core.metadata_recorder import MetadataRecorder
from crxforge.core.publisher import ArtifactPublisher
from crxforge.core.staging import (
    MANIFEST_NAME,
    input_entries,
    parse_manifest,
    recreate_directory,
    stage_dir,
    stage_files,
)
from crxforge.core.version_ledger import VersionLedger
from crxforge.models.ledger import LedgerRecord, PatchManifest
from crxforge.models.publish import (
    ComponentDescriptor,
    ComponentJob,
    PublishResult,
    PublishState,
)
from crxforge.models.version import Version

logger = logging.getLogger(__name__)


class PublishOrchestrator:
    """Drives components through the publish pipeline.

    Parameters
    ----------
    config:
        Process configuration.
    object_store:
        Release bucket capability.
    kv_store:
        Ledger table capability.
    packer:
        Pack-and-sign capability. Only needed for ``publish``/``run``.
    diff_tool:
        Binary diff capability.
    """

    def __init__(
        self,
        config: PublishConfig,
        *,
        object_store: ObjectStore,
        kv_store: KeyValueStore,
        diff_tool: DiffTool,
        packer: Packer | None = None,
    ) -> None:
        self.config = config
        self.packer = packer

        # Core subsystems
        self.ledger = VersionLedger(kv_store, config.table_name)
        self.delta_generator = DeltaGenerator(object_store, diff_tool, config.build_root)
        self.publisher = ArtifactPublisher(object_store, config.access_grants)
        self.recorder = MetadataRecorder(self.ledger)

    # ------------------------------------------------------------------
    # Batch execution
    # ------------------------------------------------------------------

    def run(self, jobs: Iterable[ComponentJob]) -> list[PublishResult]:
        """Publish every job concurrently; results follow input order.

        A job whose identity cannot be resolved fails on its own; the rest
        of the work set still runs.
        """
        jobs = list(jobs)
        results: list[PublishResult | None] = [None] * len(jobs)
        resolved: list[tuple[int, ComponentJob, str]] = []
        seen: set[str] = set()
        for index, job in enumerate(jobs):
            try:
                identity = self.resolve_identity(job)
            except (CrxForgeError, OSError, ValueError) as exc:
                logger.error("Cannot resolve the component id of %s: %s", job.name, exc)
                results[index] = PublishResult(
                    name=job.name,
                    state=PublishState.FAILED,
                    trail=[PublishState.FAILED],
                    error=f"{type(exc).__name__}: {exc}",
                )
                continue
            if identity in seen:
                raise ConfigurationError(
                    f"Component {identity} ({job.name}) appears more than once in the work set"
                )
            seen.add(identity)
            resolved.append((index, job, identity))

        self.ledger.ensure_table()

        workers = max(1, min(self.config.max_concurrent_publishes, len(resolved) or 1))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="publish") as pool:
            futures = {
                index: pool.submit(self._publish_isolated, job, identity)
                for index, job, identity in resolved
            }
            for index, future in futures.items():
                results[index] = future.result()
        return [result for result in results if result is not None]

    def _publish_isolated(self, job: ComponentJob, identity: str) -> PublishResult:
        trail: list[PublishState] = []
        try:
            return self.publish(job, identity=identity, trail=trail)
        except Exception as exc:
            reached = trail[-1].value if trail else "start"
            logger.error("Publishing %s (%s) failed after %s: %s", job.name, identity, reached, exc)
            return PublishResult(
                name=job.name,
                identity=identity,
                state=PublishState.FAILED,
                trail=[*trail, PublishState.FAILED],
                error=f"{type(exc).__name__}: {exc}",
            )

    # ------------------------------------------------------------------
    # Single component pipeline
    # ------------------------------------------------------------------

    def publish(
        self,
        job: ComponentJob,
        *,
        identity: str | None = None,
        trail: list[PublishState] | None = None,
    ) -> PublishResult:
        """Run the full pipeline for one component.

        Returns a ``NO_CHANGE`` result without uploading anything when the
        inputs match the ledger's content hash. Errors propagate; ``trail``
        (if given) holds the states reached before the failure.
        """
        if self.packer is None:
            raise ConfigurationError("A packer is required to publish components")
        identity = identity or self.resolve_identity(job)
        trail = trail if trail is not None else []

        def advance(state: PublishState) -> None:
            trail.append(state)
            logger.debug("%s -> %s", job.name, state.value)

        # 1. Hash the unversioned inputs
        content_hash = sha256_tree(
            input_entries(job.resource_dir, job.manifest_template, job.files)
        )
        advance(PublishState.HASHED)

        # 2. Decide the version
        version = self.ledger.get_next_version(identity, content_hash)
        advance(PublishState.VERSION_DECIDED)
        if version is None:
            logger.info("%s is unchanged, skipping", job.name)
            advance(PublishState.NO_CHANGE)
            return PublishResult(
                name=job.name,
                identity=identity,
                state=PublishState.NO_CHANGE,
                trail=list(trail),
                content_hash=content_hash,
            )

        # 3. Stage and pack; the staged build is discarded either way
        staging_dir = self.config.build_root / "staging" / identity
        crx_file = self.config.build_root / "output" / f"{identity}.crx"
        try:
            self._stage(job, version, staging_dir)
            advance(PublishState.STAGED)
            title = parse_manifest(staging_dir / MANIFEST_NAME)["name"]
            self.packer.pack(staging_dir, crx_file, job.private_key_file)
        finally:
            shutil.rmtree(staging_dir, ignore_errors=True)
        artifact_hash = sha256_file(crx_file)
        advance(PublishState.PACKED)
        logger.info("Generated %s with version number %s", crx_file, version)

        descriptor = ComponentDescriptor(identity=identity, title=title, version=str(version))

        # 4. Deltas against the previous window
        patches = self._generate_deltas(descriptor, crx_file, artifact_hash)
        advance(PublishState.DELTAS_GENERATED)

        # 5. Upload artifact and patches
        storage_key = self.publisher.publish_artifact(identity, version, crx_file.read_bytes())
        self.publisher.publish_patches(
            identity, artifact_hash, self.delta_generator.patch_dir(identity, artifact_hash)
        )
        advance(PublishState.UPLOADED)

        # 6. Move the latest tag
        self.publisher.update_latest_tag(identity, version, title)
        advance(PublishState.TAGGED)

        # 7. Record in the ledger
        record = self.recorder.record(
            descriptor,
            artifact_hash,
            patches,
            content_hash=content_hash,
            storage_key=storage_key,
        )
        advance(PublishState.RECORDED)

        return PublishResult(
            name=job.name,
            identity=identity,
            state=PublishState.RECORDED,
            trail=list(trail),
            version=record.version,
            content_hash=content_hash,
            artifact_hash=artifact_hash,
            storage_key=storage_key,
            patches=record.patches,
        )

    # ------------------------------------------------------------------
    # Steps on an already packed artifact
    # ------------------------------------------------------------------

    def describe(self, crx_file: Path, component_id: str | None = None) -> ComponentDescriptor:
        return read_descriptor(crx_file, self.config.build_root, component_id)

    def fetch_previous_versions(self, crx_file: Path, component_id: str | None = None) -> list[Path]:
        """Download the previous-version window for a packed artifact."""
        descriptor = self.describe(crx_file, component_id)
        return self.delta_generator.fetch_previous_versions(
            descriptor.identity,
            Version.parse(descriptor.version),
            self.config.previous_versions,
        )

    def generate_patches(self, crx_file: Path, component_id: str | None = None) -> PatchManifest:
        """Diff the already fetched window against a packed artifact."""
        descriptor = self.describe(crx_file, component_id)
        return self.delta_generator.generate_patches(
            crx_file, descriptor.identity, sha256_file(crx_file)
        )

    def upload_crx(self, crx_file: Path, component_id: str | None = None) -> str:
        """Upload a packed artifact with its patches, then move the latest tag."""
        descriptor = self.describe(crx_file, component_id)
        return self._upload(descriptor, crx_file, sha256_file(crx_file))

    def update_db_for_crx(
        self,
        crx_file: Path,
        component_id: str | None = None,
        content_hash: str | None = None,
    ) -> LedgerRecord:
        """Record a packed artifact and the patches on disk in the ledger."""
        descriptor = self.describe(crx_file, component_id)
        artifact_hash = sha256_file(crx_file)
        patches = self.delta_generator.collect_patch_manifest(descriptor.identity, artifact_hash)
        return self.recorder.record(descriptor, artifact_hash, patches, content_hash=content_hash)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def resolve_identity(self, job: ComponentJob) -> str:
        """Return the job's component id, deriving it from the manifest key."""
        if job.component_id:
            return job.component_id
        manifest_source = job.manifest_template
        if manifest_source is None:
            manifest_source = next(
                (f.path for f in job.files if f.target_name == MANIFEST_NAME), None
            )
        if manifest_source is None:
            raise ConfigurationError(f"{job.name} has no manifest to derive its id from")
        manifest = parse_manifest(manifest_source)
        if "key" not in manifest:
            raise ConfigurationError(
                f"{job.name} has no component_id and its manifest has no key"
            )
        return component_id_from_public_key(manifest["key"])

    @staticmethod
    def _stage(job: ComponentJob, version: Version, staging_dir: Path) -> None:
        recreate_directory(staging_dir)
        if job.resource_dir is not None and job.manifest_template is not None:
            stage_dir(job.resource_dir, job.manifest_template, str(version), staging_dir)
        else:
            stage_files(job.files, str(version), staging_dir)

    def _generate_deltas(
        self, descriptor: ComponentDescriptor, crx_file: Path, artifact_hash: str
    ) -> PatchManifest:
        self.delta_generator.fetch_previous_versions(
            descriptor.identity,
            Version.parse(descriptor.version),
            self.config.previous_versions,
        )
        return self.delta_generator.generate_patches(crx_file, descriptor.identity, artifact_hash)

    def _upload(self, descriptor: ComponentDescriptor, crx_file: Path, artifact_hash: str) -> str:
        version = Version.parse(descriptor.version)
        key = self.publisher.publish_artifact(
            descriptor.identity, version, Path(crx_file).read_bytes()
        )
        self.publisher.publish_patches(
            descriptor.identity,
            artifact_hash,
            self.delta_generator.patch_dir(descriptor.identity, artifact_hash),
        )
        self.publisher.update_latest_tag(descriptor.identity, version, descriptor.title)
        return key
