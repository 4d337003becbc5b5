"""Publish job, descriptor and result models."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, model_validator

from crxforge.models.ledger import PatchManifest


class PublishState(str, Enum):
    """Progress of one component through the publish pipeline.

    ``RECORDED`` is the success terminal, ``NO_CHANGE`` the early exit and
    ``FAILED`` the error terminal.
    """

    HASHED = "hashed"
    VERSION_DECIDED = "version_decided"
    NO_CHANGE = "no_change"
    STAGED = "staged"
    PACKED = "packed"
    DELTAS_GENERATED = "deltas_generated"
    UPLOADED = "uploaded"
    TAGGED = "tagged"
    RECORDED = "recorded"
    FAILED = "failed"


class StagedFile(BaseModel):
    """An input file and the name it takes inside the staged build."""

    model_config = ConfigDict(frozen=True)

    path: Path
    output_name: str | None = None

    @property
    def target_name(self) -> str:
        return self.output_name or self.path.name


class ComponentJob(BaseModel):
    """Everything needed to build and publish one component.

    Either ``resource_dir`` (copied wholesale, with ``manifest_template``
    providing ``manifest.json``) or ``files`` (one of which must be named
    ``manifest.json``) describes the build inputs. The manifest's
    ``0.0.0`` placeholder is replaced with the decided version.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    private_key_file: Path
    component_id: str | None = None
    resource_dir: Path | None = None
    manifest_template: Path | None = None
    files: list[StagedFile] = []

    @model_validator(mode="after")
    def _check_inputs(self) -> ComponentJob:
        if self.resource_dir is not None:
            if self.manifest_template is None:
                raise ValueError("resource_dir requires manifest_template")
        elif not self.files:
            raise ValueError("either resource_dir or files must be given")
        return self


class ComponentDescriptor(BaseModel):
    """Identity, title and version read from a packed artifact's manifest."""

    model_config = ConfigDict(frozen=True)

    identity: str
    title: str
    version: str


class PublishResult(BaseModel):
    """Outcome of one component's pipeline run."""

    model_config = ConfigDict(frozen=True)

    name: str
    identity: str = ""
    state: PublishState
    trail: list[PublishState] = []  # states reached, in order
    version: str | None = None
    content_hash: str = ""
    artifact_hash: str = ""
    storage_key: str = ""
    patches: PatchManifest = {}
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.state in (PublishState.RECORDED, PublishState.NO_CHANGE)
