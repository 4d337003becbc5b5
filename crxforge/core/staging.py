"""Staging: assembling the directory the packer consumes.

A staged build is a directory holding resource files plus a
``manifest.json`` whose ``0.0.0`` placeholder has been replaced with the
version being published.
"""

from __future__ import annotations

import json
import logging
import re
import shutil
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from crxforge.core.errors import ConfigurationError
from crxforge.models.publish import StagedFile

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.json"
VERSION_PLACEHOLDER = "0.0.0"

_MANIFEST_COMMENT = re.compile(r"//#.*")


def parse_manifest(manifest_file: Path) -> dict[str, Any]:
    """Parse a manifest, ignoring ``//#`` line comments."""
    text = Path(manifest_file).read_text(encoding="utf-8")
    return json.loads(_MANIFEST_COMMENT.sub("", text))


def recreate_directory(path: Path) -> Path:
    """Delete ``path`` if it exists and create it empty."""
    path = Path(path)
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True)
    return path


def copy_manifest_with_version(template: Path, output_dir: Path, version: str) -> Path:
    """Copy ``template`` into ``output_dir`` with the version stamped in.

    Only the first ``0.0.0`` occurrence is replaced.
    """
    output = Path(output_dir) / MANIFEST_NAME
    text = Path(template).read_text(encoding="utf-8")
    output.write_text(text.replace(VERSION_PLACEHOLDER, str(version), 1), encoding="utf-8")
    return output


def stage_dir(resource_dir: Path, manifest_template: Path, version: str, output_dir: Path) -> Path:
    """Copy a resource directory and a versioned manifest into ``output_dir``."""
    logger.debug("Staging %s into %s", resource_dir, output_dir)
    shutil.copytree(resource_dir, output_dir, dirs_exist_ok=True)
    copy_manifest_with_version(manifest_template, output_dir, version)
    return Path(output_dir)


def stage_files(files: Iterable[StagedFile], version: str, output_dir: Path) -> Path:
    """Copy individual files into ``output_dir``; one must be the manifest."""
    files = list(files)
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    has_manifest = False
    for staged in files:
        if staged.target_name == MANIFEST_NAME:
            copy_manifest_with_version(staged.path, output_dir, version)
            has_manifest = True
        else:
            shutil.copyfile(staged.path, output_dir / staged.target_name)

    if not has_manifest:
        names = [str(f.path) for f in files]
        raise ConfigurationError(f"Missing manifest.json in output files: {names}")
    return output_dir


def input_entries(
    resource_dir: Path | None,
    manifest_template: Path | None,
    files: Iterable[StagedFile] = (),
) -> list[tuple[str, Path]]:
    """List build inputs as ``(name inside the build, source path)`` pairs.

    Feeds ``sha256_tree`` so the change-detection hash is taken over the
    unversioned inputs.
    """
    entries: list[tuple[str, Path]] = []
    if resource_dir is not None:
        root = Path(resource_dir)
        for path in sorted(root.rglob("*")):
            if path.is_file():
                entries.append((path.relative_to(root).as_posix(), path))
        if manifest_template is not None:
            entries = [e for e in entries if e[0] != MANIFEST_NAME]
            entries.append((MANIFEST_NAME, Path(manifest_template)))
    for staged in files:
        entries.append((staged.target_name, Path(staged.path)))
    return entries
