"""Reading packed CRX artifacts.

A CRX file is a small signed header followed by an ordinary zip archive:

- CRX3: ``"Cr24"``, uint32 version (3), uint32 header length, header bytes
- CRX2: ``"Cr24"``, uint32 version (2), uint32 key length,
  uint32 signature length, key bytes, signature bytes

All integers are little-endian.
"""

from __future__ import annotations

import io
import logging
import struct
import zipfile
from pathlib import Path

from crxforge.core.errors import CrxFormatError
from crxforge.core.hasher import component_id_from_public_key
from crxforge.core.staging import parse_manifest
from crxforge.models.publish import ComponentDescriptor

logger = logging.getLogger(__name__)

CRX_MAGIC = b"Cr24"


def zip_offset(data: bytes) -> int:
    """Return the offset at which the embedded zip archive starts."""
    if data[:4] != CRX_MAGIC:
        raise CrxFormatError("Missing Cr24 magic")
    if len(data) < 12:
        raise CrxFormatError("Truncated CRX header")
    (version,) = struct.unpack_from("<I", data, 4)
    if version == 3:
        (header_len,) = struct.unpack_from("<I", data, 8)
        offset = 12 + header_len
    elif version == 2:
        if len(data) < 16:
            raise CrxFormatError("Truncated CRX2 header")
        key_len, sig_len = struct.unpack_from("<II", data, 8)
        offset = 16 + key_len + sig_len
    else:
        raise CrxFormatError(f"Unsupported CRX version {version}")
    if offset > len(data):
        raise CrxFormatError("CRX header runs past end of file")
    return offset


def extract_crx(crx_file: Path, output_dir: Path) -> Path:
    """Extract the archive inside ``crx_file`` into ``output_dir``."""
    data = Path(crx_file).read_bytes()
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    try:
        with zipfile.ZipFile(io.BytesIO(data[zip_offset(data):])) as archive:
            archive.extractall(output_dir)
    except zipfile.BadZipFile as exc:
        raise CrxFormatError(f"{crx_file} does not contain a zip archive") from exc
    return output_dir


def read_descriptor(
    crx_file: Path,
    build_root: Path,
    component_id: str | None = None,
) -> ComponentDescriptor:
    """Unpack ``crx_file`` under ``build/unzip`` and describe it.

    The identity is ``component_id`` when given, otherwise it is derived
    from the manifest's ``key``.
    """
    crx_file = Path(crx_file)
    unzip_dir = extract_crx(crx_file, Path(build_root) / "unzip" / crx_file.stem)
    manifest = parse_manifest(unzip_dir / "manifest.json")
    identity = component_id
    if identity is None:
        if "key" not in manifest:
            raise CrxFormatError(f"{crx_file} has no manifest key and no component id was given")
        identity = component_id_from_public_key(manifest["key"])
    return ComponentDescriptor(
        identity=identity,
        title=manifest["name"],
        version=manifest["version"],
    )
