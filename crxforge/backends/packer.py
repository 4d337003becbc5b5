"""Chromium-based packer/signer backend.

Runs ``<binary> --pack-extension=<dir> --pack-extension-key=<pem>
--brave-extension-publisher-key=<pem>``. The browser writes
``<dir>.crx`` next to the input directory; it is moved to the requested
output path.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from crxforge.core.errors import ConfigurationError

logger = logging.getLogger(__name__)


class ChromiumPacker:
    """``Packer`` that shells out to a Chromium-based browser binary.

    Parameters
    ----------
    binary:
        Path to the browser executable.
    publisher_proof_key:
        PEM file used to generate the publisher proof.
    """

    def __init__(self, binary: str | None, publisher_proof_key: Path | None) -> None:
        if not binary:
            raise ConfigurationError("Missing browser binary: --binary")
        if shutil.which(binary) is None and not Path(binary).exists():
            raise ConfigurationError(f"Browser binary '{binary}' was not found")
        if not publisher_proof_key:
            raise ConfigurationError("Missing --publisher-proof-key <file>")
        self.binary = binary
        self.publisher_proof_key = Path(publisher_proof_key)

    def pack(self, input_dir: Path, output_file: Path, private_key_file: Path) -> Path:
        private_key = Path(private_key_file).resolve()
        if not private_key.exists():
            raise ConfigurationError(
                f"Private key file '{private_key_file}' is missing, was it uploaded?"
            )
        input_dir = Path(input_dir).resolve()
        args = [
            self.binary,
            f"--pack-extension={input_dir}",
            f"--pack-extension-key={private_key}",
            f"--brave-extension-publisher-key={self.publisher_proof_key.resolve()}",
        ]
        logger.debug("Packing %s", input_dir)
        subprocess.run(args, check=True, capture_output=True)

        packed = input_dir.with_name(f"{input_dir.name}.crx")
        output_file = Path(output_file)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(packed), str(output_file))
        return output_file
