"""puffin-based binary diff backend (``puffin -puffdiff src dst out``)."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from crxforge.core.errors import DiffError

logger = logging.getLogger(__name__)


class PuffinDiffTool:
    """``DiffTool`` producing puffdiff patches."""

    def __init__(self, binary: str = "puffin") -> None:
        self.binary = binary

    def diff(self, source: Path, destination: Path, output: Path) -> None:
        args = [
            self.binary,
            "-puffdiff",
            str(Path(source).resolve()),
            str(Path(destination).resolve()),
            str(Path(output).resolve()),
        ]
        try:
            result = subprocess.run(args, capture_output=True, text=True)
        except OSError as exc:
            raise DiffError(f"Failed to execute {self.binary}: {exc}") from exc
        if result.returncode != 0:
            raise DiffError(
                f"{self.binary} exited with {result.returncode} for {source}: "
                f"{result.stderr.strip()}"
            )
