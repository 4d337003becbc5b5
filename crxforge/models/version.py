"""Component version model.

A version is three dotted integers. Only the trailing ``build`` counter
ever moves: ``next()`` adds one and ``previous()`` subtracts. ``1.0.0`` is
the first version a component is ever published with.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from crxforge.core.errors import VersionError


class Version(BaseModel):
    """A published component version, e.g. ``1.0.12``."""

    model_config = ConfigDict(frozen=True)

    major: int = Field(1, ge=0)
    minor: int = Field(0, ge=0)
    build: int = Field(0, ge=0)

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a ``major.minor.build`` string."""
        parts = text.strip().split(".")
        if len(parts) != 3 or not all(p.isdigit() for p in parts):
            raise VersionError(f"Not a 3-part numeric version: {text!r}")
        major, minor, build = (int(p) for p in parts)
        return cls(major=major, minor=minor, build=build)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.build}"

    @property
    def is_first(self) -> bool:
        return self == FIRST_VERSION

    @property
    def artifact_filename(self) -> str:
        """Storage file name for this version, e.g. ``extension_1_0_3.crx``."""
        return f"extension_{self.major}_{self.minor}_{self.build}.crx"

    def next(self) -> Version:
        """Return the version after this one (``1.0.9`` -> ``1.0.10``)."""
        return self.model_copy(update={"build": self.build + 1})

    def previous(self, diff: int = 1) -> Version:
        """Return the version ``diff`` builds before this one.

        The first version has no predecessor and maps to itself.
        """
        if self.is_first:
            return self
        if diff < 0 or self.build - diff < 0:
            raise VersionError(f"Cannot step {diff} builds back from {self}")
        return self.model_copy(update={"build": self.build - diff})

    def previous_window(self, count: int) -> list[Version]:
        """Return up to ``count`` preceding versions, newest first.

        The window stops at build 0; versions below it were never published.
        """
        if self.is_first:
            return []
        return [self.previous(i) for i in range(1, min(count, self.build) + 1)]

    def __lt__(self, other: Version) -> bool:
        return self.build < other.build


FIRST_VERSION = Version(major=1, minor=0, build=0)
