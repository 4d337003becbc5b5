"""Ledger record models and their key-value item encoding.

The ledger holds exactly one record per component identity. Each publish
overwrites it; there is no history.

Item layout (DynamoDB attribute-value form)::

    ID           S     component identity (hash key)
    SHA256       S     hash of the packed artifact
    Version      S     "1.0.3"
    Title        S     manifest name
    Disabled     BOOL
    ContentHash  S     change-detection hash (optional)
    PatchList    M     name -> M {Namediff S, Hashdiff S, Sizediff N}
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class PatchManifestEntry(BaseModel):
    """One delta that upgrades a previous artifact to the current one.

    ``name`` is the previous artifact's base file name, which is that
    artifact's own SHA-256.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    diff_name: str
    diff_hash: str
    diff_size: int

    def to_item(self) -> dict[str, Any]:
        return {
            "M": {
                "Namediff": {"S": self.diff_name},
                "Hashdiff": {"S": self.diff_hash},
                "Sizediff": {"N": str(self.diff_size)},
            }
        }

    @classmethod
    def from_item(cls, name: str, item: dict[str, Any]) -> PatchManifestEntry:
        fields = item["M"]
        return cls(
            name=name,
            diff_name=fields["Namediff"]["S"],
            diff_hash=fields["Hashdiff"]["S"],
            diff_size=int(fields["Sizediff"]["N"]),
        )


PatchManifest = dict[str, PatchManifestEntry]


class LedgerRecord(BaseModel):
    """Current published state of one component."""

    model_config = ConfigDict(frozen=True)

    identity: str
    sha256: str
    version: str
    title: str
    disabled: bool = False
    content_hash: str | None = None
    patches: PatchManifest = {}

    def to_item(self) -> dict[str, Any]:
        """Encode as a key-value item; ``ContentHash`` only when known."""
        item: dict[str, Any] = {
            "ID": {"S": self.identity},
            "SHA256": {"S": self.sha256},
            "Version": {"S": self.version},
            "Title": {"S": self.title},
            "Disabled": {"BOOL": self.disabled},
            "PatchList": {
                "M": {name: entry.to_item() for name, entry in self.patches.items()}
            },
        }
        if self.content_hash is not None:
            item["ContentHash"] = {"S": self.content_hash}
        return item

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> LedgerRecord:
        patches = item.get("PatchList", {}).get("M", {})
        content_hash = item.get("ContentHash", {}).get("S")
        return cls(
            identity=item["ID"]["S"],
            sha256=item.get("SHA256", {}).get("S", ""),
            version=item.get("Version", {}).get("S", ""),
            title=item.get("Title", {}).get("S", ""),
            disabled=item.get("Disabled", {}).get("BOOL", False),
            content_hash=content_hash,
            patches={
                name: PatchManifestEntry.from_item(name, value)
                for name, value in patches.items()
            },
        )
