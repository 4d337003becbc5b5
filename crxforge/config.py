"""Publish configuration: env-driven, passed explicitly into components.

Centralized config using pydantic-settings. Reads from a .env file and
CRXFORGE_* environment variables. The variable names used by the existing
release jobs (``S3_EXTENSIONS_BUCKET``, ``S3_ENDPOINT``, ``S3_CANONICAL_ID``,
``CLOUDFRONT_CANONICAL_ID``) are accepted as aliases.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PublishConfig(BaseSettings):
    """Configuration for one crxforge process.

    Examples
    --------
    Override via environment::

        export CRXFORGE_S3_BUCKET=brave-core-ext
        export CRXFORGE_LOG_LEVEL=DEBUG
        export S3_ENDPOINT=http://localhost:9000

    Or via .env file::

        CRXFORGE_REGION=us-west-2
        CRXFORGE_DYNAMODB_ENDPOINT=http://localhost:8000
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CRXFORGE_",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    log_level: str = "INFO"

    # Object storage
    s3_bucket: str = Field(
        "brave-core-ext",
        validation_alias=AliasChoices("CRXFORGE_S3_BUCKET", "S3_EXTENSIONS_BUCKET"),
    )
    s3_endpoint: str | None = Field(
        None,
        validation_alias=AliasChoices("CRXFORGE_S3_ENDPOINT", "S3_ENDPOINT"),
    )
    grant_full_control: str | None = Field(
        None,
        validation_alias=AliasChoices(
            "CRXFORGE_GRANT_FULL_CONTROL", "S3_CANONICAL_ID"
        ),
    )
    grant_read: str | None = Field(
        None,
        validation_alias=AliasChoices(
            "CRXFORGE_GRANT_READ", "CLOUDFRONT_CANONICAL_ID"
        ),
    )

    # Key-value ledger
    region: str = "us-west-2"
    dynamodb_endpoint: str | None = None  # e.g. http://localhost:8000
    table_name: str = "Extensions"

    # Working tree
    build_root: Path = Path("build")

    # Pipeline
    previous_versions: int = 10
    max_concurrent_publishes: int = 8

    # Network fetch
    fetch_max_attempts: int = 5
    fetch_delay_seconds: float = 3.0

    # External tools
    packer_binary: str | None = None
    publisher_proof_key: Path | None = None
    diff_binary: str = "puffin"

    @property
    def access_grants(self) -> dict[str, str]:
        """Return the S3 grant arguments for uploaded objects."""
        grants: dict[str, str] = {}
        if self.grant_full_control:
            grants["GrantFullControl"] = self.grant_full_control
        if self.grant_read:
            grants["GrantRead"] = self.grant_read
        return grants
