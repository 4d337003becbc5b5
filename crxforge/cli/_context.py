"""Shared CLI plumbing: config overrides, logging and backend wiring."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from crxforge.backends.dynamodb import DynamoDBStore
from crxforge.backends.packer import ChromiumPacker
from crxforge.backends.puffin import PuffinDiffTool
from crxforge.backends.s3 import S3ObjectStore
from crxforge.config import PublishConfig
from crxforge.core.orchestrator import PublishOrchestrator

console = Console()
err_console = Console(stderr=True)


def load_config(
    endpoint: str | None = None,
    region: str | None = None,
    build_root: Path | None = None,
) -> PublishConfig:
    """Load ``PublishConfig`` from the environment and apply CLI overrides."""
    overrides: dict[str, object] = {}
    if endpoint:
        overrides["dynamodb_endpoint"] = endpoint
    if region:
        overrides["region"] = region
    if build_root is not None:
        overrides["build_root"] = build_root
    config = PublishConfig()
    return config.model_copy(update=overrides) if overrides else config


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def build_orchestrator(
    config: PublishConfig,
    binary: str | None = None,
    publisher_proof_key: Path | None = None,
    *,
    needs_packer: bool = False,
) -> PublishOrchestrator:
    """Wire the AWS, Chromium and puffin backends into an orchestrator."""
    packer = None
    if needs_packer:
        packer = ChromiumPacker(
            binary or config.packer_binary,
            publisher_proof_key or config.publisher_proof_key,
        )
    return PublishOrchestrator(
        config,
        object_store=S3ObjectStore(config),
        kv_store=DynamoDBStore(config),
        diff_tool=PuffinDiffTool(config.diff_binary),
        packer=packer,
    )
