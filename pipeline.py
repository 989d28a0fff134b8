#!/usr/bin/env python3
"""
Riot API schema generator.

Scrapes the Riot developer portal, repairs DTOs the live pages leave out
using the previously published build, and writes OpenAPI 3.0.0 and Swagger
2.0 specs (JSON and YAML, pretty and minified) into the output directory.

Stages:
    1. prepare the output directory
    2. collect endpoints and regions concurrently
    3. reconcile missing DTOs
    4. emit every spec file

Usage:
    python pipeline.py [--root DIR] [--output out] [--snapshot-ref REF]
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Sequence

from client import RetryPolicy, SchemaClient
from config import Settings
from endpoint_collector import EndpointCollector
from reconciler import DtoReconciler, ReconciliationReport
from region import RegionCollector
from snapshot_store import FileSnapshotStore, GitSnapshotStore, SnapshotStore, UrlSnapshotStore
from spec_emitter import SPECS, SpecEmitter
from utils.errors import SchemaError
from workspace import Workspace

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    """Summary of one pipeline run."""
    endpoints: int = 0
    regions: int = 0
    reconciliation: ReconciliationReport = field(default_factory=ReconciliationReport)
    written: List[Path] = field(default_factory=list)


def select_snapshot_store(settings: Settings, client: SchemaClient) -> SnapshotStore:
    """Local file, then URL, then git."""
    if settings.snapshot_file:
        return FileSnapshotStore(settings.snapshot_file)
    if settings.snapshot_url:
        return UrlSnapshotStore(client, settings.snapshot_url)
    return GitSnapshotStore(settings.snapshot_ref, cwd=settings.root_dir)


class PipelineDriver:
    """Runs the four pipeline stages in order."""

    def __init__(self,
                 settings: Settings,
                 client: Optional[SchemaClient] = None,
                 snapshot_store: Optional[SnapshotStore] = None,
                 workspace: Optional[Workspace] = None,
                 specs: Sequence[Any] = SPECS,
                 version: Optional[str] = None):
        self.settings = settings
        self._owns_client = client is None
        self.client = client or SchemaClient(
            base_url=settings.base_url,
            timeout=settings.timeout,
            retry=RetryPolicy(attempts=settings.retries + 1),
        )
        self.snapshot_store = snapshot_store or select_snapshot_store(settings, self.client)
        self.workspace = workspace or Workspace(
            settings.root_dir, settings.output_dir, settings.viewer_dir)
        self.specs = list(specs)
        self.version = version or datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    async def run(self) -> RunReport:
        report = RunReport()
        try:
            # Stage 1
            output = await asyncio.to_thread(self.workspace.prepare)

            # Stage 2
            logger.info("🚀 Collecting endpoints and regions...")
            endpoints, regions = await asyncio.gather(
                EndpointCollector(self.client).collect(),
                RegionCollector(self.client).collect(),
                return_exceptions=True,
            )
            for result in (endpoints, regions):
                if isinstance(result, BaseException):
                    raise result
            report.endpoints = len(endpoints)
            report.regions = len(regions)

            # Stage 3
            report.reconciliation = await DtoReconciler(self.snapshot_store).reconcile(endpoints)

            # Stage 4
            emitter = SpecEmitter(output, self.specs)
            report.written = await emitter.emit(endpoints, regions, self.version)
        finally:
            if self._owns_client:
                await self.client.close()

        logger.info("🎉 Schema generation complete!")
        logger.info(f"📊 Endpoints: {report.endpoints}, regions: {report.regions}, files: {len(report.written)}")
        if report.reconciliation.gaps:
            logger.warning(f"⚠️  {len(report.reconciliation.gaps)} DTO(s) left unresolved: "
                           f"{', '.join(g.full_name for g in report.reconciliation.gaps)}")
        return report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate OpenAPI/Swagger specs for the Riot API")
    parser.add_argument("--root", type=Path, help="Project root (git checkout, output parent)")
    parser.add_argument("--output", help="Output directory name, relative to root (default: out)")
    parser.add_argument("--base-url", help="Documentation site root")
    parser.add_argument("--snapshot-ref", help="git object holding the previous build")
    parser.add_argument("--snapshot-url", help="URL of the previous build's openapi JSON")
    parser.add_argument("--snapshot-file", type=Path, help="Local copy of the previous build")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    try:
        settings = Settings.from_env(
            root_dir=args.root,
            output_dir=args.output,
            base_url=args.base_url,
            snapshot_ref=args.snapshot_ref,
            snapshot_url=args.snapshot_url,
            snapshot_file=args.snapshot_file,
        )
    except ValueError as e:
        logger.error(f"❌ Invalid configuration: {e}")
        return 1

    try:
        asyncio.run(PipelineDriver(settings).run())
    except (SchemaError, OSError) as e:
        logger.error(f"❌ Schema generation failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
