#!/usr/bin/env python3
"""
DTO reconciliation against the previously published build.

Detail pages sometimes reference a nested DTO without documenting it. The
previous build usually still has that definition, so missing DTOs are copied
from it verbatim. DTOs recovered this way are not checked for their own
missing references.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from endpoint import Endpoint
from snapshot_store import SnapshotStore
from utils.errors import ReconciliationGap, SnapshotError
from utils.spec_parser import HistoricalSnapshot

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationReport:
    """Diagnostics from one reconciliation pass."""
    missing: List[str] = field(default_factory=list)
    repaired: List[str] = field(default_factory=list)
    gaps: List[ReconciliationGap] = field(default_factory=list)
    snapshot_error: Optional[str] = None
    snapshot_requested: bool = False

    @property
    def complete(self) -> bool:
        return not self.gaps


class DtoReconciler:
    """Fills missing DTOs of collected endpoints from a SnapshotStore."""

    def __init__(self, store: SnapshotStore):
        self.store = store

    @staticmethod
    def find_missing(endpoints: List[Endpoint]) -> List[Tuple[Endpoint, str]]:
        return [
            (endpoint, dto_name)
            for endpoint in endpoints
            for dto_name in endpoint.list_missing_dtos()
        ]

    async def _load_snapshot(self, report: ReconciliationReport) -> Optional[HistoricalSnapshot]:
        report.snapshot_requested = True
        try:
            snapshot = await self.store.get_prior_build()
        except SnapshotError as e:
            report.snapshot_error = str(e)
            logger.error(f"❌ FAILED to get previous commit. {e}")
            return None
        if snapshot is None:
            report.snapshot_error = "previous build not found"
            logger.error("❌ FAILED to get previous commit. Previous build not found.")
        return snapshot

    async def reconcile(self, endpoints: List[Endpoint]) -> ReconciliationReport:
        """
        Repair missing DTOs in place.

        The snapshot is only requested when something is missing, and at
        most once per call. Every DTO left unresolved gets exactly one gap.
        """
        report = ReconciliationReport()
        missing = self.find_missing(endpoints)
        if not missing:
            logger.info("✅ No missing DTOs, skipping reconciliation")
            return report

        report.missing = [HistoricalSnapshot.full_name(e.name, d) for e, d in missing]
        logger.info(f"🧩 {len(missing)} missing DTO(s), consulting previous build")
        snapshot = await self._load_snapshot(report)

        for endpoint, dto_name in missing:
            full_name = HistoricalSnapshot.full_name(endpoint.name, dto_name)
            logger.info(f"Missing DTO: {full_name}.")
            if snapshot is None:
                reason = f"previous build unavailable: {report.snapshot_error}"
            else:
                old_dto = snapshot.get(endpoint.name, dto_name)
                if old_dto is not None:
                    logger.info("  Using previous commit version.")
                    endpoint.add_old_dto(dto_name, old_dto)
                    report.repaired.append(full_name)
                    continue
                reason = "not present in previous build"
            logger.warning(f"  ⚠️ FAILED to find dto for {full_name}: {reason}")
            report.gaps.append(ReconciliationGap(endpoint.name, dto_name, reason))

        logger.info(f"🧩 Reconciliation: {len(report.repaired)} repaired, {len(report.gaps)} unresolved")
        return report
