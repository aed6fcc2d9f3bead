"""Consistency validation and repair between the registers and the ledger."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from ledgersync.database.base import LedgerGateway, SourceRegister
from ledgersync.domain.entities import LedgerEntry, Origin, SourceRecord
from ledgersync.domain.errors import DomainError, NotFoundError
from ledgersync.domain.projection import is_completed
from ledgersync.domain.sync import SyncOrchestrator, SyncOutcome

logger = logging.getLogger(__name__)

COMPLETENESS = "completeness"
ORPHAN = "orphan"


@dataclass(frozen=True)
class InvariantViolation:
    """One detected inconsistency. Reported, never raised."""

    invariant: str
    origin: Origin
    origin_id: str
    entry_id: Optional[int] = None
    message: str = ""


@dataclass
class ConsistencyReport:
    missing_by_origin: dict[Origin, int]
    orphan_count: int
    issues: list[str] = field(default_factory=list)
    violations: list[InvariantViolation] = field(default_factory=list)

    @property
    def is_consistent(self) -> bool:
        return not self.issues


@dataclass
class RepairReport:
    created_by_origin: dict[Origin, int]
    orphans_removed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def total_created(self) -> int:
        return sum(self.created_by_origin.values())


@dataclass
class _Scan:
    missing: list[tuple[Origin, SourceRecord]]
    orphans: list[LedgerEntry]


class ConsistencyService:
    """Compares both registers against the ledger and fixes the differences."""

    def __init__(
        self,
        ledger: LedgerGateway,
        tuition_register: SourceRegister,
        payroll_register: SourceRegister,
        orchestrator: SyncOrchestrator,
    ):
        """Initialize consistency service.

        Args:
            ledger: Ledger gateway
            tuition_register: Register of tuition payments
            payroll_register: Register of payroll entries
            orchestrator: Used for the idempotent create path during repair
        """
        self.ledger = ledger
        self.registers = {
            Origin.TUITION: tuition_register,
            Origin.PAYROLL: payroll_register,
        }
        self.orchestrator = orchestrator

    async def validate(self) -> ConsistencyReport:
        """Report completed records without an entry and entries without a record.

        Raises:
            GatewayError: If a register or the ledger cannot be listed
        """
        scan = await self._scan()

        missing_by_origin = {origin: 0 for origin in self.registers}
        violations = []
        for origin, record in scan.missing:
            missing_by_origin[origin] += 1
            violations.append(
                InvariantViolation(
                    invariant=COMPLETENESS,
                    origin=origin,
                    origin_id=record.id,
                    message=f"{origin.value} record '{record.id}' has no ledger entry",
                )
            )
        for entry in scan.orphans:
            violations.append(
                InvariantViolation(
                    invariant=ORPHAN,
                    origin=entry.origin,
                    origin_id=entry.origin_id,
                    entry_id=entry.id,
                    message=(
                        f"Ledger entry {entry.id} references missing "
                        f"{entry.origin.value} record '{entry.origin_id}'"
                    ),
                )
            )

        issues = []
        for origin, count in missing_by_origin.items():
            if count:
                issues.append(f"{count} {origin.value.lower()} record(s) without a ledger entry")
        if scan.orphans:
            issues.append(f"{len(scan.orphans)} orphaned ledger entr{'y' if len(scan.orphans) == 1 else 'ies'}")

        return ConsistencyReport(
            missing_by_origin=missing_by_origin,
            orphan_count=len(scan.orphans),
            issues=issues,
            violations=violations,
        )

    async def repair(self) -> RepairReport:
        """Create missing entries and delete orphans.

        Creation goes through the orchestrator's idempotent add path, so
        running repair again with no source changes creates nothing.
        """
        scan = await self._scan()
        report = RepairReport(created_by_origin={origin: 0 for origin in self.registers})

        for origin, record in scan.missing:
            try:
                outcome = await self.orchestrator.on_record_added(record)
            except DomainError as e:
                report.errors.append(f"{origin.value} {record.id}: {e}")
                continue
            if outcome == SyncOutcome.CREATED:
                report.created_by_origin[origin] += 1
            elif outcome == SyncOutcome.REFUSED:
                report.errors.append(f"{origin.value} {record.id}: duplicate entry refused")

        for entry in scan.orphans:
            try:
                await self.ledger.delete_entry(entry.id)
            except NotFoundError:
                continue
            except DomainError as e:
                report.errors.append(f"Orphan {entry.id}: {e}")
                continue
            report.orphans_removed += 1

        logger.info(
            "Repair created %d entr%s, removed %d orphan(s), %d error(s)",
            report.total_created,
            "y" if report.total_created == 1 else "ies",
            report.orphans_removed,
            len(report.errors),
        )
        return report

    async def _scan(self) -> _Scan:
        records = {
            origin: await register.list_records() for origin, register in self.registers.items()
        }
        entries = await self.ledger.list_entries()

        mapped = {
            (entry.origin, entry.origin_id) for entry in entries if not entry.is_manual
        }
        missing = [
            (origin, record)
            for origin, origin_records in records.items()
            for record in origin_records
            if is_completed(record) and (origin, record.id) not in mapped
        ]

        known_ids = {
            origin: {record.id for record in origin_records}
            for origin, origin_records in records.items()
        }
        orphans = [
            entry
            for entry in entries
            if not entry.is_manual and entry.origin_id not in known_ids.get(entry.origin, set())
        ]
        return _Scan(missing=missing, orphans=orphans)
