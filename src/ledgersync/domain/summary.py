"""Ledger statistics service."""

from dataclasses import dataclass
from decimal import Decimal

from ledgersync.database.base import LedgerGateway
from ledgersync.domain.entities import EntryKind, EntryStatus, Origin


@dataclass(frozen=True)
class LedgerStats:
    """Counts per origin and validated money movement.

    Totals include only validated entries; pending and cancelled entries
    are counted but carry no money.
    """

    total_entries: int
    tuition_entries: int
    payroll_entries: int
    manual_entries: int
    total_inflows: Decimal
    total_outflows: Decimal

    @property
    def net_balance(self) -> Decimal:
        return self.total_inflows - self.total_outflows


class SummaryService:
    """Service for summarizing the ledger."""

    def __init__(self, ledger: LedgerGateway):
        self.ledger = ledger

    async def get_stats(self) -> LedgerStats:
        entries = await self.ledger.list_entries()

        counts = {origin: 0 for origin in Origin}
        inflows = Decimal("0")
        outflows = Decimal("0")
        for entry in entries:
            counts[entry.origin] += 1
            if entry.status != EntryStatus.VALIDATED:
                continue
            if entry.kind == EntryKind.INFLOW:
                inflows += entry.amount
            else:
                outflows += entry.amount

        return LedgerStats(
            total_entries=len(entries),
            tuition_entries=counts[Origin.TUITION],
            payroll_entries=counts[Origin.PAYROLL],
            manual_entries=counts[Origin.MANUAL],
            total_inflows=inflows,
            total_outflows=outflows,
        )
