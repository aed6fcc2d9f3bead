"""Tests for SummaryService."""

from decimal import Decimal

from ledgersync.domain.entities import EntryKind, EntryStatus
from ledgersync.domain.projection import project_payroll, project_tuition
from ledgersync.domain.summary import SummaryService


async def test_empty_ledger_stats(store):
    stats = await SummaryService(store.ledger).get_stats()

    assert stats.total_entries == 0
    assert stats.net_balance == Decimal("0")


async def test_stats_counts_and_totals(store, make_tuition, make_payroll, make_entry):
    """Test totals include validated entries only."""
    await store.ledger.create_entry(project_tuition(make_tuition("tp-1")))
    await store.ledger.create_entry(
        project_tuition(make_tuition("tp-2", amount=Decimal("50000"), status="pending"))
    )
    await store.ledger.create_entry(project_payroll(make_payroll()))
    await store.ledger.create_entry(make_entry())
    await store.ledger.create_entry(
        make_entry(kind=EntryKind.INFLOW, description="PTA gift", amount=Decimal("10000"))
    )
    await store.ledger.create_entry(
        make_entry(description="Voided", status=EntryStatus.CANCELLED)
    )

    stats = await SummaryService(store.ledger).get_stats()

    assert stats.total_entries == 6
    assert stats.tuition_entries == 2
    assert stats.payroll_entries == 1
    assert stats.manual_entries == 3
    assert stats.total_inflows == Decimal("160000")
    assert stats.total_outflows == Decimal("825000")
    assert stats.net_balance == Decimal("-665000")
