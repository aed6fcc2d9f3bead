"""Tests for ConsistencyService."""

from dataclasses import replace
import pytest

from ledgersync.domain.consistency import COMPLETENESS, ORPHAN, ConsistencyService
from ledgersync.domain.entities import Origin
from ledgersync.domain.projection import project_payroll, project_tuition


@pytest.fixture
def consistency(store, orchestrator):
    return ConsistencyService(store.ledger, store.tuition, store.payroll, orchestrator)


async def test_empty_ledger_is_consistent(consistency):
    report = await consistency.validate()

    assert report.is_consistent
    assert report.missing_by_origin == {Origin.TUITION: 0, Origin.PAYROLL: 0}
    assert report.orphan_count == 0


async def test_validate_reports_missing_completed_records(
    store, consistency, make_tuition, make_payroll
):
    """Test only completed records are required to have an entry."""
    await store.tuition.create_record(make_tuition("tp-1"))
    await store.tuition.create_record(make_tuition("tp-2", status="pending"))
    await store.payroll.create_record(make_payroll("pr-1"))
    await store.payroll.create_record(make_payroll("pr-2", status="inactive"))

    report = await consistency.validate()

    assert not report.is_consistent
    assert report.missing_by_origin == {Origin.TUITION: 1, Origin.PAYROLL: 1}
    missing_ids = {v.origin_id for v in report.violations if v.invariant == COMPLETENESS}
    assert missing_ids == {"tp-1", "pr-1"}


async def test_validate_reports_orphans(store, consistency, make_tuition):
    orphan_id = await store.ledger.create_entry(project_tuition(make_tuition("gone")))

    report = await consistency.validate()

    assert report.orphan_count == 1
    orphans = [v for v in report.violations if v.invariant == ORPHAN]
    assert orphans[0].entry_id == orphan_id
    assert orphans[0].origin_id == "gone"


async def test_manual_entries_are_never_orphans(store, consistency, make_entry):
    await store.ledger.create_entry(make_entry())

    report = await consistency.validate()

    assert report.is_consistent


async def test_repair_restores_consistency(
    store, consistency, make_tuition, make_payroll
):
    await store.tuition.create_record(make_tuition("tp-1"))
    await store.payroll.create_record(make_payroll("pr-1"))
    await store.ledger.create_entry(project_payroll(make_payroll("pr-gone")))

    repair = await consistency.repair()

    assert repair.created_by_origin == {Origin.TUITION: 1, Origin.PAYROLL: 1}
    assert repair.total_created == 2
    assert repair.orphans_removed == 1
    assert repair.errors == []
    assert (await consistency.validate()).is_consistent


async def test_repair_is_idempotent(store, consistency, make_tuition):
    """Test a second repair with no source changes does nothing."""
    await store.tuition.create_record(make_tuition())

    await consistency.repair()
    entries_after_first = await store.ledger.list_entries()
    second = await consistency.repair()

    assert second.total_created == 0
    assert second.orphans_removed == 0
    assert await store.ledger.list_entries() == entries_after_first


async def test_repair_reports_refused_duplicates(store, consistency, make_tuition):
    """Test a record blocked by a manual duplicate is reported, not forced in."""
    record = make_tuition()
    await store.tuition.create_record(record)
    manual = replace(project_tuition(record), origin=Origin.MANUAL, origin_id=None)
    await store.ledger.create_entry(manual)

    repair = await consistency.repair()

    assert repair.total_created == 0
    assert len(repair.errors) == 1
    assert "tp-1" in repair.errors[0]
    assert len(await store.ledger.list_entries()) == 1


async def test_repair_reports_unmappable_records(store, consistency, make_tuition):
    await store.tuition.create_record(make_tuition(student_name=None))

    repair = await consistency.repair()

    assert repair.total_created == 0
    assert len(repair.errors) == 1
    assert "missing required field" in repair.errors[0]
