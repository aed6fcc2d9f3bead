"""Tests for DeduplicationService."""

from datetime import date, datetime
from decimal import Decimal

from ledgersync.domain.errors import NotFoundError
from ledgersync.domain.signature import signature


async def test_analyze_empty_ledger(dedup):
    analysis = await dedup.analyze()

    assert analysis.total_entries == 0
    assert analysis.duplicates_found == 0
    assert not analysis.has_duplicates


async def test_analyze_reports_groups(store, dedup, make_entry):
    """Test a group of three identical entries counts as two duplicates."""
    for _ in range(3):
        await store.ledger.create_entry(make_entry())
    await store.ledger.create_entry(make_entry(description="Paper"))

    analysis = await dedup.analyze()

    assert analysis.total_entries == 4
    assert analysis.duplicates_found == 2
    assert len(analysis.duplicate_groups) == 1
    group = analysis.duplicate_groups[0]
    assert group.count == 3
    assert group.signature == signature(make_entry())
    assert group.sample_description == "Chalk and markers"
    assert group.amount == Decimal("25000")
    assert group.date == date(2024, 10, 10)


async def test_analyze_is_read_only(store, dedup, make_entry):
    await store.ledger.create_entry(make_entry())
    await store.ledger.create_entry(make_entry())

    await dedup.analyze()

    assert len(await store.ledger.list_entries()) == 2


async def test_remove_keeps_most_recently_created(store, dedup, make_entry):
    """Test removal keeps the newest entry of each group."""
    oldest = await store.ledger.create_entry(make_entry(created_at=datetime(2024, 10, 1, 8, 0)))
    newest = await store.ledger.create_entry(make_entry(created_at=datetime(2024, 10, 3, 8, 0)))
    middle = await store.ledger.create_entry(make_entry(created_at=datetime(2024, 10, 2, 8, 0)))
    other = await store.ledger.create_entry(make_entry(description="Paper"))

    removal = await dedup.remove()

    assert removal.success
    assert removal.total_entries == 4
    assert removal.duplicates_removed == 2
    assert removal.kept == 2
    remaining = {entry.id for entry in await store.ledger.list_entries()}
    assert remaining == {newest, other}
    assert oldest not in remaining
    assert middle not in remaining


async def test_remove_leaves_no_duplicates(store, dedup, make_entry):
    """Test analyze finds nothing right after remove."""
    for amount in ("100", "100", "200", "200", "200"):
        await store.ledger.create_entry(make_entry(amount=Decimal(amount)))

    await dedup.remove()
    analysis = await dedup.analyze()

    assert analysis.duplicates_found == 0
    assert analysis.total_entries == 2


async def test_remove_without_duplicates(store, dedup, make_entry):
    await store.ledger.create_entry(make_entry())

    removal = await dedup.remove()

    assert removal.duplicates_removed == 0
    assert removal.kept == 1


async def test_remove_records_failed_deletions(store, dedup, make_entry, monkeypatch):
    """Test one failing deletion is reported and the others still happen."""
    for _ in range(3):
        await store.ledger.create_entry(make_entry())

    real_delete = store.ledger.delete_entry
    calls = []

    async def flaky_delete(entry_id):
        calls.append(entry_id)
        if len(calls) == 1:
            raise NotFoundError(f"Ledger entry {entry_id} not found")
        await real_delete(entry_id)

    monkeypatch.setattr(store.ledger, "delete_entry", flaky_delete)

    removal = await dedup.remove()

    assert not removal.success
    assert len(removal.errors) == 1
    assert removal.duplicates_removed == 1
    assert removal.kept == 2


async def test_prevent_on_create_refuses_duplicate(store, dedup, make_entry):
    existing_id = await store.ledger.create_entry(make_entry())

    check = await dedup.prevent_on_create(make_entry(notes="different notes"))

    assert not check.allowed
    assert check.existing_id == existing_id


async def test_prevent_on_create_allows_new_entry(store, dedup, make_entry):
    await store.ledger.create_entry(make_entry())

    check = await dedup.prevent_on_create(make_entry(amount=Decimal("30000")))

    assert check.allowed
    assert check.existing_id is None


async def test_remove_origin_duplicates_ignores_manual_entries(store, dedup, make_entry):
    for _ in range(2):
        await store.ledger.create_entry(make_entry())

    removal = await dedup.remove_origin_duplicates()

    assert removal.duplicates_removed == 0
    assert removal.total_entries == 2
    assert removal.kept == 2


async def test_prevent_on_create_matches_rounded_amount(store, dedup, make_entry):
    """Test the check uses the signature, not exact field equality."""
    existing_id = await store.ledger.create_entry(make_entry())

    check = await dedup.prevent_on_create(
        make_entry(amount=Decimal("25000.40"), description=" Chalk and markers ")
    )

    assert check.existing_id == existing_id


async def test_prevent_on_create_does_not_scan_ledger(store, dedup, make_entry, monkeypatch):
    await store.ledger.create_entry(make_entry())

    async def no_full_scan():
        raise AssertionError("list_entries called")

    monkeypatch.setattr(store.ledger, "list_entries", no_full_scan)

    assert not (await dedup.prevent_on_create(make_entry())).allowed
    assert (await dedup.prevent_on_create(make_entry(date=date(2024, 10, 11)))).allowed
