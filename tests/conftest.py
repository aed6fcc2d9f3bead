"""Shared pytest fixtures for ledgersync tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from ledgersync.database.factories import create_sqlite_store
from ledgersync.domain.deduplication import DeduplicationService
from ledgersync.domain.entities import (
    EntryKind,
    EntryStatus,
    LedgerEntry,
    Origin,
    PayrollEntry,
    TuitionPayment,
)
from ledgersync.domain.notifications import NotificationBus
from ledgersync.domain.sync import SyncOrchestrator
from ledgersync.engine import ReconciliationEngine


@pytest.fixture
def db_path():
    """Create a temporary database file path."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    yield path

    if os.path.exists(path):
        os.unlink(path)


@pytest.fixture
async def store(db_path):
    """Create a store on a temporary database with the schema in place."""
    store = create_sqlite_store(database_path=db_path)
    await store.initialize_schema()

    yield store

    await store.disconnect()


@pytest.fixture
def notifications():
    """Create a notification bus that records everything published on it."""
    bus = NotificationBus()
    bus.received = []
    bus.subscribe(bus.received.append)
    return bus


@pytest.fixture
def dedup(store):
    """Create a DeduplicationService on the temporary store."""
    return DeduplicationService(store.ledger)


@pytest.fixture
async def orchestrator(store, dedup, notifications):
    """Create a SyncOrchestrator that is closed after the test."""
    orchestrator = SyncOrchestrator(
        store.ledger,
        store.tuition,
        store.payroll,
        dedup=dedup,
        notifications=notifications,
    )

    yield orchestrator

    await orchestrator.close()


@pytest.fixture
async def engine(store, notifications):
    """Create a ReconciliationEngine that is closed after the test."""
    engine = ReconciliationEngine.from_store(store, notifications=notifications)

    yield engine

    await engine.close()


@pytest.fixture
def make_tuition():
    """Build tuition payments with sensible defaults."""

    def _make(record_id="tp-1", **overrides):
        values = dict(
            id=record_id,
            student_name="Rakoto Jean",
            amount=Decimal("150000"),
            payment_date=date(2024, 10, 5),
            payment_method="cash",
            status="paid",
            class_name="6eme A",
            period="October 2024",
            reference="REC-001",
        )
        values.update(overrides)
        return TuitionPayment(**values)

    return _make


@pytest.fixture
def make_payroll():
    """Build payroll entries with sensible defaults."""

    def _make(record_id="pr-1", **overrides):
        values = dict(
            id=record_id,
            employee_id="emp042",
            employee_name="Rasoa Marie",
            net_salary=Decimal("800000"),
            effective_date=date(2024, 10, 31),
            payment_month=10,
            payment_year=2024,
            position="Librarian",
            department="Sciences",
            status="active",
        )
        values.update(overrides)
        return PayrollEntry(**values)

    return _make


@pytest.fixture
def make_entry():
    """Build manual ledger entries with sensible defaults."""

    def _make(**overrides):
        values = dict(
            kind=EntryKind.OUTFLOW,
            category="Supplies",
            description="Chalk and markers",
            amount=Decimal("25000"),
            date=date(2024, 10, 10),
            payment_method="Cash",
            status=EntryStatus.VALIDATED,
            origin=Origin.MANUAL,
        )
        values.update(overrides)
        return LedgerEntry(**values)

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
