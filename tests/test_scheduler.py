"""Tests for DeduplicationScheduler."""

import asyncio
import pytest

from ledgersync.domain.notifications import DeduplicationCompleted, DuplicateAlert
from ledgersync.domain.scheduler import DeduplicationScheduler, SchedulerConfig


@pytest.fixture
def scheduler(dedup, notifications):
    return DeduplicationScheduler(
        dedup, notifications=notifications, config=SchedulerConfig(interval=0.05, alert_threshold=1)
    )


async def add_copies(store, make_entry, count, **overrides):
    for _ in range(count):
        await store.ledger.create_entry(make_entry(**overrides))


async def test_force_check_removes_duplicates(store, scheduler, make_entry, notifications):
    await add_copies(store, make_entry, 3)

    result = await scheduler.force_check()

    assert result.duplicates_found == 2
    assert result.duplicates_removed == 2
    assert result.kept == 1
    assert result.errors == []
    assert len(await store.ledger.list_entries()) == 1
    # Manual checks are not broadcast
    assert notifications.received == []


async def test_force_check_clean_ledger(store, scheduler, make_entry):
    await add_copies(store, make_entry, 1)

    result = await scheduler.force_check()

    assert result.duplicates_found == 0
    assert result.duplicates_removed == 0
    assert result.kept == 1
    assert scheduler.get_status().last_check is not None


async def test_run_cycle_alerts_above_threshold(store, scheduler, make_entry, notifications):
    await add_copies(store, make_entry, 3)

    await scheduler.run_cycle()

    alerts = [n for n in notifications.received if isinstance(n, DuplicateAlert)]
    assert len(alerts) == 1
    assert alerts[0].duplicates_found == 2
    assert alerts[0].threshold == 1
    completed = [n for n in notifications.received if isinstance(n, DeduplicationCompleted)]
    assert len(completed) == 1
    assert completed[0].removed == 2
    assert completed[0].kept == 1


async def test_run_cycle_no_alert_at_threshold(store, scheduler, make_entry, notifications):
    await add_copies(store, make_entry, 2)

    await scheduler.run_cycle()

    assert not any(isinstance(n, DuplicateAlert) for n in notifications.received)
    assert any(isinstance(n, DeduplicationCompleted) for n in notifications.received)


async def test_silent_suppresses_alert(store, dedup, make_entry, notifications):
    scheduler = DeduplicationScheduler(
        dedup,
        notifications=notifications,
        config=SchedulerConfig(alert_threshold=0, silent=True),
    )
    await add_copies(store, make_entry, 3)

    result = await scheduler.run_cycle()

    assert result.duplicates_removed == 2
    assert not any(isinstance(n, DuplicateAlert) for n in notifications.received)


async def test_start_runs_periodically(store, scheduler, make_entry, notifications):
    assert scheduler.start()
    assert scheduler.is_running

    await asyncio.sleep(0.02)
    await add_copies(store, make_entry, 2)
    async with asyncio.timeout(2.0):
        while len(await store.ledger.list_entries()) > 1:
            await asyncio.sleep(0.02)

    await scheduler.stop()

    assert not scheduler.is_running
    cycles = [n for n in notifications.received if isinstance(n, DeduplicationCompleted)]
    assert len(cycles) >= 2


async def test_start_twice_is_noop(scheduler):
    assert scheduler.start()
    assert not scheduler.start()

    await scheduler.stop()


async def test_start_disabled(scheduler):
    assert not scheduler.start(enabled=False)
    assert not scheduler.is_running
    assert not scheduler.get_status().config.enabled


async def test_stop_when_not_running(scheduler):
    await scheduler.stop()

    assert not scheduler.get_status().is_running


async def test_update_config_restarts_running_sweep(scheduler):
    scheduler.start()

    config = await scheduler.update_config(interval=1.0, alert_threshold=10)

    assert config.interval == 1.0
    assert config.alert_threshold == 10
    assert scheduler.is_running
    assert scheduler.get_status().config == config

    await scheduler.cleanup()
    assert not scheduler.is_running


async def test_update_config_when_stopped(scheduler):
    await scheduler.update_config(silent=True)

    assert scheduler.config.silent
    assert not scheduler.is_running
