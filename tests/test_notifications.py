"""Tests for the notification bus."""

import logging
from decimal import Decimal

from ledgersync.domain.entities import Origin
from ledgersync.domain.notifications import NotificationBus, SyncCompleted, SyncError


def test_publish_reaches_observers_in_order():
    bus = NotificationBus()
    calls = []
    bus.subscribe(lambda n: calls.append(("first", n)))
    bus.subscribe(lambda n: calls.append(("second", n)))
    notification = SyncCompleted(origin=Origin.TUITION, origin_id="tp-1", amount=Decimal("10"))

    bus.publish(notification)

    assert calls == [("first", notification), ("second", notification)]
    assert notification.time is not None


def test_unsubscribe():
    bus = NotificationBus()
    received = []
    unsubscribe = bus.subscribe(received.append)

    unsubscribe()
    unsubscribe()
    bus.publish(SyncError(origin=Origin.PAYROLL, origin_id=None, message="boom"))

    assert received == []


def test_failing_observer_does_not_stop_others(caplog):
    bus = NotificationBus()
    received = []

    def broken(notification):
        raise RuntimeError("observer bug")

    bus.subscribe(broken)
    bus.subscribe(received.append)

    with caplog.at_level(logging.ERROR, logger="ledgersync"):
        bus.publish(SyncError(origin=Origin.TUITION, origin_id="tp-1", message="boom"))

    assert len(received) == 1
    assert "SyncError" in caplog.text
