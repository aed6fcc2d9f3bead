"""Tests for the in-process change feeds."""

import asyncio
import pytest

from ledgersync.database.change_feed import ChangeEvent, ChangeFeedHub, ChangeType
from ledgersync.domain.errors import ListenerSubscriptionError


async def collect(feed):
    return [event async for event in feed]


async def test_events_delivered_in_order(make_tuition):
    hub = ChangeFeedHub("Tuition")
    feed = hub.subscribe()
    record = make_tuition()

    hub.publish(ChangeEvent(ChangeType.ADDED, record))
    hub.publish(ChangeEvent(ChangeType.MODIFIED, record))
    hub.publish(ChangeEvent(ChangeType.REMOVED, record))
    hub.close()

    events = await collect(feed)
    assert [e.type for e in events] == [ChangeType.ADDED, ChangeType.MODIFIED, ChangeType.REMOVED]
    assert all(e.record_id == "tp-1" for e in events)


async def test_every_subscriber_gets_every_event(make_tuition):
    hub = ChangeFeedHub("Tuition")
    first = hub.subscribe()
    second = hub.subscribe()

    hub.publish(ChangeEvent(ChangeType.ADDED, make_tuition()))

    assert first.pending == 1
    assert second.pending == 1
    assert hub.subscriber_count == 2


async def test_events_before_subscribe_are_not_delivered(make_tuition):
    hub = ChangeFeedHub("Tuition")
    hub.publish(ChangeEvent(ChangeType.ADDED, make_tuition()))

    feed = hub.subscribe()

    assert feed.pending == 0


async def test_close_detaches_and_wakes_consumer():
    hub = ChangeFeedHub("Payroll")
    feed = hub.subscribe()
    consumer = asyncio.create_task(collect(feed))
    await asyncio.sleep(0)

    feed.close()

    assert await asyncio.wait_for(consumer, timeout=1.0) == []
    assert feed.closed
    assert hub.subscriber_count == 0


async def test_fail_breaks_open_feeds(make_tuition):
    hub = ChangeFeedHub("Payroll")
    feed = hub.subscribe()
    hub.publish(ChangeEvent(ChangeType.ADDED, make_tuition()))

    hub.fail(RuntimeError("socket closed"))

    # Events queued before the failure are still delivered
    assert (await anext(feed)).type == ChangeType.ADDED
    with pytest.raises(ListenerSubscriptionError, match="socket closed"):
        await anext(feed)
    assert feed.closed
    assert hub.subscriber_count == 0


async def test_publish_after_close_is_dropped(make_tuition):
    hub = ChangeFeedHub("Tuition")
    feed = hub.subscribe()
    feed.close()

    hub.publish(ChangeEvent(ChangeType.ADDED, make_tuition()))

    assert await collect(feed) == []
