"""In-process change feeds for source registers.

A register owns one ChangeFeedHub. Each subscriber gets its own ChangeFeed
backed by an asyncio.Queue, so events are delivered to every subscriber in
the order the register published them.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Union

from ledgersync.domain.entities import SourceRecord
from ledgersync.domain.errors import ListenerSubscriptionError

logger = logging.getLogger(__name__)


class ChangeType(str, Enum):
    """Kind of change announced on a feed."""

    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclass(frozen=True)
class ChangeEvent:
    """One change to a source record.

    For REMOVED events the record is the last known state before deletion.
    """

    type: ChangeType
    record: SourceRecord

    @property
    def record_id(self) -> str:
        return self.record.id


class _Closed:
    pass


_CLOSED = _Closed()

_FeedItem = Union[ChangeEvent, BaseException, _Closed]


class ChangeFeed:
    """Async iterator over the change events of one subscription."""

    def __init__(self, hub: "ChangeFeedHub"):
        self._hub = hub
        self._queue: asyncio.Queue[_FeedItem] = asyncio.Queue()
        self._closed = False

    @property
    def name(self) -> str:
        return self._hub.name

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Number of events waiting to be consumed."""
        return self._queue.qsize()

    def _push(self, item: _FeedItem) -> None:
        if not self._closed:
            self._queue.put_nowait(item)

    def __aiter__(self) -> "ChangeFeed":
        return self

    async def __anext__(self) -> ChangeEvent:
        if self._closed:
            raise StopAsyncIteration
        item = await self._queue.get()
        if isinstance(item, _Closed) or self._closed:
            self._closed = True
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            self._closed = True
            self._hub._detach(self)
            raise ListenerSubscriptionError(f"{self.name} feed failed: {item}") from item
        return item

    def close(self) -> None:
        """Stop the subscription. Pending events are discarded."""
        if self._closed:
            return
        self._closed = True
        self._hub._detach(self)
        # Wake a consumer blocked on get()
        self._queue.put_nowait(_CLOSED)


class ChangeFeedHub:
    """Publisher side of a register's change feed."""

    def __init__(self, name: str):
        self.name = name
        self._feeds: list[ChangeFeed] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._feeds)

    def subscribe(self) -> ChangeFeed:
        feed = ChangeFeed(self)
        self._feeds.append(feed)
        logger.debug("New %s feed subscriber (%d open)", self.name, len(self._feeds))
        return feed

    def publish(self, event: ChangeEvent) -> None:
        for feed in list(self._feeds):
            feed._push(event)

    def fail(self, error: BaseException) -> None:
        """Break every open feed with the given error."""
        logger.error("%s feed failed: %s", self.name, error)
        for feed in list(self._feeds):
            feed._push(error)

    def close(self) -> None:
        """End every open feed."""
        for feed in list(self._feeds):
            feed.close()

    def _detach(self, feed: ChangeFeed) -> None:
        if feed in self._feeds:
            self._feeds.remove(feed)
