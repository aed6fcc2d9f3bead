"""Notifications emitted for external observers."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, UTC
from decimal import Decimal
from typing import Callable, Optional, Union

from ledgersync.domain.entities import Origin

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class SyncCompleted:
    """A source record produced a new ledger entry."""

    origin: Origin
    origin_id: str
    amount: Decimal
    time: datetime = field(default_factory=_now)


@dataclass(frozen=True)
class SyncError:
    """A source record could not be synced."""

    origin: Origin
    origin_id: Optional[str]
    message: str
    time: datetime = field(default_factory=_now)


@dataclass(frozen=True)
class DeduplicationCompleted:
    """Outcome of one scheduled deduplication cycle."""

    removed: int
    kept: int
    errors: tuple[str, ...] = ()
    time: datetime = field(default_factory=_now)


@dataclass(frozen=True)
class DuplicateAlert:
    """Advisory raised when a sweep finds more duplicates than expected."""

    duplicates_found: int
    threshold: int
    time: datetime = field(default_factory=_now)


Notification = Union[SyncCompleted, SyncError, DeduplicationCompleted, DuplicateAlert]
Observer = Callable[[Notification], None]


class NotificationBus:
    """Fan-out of notifications to registered observers.

    Observers are called synchronously in registration order. An observer
    that raises is logged and skipped; it never affects the publisher.
    """

    def __init__(self):
        self._observers: list[Observer] = []

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer. Returns a callable that unregisters it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def publish(self, notification: Notification) -> None:
        for observer in list(self._observers):
            try:
                observer(notification)
            except Exception:
                logger.exception(
                    "Observer %r failed on %s", observer, type(notification).__name__
                )
