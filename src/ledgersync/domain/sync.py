"""Sync orchestrator keeping the ledger in step with the source registers.

One listener per register subscribes to the register's change feed and
processes its events in order on a dedicated asyncio task. Every event
handler is idempotent, so replayed or duplicated notifications converge on
the same ledger state.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, UTC
from enum import Enum
from typing import Optional

from ledgersync.database.base import LedgerGateway, SourceRegister
from ledgersync.database.change_feed import ChangeEvent, ChangeFeed, ChangeType
from ledgersync.domain.deduplication import DeduplicationService
from ledgersync.domain.entities import Origin, SourceRecord
from ledgersync.domain.errors import (
    DomainError,
    ListenerSubscriptionError,
    NotFoundError,
    duplicate_signature,
)
from ledgersync.domain.notifications import NotificationBus, SyncCompleted, SyncError
from ledgersync.domain.projection import derived_fields, origin_of, project

logger = logging.getLogger(__name__)


class ListenerState(str, Enum):
    """Lifecycle of one register's listener."""

    UNINITIALIZED = "uninitialized"
    SUBSCRIBING = "subscribing"
    ACTIVE = "active"
    ERROR = "error"
    STOPPED = "stopped"


class SyncOutcome(str, Enum):
    """What a single event did to the ledger."""

    CREATED = "created"
    EXISTING = "existing"
    REFUSED = "refused"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    DELETED = "deleted"
    ABSENT = "absent"


@dataclass(frozen=True)
class RegisterStatus:
    state: ListenerState
    attached: bool
    records_processed: int
    last_error: Optional[str] = None


@dataclass
class SyncStatus:
    """Snapshot of the orchestrator's state."""

    registers: dict[Origin, RegisterStatus]
    total_synced_records: int
    last_sync_time: datetime
    errors: list[str] = field(default_factory=list)

    @property
    def active_listeners(self) -> int:
        return sum(1 for status in self.registers.values() if status.attached)

    @property
    def is_active(self) -> bool:
        return self.active_listeners > 0


@dataclass
class SyncResult:
    synced_records: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


@dataclass
class BackfillResult:
    tuition_synced: int = 0
    payroll_synced: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class HealthReport:
    issues: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    @property
    def is_healthy(self) -> bool:
        return not self.issues


class _Listener:
    """One register's feed subscription and processing task."""

    def __init__(self, register: SourceRegister):
        self.register = register
        self.origin = register.origin
        self.state = ListenerState.UNINITIALIZED
        self.records_processed = 0
        self.last_error: Optional[str] = None
        self.feed: Optional[ChangeFeed] = None
        self.task: Optional[asyncio.Task] = None
        self.busy = False

    @property
    def attached(self) -> bool:
        return self.task is not None and not self.task.done()

    @property
    def has_pending_work(self) -> bool:
        if not self.attached or self.feed is None:
            return False
        return self.busy or self.feed.pending > 0

    def status(self) -> RegisterStatus:
        return RegisterStatus(
            state=self.state,
            attached=self.attached,
            records_processed=self.records_processed,
            last_error=self.last_error,
        )

    def reset(self) -> None:
        self.state = ListenerState.UNINITIALIZED
        self.records_processed = 0
        self.last_error = None
        self.feed = None
        self.task = None
        self.busy = False


class SyncOrchestrator:
    """Maps source records to ledger entries and keeps the mapping current.

    Instances own their listeners; create one per process (or per ledger)
    and release it with close(), or use it as an async context manager.
    """

    MAX_ERRORS = 100

    def __init__(
        self,
        ledger: LedgerGateway,
        tuition_register: SourceRegister,
        payroll_register: SourceRegister,
        dedup: Optional[DeduplicationService] = None,
        notifications: Optional[NotificationBus] = None,
        stale_after: timedelta = timedelta(minutes=10),
    ):
        """Initialize sync orchestrator.

        Args:
            ledger: Ledger gateway
            tuition_register: Register of tuition payments
            payroll_register: Register of payroll entries
            dedup: Service consulted before every create (defaults to one on the same ledger)
            notifications: Bus receiving SyncCompleted and SyncError
            stale_after: Age of the last sync after which health_check reports staleness
        """
        self.ledger = ledger
        self.dedup = dedup or DeduplicationService(ledger)
        self.notifications = notifications or NotificationBus()
        self.stale_after = stale_after
        self._listeners = {
            Origin.TUITION: _Listener(tuition_register),
            Origin.PAYROLL: _Listener(payroll_register),
        }
        self._errors: list[str] = []
        self._total_synced = 0
        self._last_sync_time = datetime.now(UTC)

    async def __aenter__(self) -> "SyncOrchestrator":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # Lifecycle

    async def initialize(self) -> SyncResult:
        """Backfill both registers and attach their live listeners.

        The feed is opened before the backfill so that changes made while
        backfilling are queued, then replayed idempotently once the
        listener attaches.

        Returns:
            SyncResult with the number of records synced and per-record errors
        """
        await self.cleanup()
        logger.info("Initializing ledger sync")

        result = SyncResult()
        for listener in self._listeners.values():
            listener_result = await self._start_listener(listener)
            result.synced_records += listener_result.synced_records
            result.errors.extend(listener_result.errors)

        self._last_sync_time = datetime.now(UTC)
        logger.info(
            "Ledger sync initialized: %d record(s) synced, %d error(s), %d listener(s) active",
            result.synced_records,
            len(result.errors),
            self.get_status().active_listeners,
        )
        return result

    async def restart(self) -> SyncResult:
        """Drop every listener and initialize again."""
        logger.info("Restarting ledger sync")
        await self.cleanup()
        return await self.initialize()

    async def cleanup(self) -> None:
        """Detach every listener and reset status to uninitialized."""
        tasks = []
        for listener in self._listeners.values():
            if listener.feed is not None:
                listener.feed.close()
            if listener.task is not None and not listener.task.done():
                listener.task.cancel()
                tasks.append(listener.task)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        for listener in self._listeners.values():
            listener.reset()
        self._errors.clear()
        self._total_synced = 0
        self._last_sync_time = datetime.now(UTC)

    async def close(self) -> None:
        await self.cleanup()

    async def drain(self, timeout: float = 5.0) -> None:
        """Wait until every attached listener has processed its queued events.

        Raises:
            TimeoutError: If events are still pending after the timeout
        """
        async with asyncio.timeout(timeout):
            while any(listener.has_pending_work for listener in self._listeners.values()):
                await asyncio.sleep(0.01)

    async def _start_listener(self, listener: _Listener) -> SyncResult:
        listener.state = ListenerState.SUBSCRIBING
        try:
            listener.feed = listener.register.subscribe()
        except DomainError as e:
            self._mark_error(listener, e)
            return SyncResult(errors=[f"{listener.origin.value}: {e}"])

        try:
            result = await self._backfill(listener)
        except DomainError as e:
            listener.feed.close()
            listener.feed = None
            self._mark_error(listener, e)
            return SyncResult(errors=[f"{listener.origin.value}: {e}"])

        listener.task = asyncio.create_task(
            self._consume(listener), name=f"ledgersync-{listener.origin.value.lower()}"
        )
        listener.state = ListenerState.ACTIVE
        logger.info("%s listener attached", listener.origin.value)
        return result

    # Backfill

    async def sync_all_existing_data(self) -> BackfillResult:
        """Run the idempotent backfill on both registers without touching listeners."""
        result = BackfillResult()
        for origin, listener in self._listeners.items():
            try:
                listener_result = await self._backfill(listener)
            except DomainError as e:
                result.errors.append(f"{origin.value}: {e}")
                continue
            if origin == Origin.TUITION:
                result.tuition_synced = listener_result.synced_records
            else:
                result.payroll_synced = listener_result.synced_records
            result.errors.extend(listener_result.errors)

        self._last_sync_time = datetime.now(UTC)
        return result

    async def _backfill(self, listener: _Listener) -> SyncResult:
        # Listing failures propagate: without the list there is no backfill
        records = await listener.register.list_records()
        result = SyncResult()
        for record in records:
            try:
                outcome = await self.on_record_added(record)
            except DomainError as e:
                self._record_failure(listener.origin, record.id, str(e))
                result.errors.append(f"{listener.origin.value} {record.id}: {e}")
                continue
            if outcome == SyncOutcome.REFUSED:
                result.errors.append(f"{listener.origin.value} {record.id}: duplicate entry refused")
                continue
            result.synced_records += 1

        listener.records_processed += result.synced_records
        logger.info(
            "Backfilled %s: %d of %d record(s)",
            listener.origin.value,
            result.synced_records,
            len(records),
        )
        return result

    # Live events

    async def _consume(self, listener: _Listener) -> None:
        try:
            async for event in listener.feed:
                listener.busy = True
                try:
                    await self._dispatch(listener, event)
                finally:
                    listener.busy = False
        except ListenerSubscriptionError as e:
            self._mark_error(listener, e)
            return
        except Exception as e:
            logger.exception("%s listener crashed", listener.origin.value)
            self._mark_error(listener, e)
            return

        if listener.state == ListenerState.ACTIVE:
            listener.state = ListenerState.STOPPED
            logger.info("%s feed ended", listener.origin.value)

    async def _dispatch(self, listener: _Listener, event: ChangeEvent) -> None:
        logger.debug("%s %s %s", listener.origin.value, event.type.value, event.record_id)
        try:
            if event.type == ChangeType.ADDED:
                await self.on_record_added(event.record)
            elif event.type == ChangeType.MODIFIED:
                await self.on_record_modified(event.record)
            elif event.type == ChangeType.REMOVED:
                await self.on_record_removed(listener.origin, event.record_id)
        except DomainError as e:
            self._record_failure(listener.origin, event.record_id, str(e))
            return

        listener.records_processed += 1
        self._last_sync_time = datetime.now(UTC)

    async def on_record_added(self, record: SourceRecord) -> SyncOutcome:
        """Create the ledger entry for a source record unless it already exists.

        Raises:
            MappingError: If the record cannot be projected
            GatewayError: If a store operation fails
        """
        origin = origin_of(record)
        existing = await self.ledger.find_by_origin(origin, record.id)
        if existing is not None:
            logger.debug("%s %s already mapped to entry %s", origin.value, record.id, existing.id)
            return SyncOutcome.EXISTING

        candidate = project(record)
        check = await self.dedup.prevent_on_create(candidate)
        if not check.allowed:
            # The matching entry may be this record's own, created concurrently
            if await self.ledger.find_by_origin(origin, record.id) is not None:
                return SyncOutcome.EXISTING
            self._record_failure(origin, record.id, duplicate_signature(check.existing_id))
            return SyncOutcome.REFUSED

        entry_id, created = await self.ledger.create_entry_if_absent(candidate)
        if not created:
            return SyncOutcome.EXISTING

        self._total_synced += 1
        logger.info("Created entry %d for %s %s", entry_id, origin.value, record.id)
        self.notifications.publish(
            SyncCompleted(origin=origin, origin_id=record.id, amount=candidate.amount)
        )
        return SyncOutcome.CREATED

    async def on_record_modified(self, record: SourceRecord) -> SyncOutcome:
        """Re-project a modified record onto its ledger entry.

        Only source-derived fields are written; notes and reference on the
        entry are kept. A record with no entry yet is handled as an add.
        """
        origin = origin_of(record)
        existing = await self.ledger.find_by_origin(origin, record.id)
        if existing is None:
            logger.info("No entry for modified %s %s, creating it", origin.value, record.id)
            return await self.on_record_added(record)

        projected = derived_fields(project(record))
        changes = {
            name: value for name, value in projected.items() if getattr(existing, name) != value
        }
        if not changes:
            return SyncOutcome.UNCHANGED

        await self.ledger.update_entry(existing.id, **changes)
        logger.info(
            "Updated entry %d for %s %s: %s",
            existing.id,
            origin.value,
            record.id,
            ", ".join(sorted(changes)),
        )
        return SyncOutcome.UPDATED

    async def on_record_removed(self, origin: Origin, record_id: str) -> SyncOutcome:
        """Delete the ledger entry mapped to a removed source record, if any."""
        existing = await self.ledger.find_by_origin(origin, record_id)
        if existing is None:
            return SyncOutcome.ABSENT
        try:
            await self.ledger.delete_entry(existing.id)
        except NotFoundError:
            # Removed concurrently, e.g. by a dedup sweep
            return SyncOutcome.ABSENT
        logger.info("Deleted entry %d for removed %s %s", existing.id, origin.value, record_id)
        return SyncOutcome.DELETED

    # Status

    def get_status(self) -> SyncStatus:
        """Return a snapshot of listener states, counters and recent errors."""
        return SyncStatus(
            registers={origin: listener.status() for origin, listener in self._listeners.items()},
            total_synced_records=self._total_synced,
            last_sync_time=self._last_sync_time,
            errors=list(self._errors),
        )

    def health_check(self) -> HealthReport:
        """Summarize what is wrong with the sync and how to fix it."""
        status = self.get_status()
        report = HealthReport()

        if not status.is_active:
            report.issues.append("Ledger sync is inactive")
            report.recommendations.append("Restart the ledger sync")

        for origin, register_status in status.registers.items():
            if not register_status.attached:
                report.issues.append(f"{origin.value} sync is inactive")
                if register_status.state == ListenerState.ERROR:
                    report.recommendations.append(
                        f"Check the {origin.value.lower()} register feed and restart"
                    )
                else:
                    report.recommendations.append(
                        f"Check the connection to the {origin.value.lower()} register"
                    )

        if status.errors:
            report.issues.append(f"{len(status.errors)} sync error(s) recorded")
            report.recommendations.append("Review the sync errors and restart")

        if datetime.now(UTC) - status.last_sync_time > self.stale_after:
            report.issues.append("Last sync is too old")
            report.recommendations.append("Check store connectivity and restart")

        return report

    # Error bookkeeping

    def _append_error(self, message: str) -> None:
        self._errors.append(message)
        if len(self._errors) > self.MAX_ERRORS:
            del self._errors[: len(self._errors) - self.MAX_ERRORS]

    def _record_failure(self, origin: Origin, origin_id: Optional[str], message: str) -> None:
        logger.warning("%s %s not synced: %s", origin.value, origin_id, message)
        self._append_error(f"{origin.value} {origin_id}: {message}")
        self.notifications.publish(SyncError(origin=origin, origin_id=origin_id, message=message))

    def _mark_error(self, listener: _Listener, error: BaseException) -> None:
        listener.state = ListenerState.ERROR
        listener.last_error = str(error)
        logger.error("%s listener failed: %s", listener.origin.value, error)
        self._append_error(f"{listener.origin.value}: {error}")
        self.notifications.publish(
            SyncError(origin=listener.origin, origin_id=None, message=str(error))
        )
