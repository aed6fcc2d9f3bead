"""Periodic background deduplication sweep."""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, UTC
from typing import Any, Optional

from ledgersync.domain.deduplication import DeduplicationService
from ledgersync.domain.errors import DomainError
from ledgersync.domain.notifications import (
    DeduplicationCompleted,
    DuplicateAlert,
    NotificationBus,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchedulerConfig:
    """Automatic deduplication settings.

    Attributes:
        enabled: Whether start() launches the sweep at all
        interval: Seconds between the end of one sweep and the next
        alert_threshold: Duplicates above this count raise a DuplicateAlert
        silent: Suppress alerts (cycle outcomes are still broadcast)
    """

    enabled: bool = True
    interval: float = 30.0
    alert_threshold: int = 5
    silent: bool = False


@dataclass
class ForceCheckResult:
    duplicates_found: int = 0
    duplicates_removed: int = 0
    kept: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SchedulerStatus:
    is_running: bool
    config: SchedulerConfig
    last_check: Optional[datetime]
    last_result: Optional[ForceCheckResult]


class DeduplicationScheduler:
    """Runs analyze + remove on a fixed interval.

    The scheduler holds no ledger state, only its task handle and the
    outcome of the last sweep.
    """

    def __init__(
        self,
        dedup: DeduplicationService,
        notifications: Optional[NotificationBus] = None,
        config: Optional[SchedulerConfig] = None,
    ):
        self.dedup = dedup
        self.notifications = notifications or NotificationBus()
        self.config = config or SchedulerConfig()
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._last_check: Optional[datetime] = None
        self._last_result: Optional[ForceCheckResult] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, config: Optional[SchedulerConfig] = None, **changes: Any) -> bool:
        """Start the sweep: one cycle now, then one every interval.

        Must be called from a running event loop.

        Args:
            config: Replacement configuration
            **changes: Individual SchedulerConfig fields to override

        Returns:
            True if a new sweep task was started
        """
        if self.is_running:
            logger.debug("Deduplication scheduler already running")
            return False

        if config is not None:
            self.config = config
        if changes:
            self.config = replace(self.config, **changes)

        if not self.config.enabled:
            logger.info("Automatic deduplication disabled")
            return False

        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(
            self._run(self._stop_event, self.config.interval), name="ledgersync-dedup"
        )
        logger.info("Automatic deduplication started (every %.1fs)", self.config.interval)
        return True

    async def stop(self) -> None:
        """Stop the sweep, letting an in-flight cycle finish first."""
        if self._task is None:
            return
        self._stop_event.set()
        await self._task
        self._task = None
        self._stop_event = None
        logger.info("Automatic deduplication stopped")

    async def update_config(self, **changes: Any) -> SchedulerConfig:
        """Merge configuration changes, restarting the sweep if it is running."""
        self.config = replace(self.config, **changes)
        if self.is_running:
            await self.stop()
            self.start()
        return self.config

    async def cleanup(self) -> None:
        await self.stop()

    def get_status(self) -> SchedulerStatus:
        return SchedulerStatus(
            is_running=self.is_running,
            config=self.config,
            last_check=self._last_check,
            last_result=self._last_result,
        )

    async def force_check(self) -> ForceCheckResult:
        """Analyze and remove duplicates once, without notifications."""
        return await self._sweep(alert=False)

    async def run_cycle(self) -> ForceCheckResult:
        """Run one scheduled cycle and broadcast its outcome."""
        result = await self._sweep(alert=not self.config.silent)
        self.notifications.publish(
            DeduplicationCompleted(
                removed=result.duplicates_removed,
                kept=result.kept,
                errors=tuple(result.errors),
            )
        )
        return result

    async def _run(self, stop_event: asyncio.Event, interval: float) -> None:
        while not stop_event.is_set():
            try:
                await self.run_cycle()
            except Exception:
                logger.exception("Deduplication cycle failed")
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except TimeoutError:
                pass

    async def _sweep(self, alert: bool) -> ForceCheckResult:
        self._last_check = datetime.now(UTC)
        result = ForceCheckResult()
        try:
            analysis = await self.dedup.analyze()
        except DomainError as e:
            logger.warning("Duplicate analysis failed: %s", e)
            result.errors.append(str(e))
            self._last_result = result
            return result

        result.duplicates_found = analysis.duplicates_found
        result.kept = analysis.total_entries

        if analysis.has_duplicates:
            logger.info("Found %d duplicate ledger entries", analysis.duplicates_found)
            if alert and analysis.duplicates_found > self.config.alert_threshold:
                logger.warning(
                    "%d duplicates exceed the alert threshold of %d",
                    analysis.duplicates_found,
                    self.config.alert_threshold,
                )
                self.notifications.publish(
                    DuplicateAlert(
                        duplicates_found=analysis.duplicates_found,
                        threshold=self.config.alert_threshold,
                    )
                )
            try:
                removal = await self.dedup.remove()
            except DomainError as e:
                logger.warning("Duplicate removal failed: %s", e)
                result.errors.append(str(e))
            else:
                result.duplicates_removed = removal.duplicates_removed
                result.kept = removal.kept
                result.errors.extend(removal.errors)

        self._last_result = result
        return result
