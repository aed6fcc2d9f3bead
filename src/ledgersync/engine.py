"""Reconciliation engine: the services wired together with one lifecycle."""

import logging
from datetime import timedelta
from typing import Optional

from ledgersync.database.base import LedgerGateway, SourceRegister
from ledgersync.domain.consistency import ConsistencyService
from ledgersync.domain.deduplication import DeduplicationService
from ledgersync.domain.ledger import LedgerService
from ledgersync.domain.notifications import NotificationBus
from ledgersync.domain.scheduler import DeduplicationScheduler, SchedulerConfig
from ledgersync.domain.summary import SummaryService
from ledgersync.domain.sync import HealthReport, SyncOrchestrator, SyncResult

logger = logging.getLogger(__name__)


class ReconciliationEngine:
    """Owns the orchestrator, the dedup scheduler and the services around them.

    Everything shares one ledger gateway and one notification bus. Start it
    with start() and release it with close(), or use it as an async
    context manager.
    """

    def __init__(
        self,
        ledger: LedgerGateway,
        tuition_register: SourceRegister,
        payroll_register: SourceRegister,
        notifications: Optional[NotificationBus] = None,
        scheduler_config: Optional[SchedulerConfig] = None,
        stale_after: timedelta = timedelta(minutes=10),
    ):
        self.ledger = ledger
        self.tuition_register = tuition_register
        self.payroll_register = payroll_register
        self.notifications = notifications or NotificationBus()
        self.dedup = DeduplicationService(ledger)
        self.orchestrator = SyncOrchestrator(
            ledger,
            tuition_register,
            payroll_register,
            dedup=self.dedup,
            notifications=self.notifications,
            stale_after=stale_after,
        )
        self.scheduler = DeduplicationScheduler(
            self.dedup, notifications=self.notifications, config=scheduler_config
        )
        self.consistency = ConsistencyService(
            ledger, tuition_register, payroll_register, self.orchestrator
        )
        self.ledger_service = LedgerService(ledger, dedup=self.dedup)
        self.summary = SummaryService(ledger)

    @classmethod
    def from_store(cls, store, **kwargs) -> "ReconciliationEngine":
        """Build an engine on a store exposing ledger, tuition and payroll."""
        return cls(store.ledger, store.tuition, store.payroll, **kwargs)

    async def __aenter__(self) -> "ReconciliationEngine":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def start(self, with_scheduler: bool = True) -> SyncResult:
        """Initialize sync and, unless disabled, start automatic deduplication."""
        result = await self.orchestrator.initialize()
        if with_scheduler:
            self.scheduler.start()
        return result

    async def close(self) -> None:
        await self.scheduler.stop()
        await self.orchestrator.close()
        logger.info("Reconciliation engine closed")

    def health_check(self) -> HealthReport:
        return self.orchestrator.health_check()
