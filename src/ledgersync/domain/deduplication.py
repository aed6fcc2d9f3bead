"""Ledger deduplication service."""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Callable, Hashable, Optional

from ledgersync.database.base import LedgerGateway
from ledgersync.domain.entities import LedgerEntry
from ledgersync.domain.errors import DomainError
from ledgersync.domain.signature import signature

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DuplicateGroup:
    """Entries sharing one signature."""

    signature: str
    count: int
    sample_description: str
    amount: Decimal
    date: date


@dataclass
class DuplicateAnalysis:
    """Read-only view of the duplicates in the ledger."""

    total_entries: int
    duplicates_found: int
    duplicate_groups: list[DuplicateGroup] = field(default_factory=list)

    @property
    def has_duplicates(self) -> bool:
        return self.duplicates_found > 0


@dataclass
class DuplicateRemoval:
    """Outcome of a destructive deduplication pass."""

    total_entries: int
    duplicates_removed: int
    kept: int
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class CreateCheck:
    """Answer to whether a candidate entry may be created."""

    allowed: bool
    existing_id: Optional[int] = None


def _newest_first_key(entry: LedgerEntry) -> tuple[datetime, int]:
    created = entry.created_at
    if created is None:
        created = datetime.combine(entry.date, time.min)
    # Strip tzinfo so stored (naive) and in-memory (aware) values compare
    return created.replace(tzinfo=None), entry.id or 0


def _group(entries: list[LedgerEntry], key: Callable[[LedgerEntry], Hashable]) -> dict:
    groups: dict = defaultdict(list)
    for entry in entries:
        groups[key(entry)].append(entry)
    return groups


class DeduplicationService:
    """Service for finding and removing duplicate ledger entries."""

    def __init__(self, ledger: LedgerGateway):
        """Initialize deduplication service.

        Args:
            ledger: Ledger gateway
        """
        self.ledger = ledger

    async def analyze(self) -> DuplicateAnalysis:
        """Group all entries by signature and report groups larger than one.

        Returns:
            DuplicateAnalysis; the ledger is not modified
        """
        entries = await self.ledger.list_entries()
        groups = _group(entries, signature)

        duplicate_groups = []
        duplicates_found = 0
        for sig, members in groups.items():
            if len(members) < 2:
                continue
            sample = members[0]
            duplicate_groups.append(
                DuplicateGroup(
                    signature=sig,
                    count=len(members),
                    sample_description=sample.description,
                    amount=sample.amount,
                    date=sample.date,
                )
            )
            # One entry per group is the original
            duplicates_found += len(members) - 1

        return DuplicateAnalysis(
            total_entries=len(entries),
            duplicates_found=duplicates_found,
            duplicate_groups=duplicate_groups,
        )

    async def remove(self) -> DuplicateRemoval:
        """Delete duplicates by signature, keeping the most recently created entry.

        Each deletion is attempted independently; failures are recorded in
        the result and do not stop the remaining deletions.
        """
        entries = await self.ledger.list_entries()
        return await self._remove_groups(entries, _group(entries, signature))

    async def remove_origin_duplicates(self) -> DuplicateRemoval:
        """Delete extra entries mapped to the same source record.

        Only relevant for stores without a uniqueness guarantee on
        (origin, origin_id). Manual entries are ignored.
        """
        entries = await self.ledger.list_entries()
        synced = [e for e in entries if not e.is_manual and e.origin_id is not None]
        groups = _group(synced, lambda e: (e.origin, e.origin_id))
        result = await self._remove_groups(synced, groups)
        result.total_entries = len(entries)
        result.kept = len(entries) - result.duplicates_removed
        return result

    async def prevent_on_create(self, candidate: LedgerEntry) -> CreateCheck:
        """Check a candidate against the ledger before creating it.

        Returns:
            CreateCheck with allowed=False and the existing entry ID when an
            entry with the same signature already exists
        """
        existing = await self.ledger.find_by_signature(candidate)
        if existing is None:
            return CreateCheck(allowed=True)
        logger.info("Refusing duplicate of entry %s: %s", existing.id, candidate.description)
        return CreateCheck(allowed=False, existing_id=existing.id)

    async def _remove_groups(self, entries: list[LedgerEntry], groups: dict) -> DuplicateRemoval:
        removed = 0
        errors = []
        for members in groups.values():
            if len(members) < 2:
                continue

            ordered = sorted(members, key=_newest_first_key, reverse=True)
            keep, extras = ordered[0], ordered[1:]
            logger.debug("Keeping entry %s, removing %d duplicate(s)", keep.id, len(extras))

            for entry in extras:
                try:
                    await self.ledger.delete_entry(entry.id)
                    removed += 1
                except DomainError as e:
                    logger.warning("Could not delete duplicate entry %s: %s", entry.id, e)
                    errors.append(f"Entry {entry.id}: {e}")

        if removed:
            logger.info("Removed %d duplicate ledger entries", removed)
        return DuplicateRemoval(
            total_entries=len(entries),
            duplicates_removed=removed,
            kept=len(entries) - removed,
            errors=errors,
        )
