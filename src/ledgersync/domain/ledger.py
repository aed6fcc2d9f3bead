"""Ledger entry domain service for manually entered transactions."""

from typing import Optional
from datetime import date
from decimal import Decimal
from ledgersync.database.base import LedgerGateway
from ledgersync.domain.deduplication import DeduplicationService
from ledgersync.domain.entities import EntryKind, EntryStatus, LedgerEntry, Origin
from ledgersync.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    duplicate_signature,
    entry_not_found,
    not_manual_entry,
)


class LedgerService:
    """Service for managing manual ledger entries.

    Synced entries are owned by their register and can only be read here.
    """

    def __init__(self, ledger: LedgerGateway, dedup: Optional[DeduplicationService] = None):
        """Initialize ledger service.

        Args:
            ledger: Ledger gateway
            dedup: Service consulted before every create
        """
        self.ledger = ledger
        self.dedup = dedup or DeduplicationService(ledger)

    async def create_manual_entry(
        self,
        kind: EntryKind,
        category: str,
        description: str,
        amount: Decimal,
        date: date,
        payment_method: Optional[str] = None,
        status: EntryStatus = EntryStatus.VALIDATED,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create a manual ledger entry.

        Args:
            kind: Inflow or outflow
            category: Category label
            description: Entry description
            amount: Positive amount
            date: Entry date
            payment_method: Optional payment method label
            status: Entry status
            reference: Optional reference
            notes: Optional notes

        Returns:
            Ledger entry ID

        Raises:
            ValidationError: If the amount or description is invalid
            ConflictError: If an entry with the same signature already exists
        """
        if amount is None or amount <= 0:
            raise ValidationError(f"Amount must be positive, got {amount}")
        if not description or not description.strip():
            raise ValidationError("Description is required")
        if not category or not category.strip():
            raise ValidationError("Category is required")

        candidate = LedgerEntry(
            kind=EntryKind(kind),
            category=category.strip(),
            description=description.strip(),
            amount=amount,
            date=date,
            payment_method=payment_method,
            status=EntryStatus(status),
            origin=Origin.MANUAL,
            reference=reference,
            notes=notes,
        )

        # Check for duplicate
        check = await self.dedup.prevent_on_create(candidate)
        if not check.allowed:
            raise ConflictError(duplicate_signature(check.existing_id))

        return await self.ledger.create_entry(candidate)

    async def get_entry(self, entry_id: int) -> Optional[LedgerEntry]:
        """Get ledger entry by ID.

        Returns:
            LedgerEntry or None if not found
        """
        return await self.ledger.get_entry(entry_id)

    async def list_entries(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        kind: Optional[EntryKind] = None,
        origin: Optional[Origin] = None,
    ) -> list[LedgerEntry]:
        """List ledger entries with optional filters.

        Args:
            start_date: Optional start date filter (inclusive)
            end_date: Optional end date filter (inclusive)
            kind: Optional kind filter
            origin: Optional origin filter
        """
        entries = await self.ledger.list_entries()
        if start_date is not None:
            entries = [e for e in entries if e.date >= start_date]
        if end_date is not None:
            entries = [e for e in entries if e.date <= end_date]
        if kind is not None:
            entries = [e for e in entries if e.kind == kind]
        if origin is not None:
            entries = [e for e in entries if e.origin == origin]
        return entries

    async def update_notes(self, entry_id: int, notes: Optional[str]) -> None:
        """Update entry notes. Allowed on synced entries too.

        Raises:
            NotFoundError: If entry doesn't exist
        """
        await self.ledger.update_entry(entry_id, notes=notes)

    async def delete_manual_entry(self, entry_id: int) -> None:
        """Delete a manual entry.

        Raises:
            NotFoundError: If entry doesn't exist
            ValidationError: If the entry is owned by a register
        """
        entry = await self.ledger.get_entry(entry_id)
        if entry is None:
            raise NotFoundError(entry_not_found(entry_id))
        if not entry.is_manual:
            raise ValidationError(not_manual_entry(entry_id, entry.origin.value))
        await self.ledger.delete_entry(entry_id)
