"""Abstract ledger gateway and source register interfaces."""

from abc import ABC, abstractmethod
from typing import Any, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from ledgersync.domain.entities import LedgerEntry, Origin, SourceRecord
from ledgersync.database.change_feed import ChangeFeed


class LedgerGateway(ABC):
    """Abstract access to the unified ledger."""

    @abstractmethod
    async def list_entries(self) -> list[LedgerEntry]:
        """List all ledger entries."""
        pass

    @abstractmethod
    async def get_entry(self, entry_id: int) -> Optional[LedgerEntry]:
        """Get ledger entry by ID."""
        pass

    @abstractmethod
    async def find_by_origin(self, origin: Origin, origin_id: str) -> Optional[LedgerEntry]:
        """Get the entry mapped to a source record, if any."""
        pass

    @abstractmethod
    async def find_by_signature(self, entry: LedgerEntry) -> Optional[LedgerEntry]:
        """Get an existing entry sharing the candidate's duplicate signature, if any."""
        pass

    @abstractmethod
    async def create_entry(self, entry: LedgerEntry) -> int:
        """Create a ledger entry. Returns entry ID.

        Raises:
            ConflictError: If a non-manual entry already exists for the same origin
        """
        pass

    @abstractmethod
    async def create_entry_if_absent(self, entry: LedgerEntry) -> tuple[int, bool]:
        """Atomically create an entry unless its (origin, origin_id) is taken.

        Returns:
            Tuple of (entry ID, created). When the pair is already taken the ID
            of the existing entry is returned with created=False.
        """
        pass

    @abstractmethod
    async def update_entry(self, entry_id: int, **fields: Any) -> None:
        """Update selected fields of a ledger entry.

        Raises:
            NotFoundError: If the entry doesn't exist
        """
        pass

    @abstractmethod
    async def delete_entry(self, entry_id: int) -> None:
        """Delete a ledger entry.

        Raises:
            NotFoundError: If the entry doesn't exist
        """
        pass


class SourceRegister(ABC):
    """Abstract access to one source register and its change feed."""

    origin: Origin

    @abstractmethod
    async def list_records(self) -> list[SourceRecord]:
        """List all records in the register."""
        pass

    @abstractmethod
    async def get_record(self, record_id: str) -> Optional[SourceRecord]:
        """Get record by ID."""
        pass

    @abstractmethod
    async def create_record(self, record: SourceRecord) -> str:
        """Create a record and announce it on the feed. Returns record ID."""
        pass

    @abstractmethod
    async def update_record(self, record: SourceRecord) -> None:
        """Replace a record and announce the modification on the feed."""
        pass

    @abstractmethod
    async def delete_record(self, record_id: str) -> None:
        """Delete a record and announce the removal on the feed."""
        pass

    @abstractmethod
    def subscribe(self) -> ChangeFeed:
        """Open a change feed that yields events until closed.

        Raises:
            ListenerSubscriptionError: If the feed cannot be opened
        """
        pass
