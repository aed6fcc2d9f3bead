"""Domain model entities for ledgersync.

These are pure data classes representing the two source registers and the
unified ledger, independent of database schema. Source records form a closed
union: a record is either a TuitionPayment or a PayrollEntry.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional, Union


class EntryKind(str, Enum):
    """Direction of money for a ledger entry."""

    INFLOW = "Inflow"
    OUTFLOW = "Outflow"


class EntryStatus(str, Enum):
    """Ledger entry status."""

    VALIDATED = "Validated"
    PENDING = "Pending"
    CANCELLED = "Cancelled"


class Origin(str, Enum):
    """Register a ledger entry was derived from."""

    TUITION = "Tuition"
    PAYROLL = "Payroll"
    MANUAL = "Manual"


class TuitionStatus:
    """Known tuition payment statuses."""

    PAID = "paid"
    PENDING = "pending"
    OVERDUE = "overdue"


class PayrollStatus:
    """Known payroll entry statuses."""

    ACTIVE = "active"
    PENDING = "pending"
    INACTIVE = "inactive"


@dataclass(frozen=True)
class TuitionPayment:
    """Tuition payment from the tuition register."""

    id: str
    student_name: Optional[str]
    amount: Optional[Decimal]
    payment_date: Optional[date]
    payment_method: Optional[str] = None
    status: str = TuitionStatus.PENDING
    class_name: Optional[str] = None
    period: Optional[str] = None
    reference: Optional[str] = None


@dataclass(frozen=True)
class PayrollEntry:
    """Payroll entry from the payroll register."""

    id: str
    employee_id: Optional[str]
    employee_name: Optional[str]
    net_salary: Optional[Decimal]
    effective_date: Optional[date]
    payment_month: Optional[int]
    payment_year: Optional[int]
    position: Optional[str] = None
    department: Optional[str] = None
    status: str = PayrollStatus.PENDING


SourceRecord = Union[TuitionPayment, PayrollEntry]


@dataclass(frozen=True)
class LedgerEntry:
    """Unified ledger transaction.

    Candidates produced by projection have no id and no timestamps until the
    gateway stores them.
    """

    kind: EntryKind
    category: str
    description: str
    amount: Decimal
    date: date
    payment_method: Optional[str]
    status: EntryStatus
    origin: Origin
    origin_id: Optional[str] = None
    reference: Optional[str] = None
    notes: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_manual(self) -> bool:
        return self.origin == Origin.MANUAL
