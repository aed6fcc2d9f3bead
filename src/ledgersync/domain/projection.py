"""Projection rules from source records to ledger entries.

Every function here is pure: the same record always yields the same
candidate entry, and nothing touches a store.
"""

from decimal import Decimal
from typing import Any, Optional

from ledgersync.domain.entities import (
    EntryKind,
    EntryStatus,
    LedgerEntry,
    Origin,
    PayrollEntry,
    PayrollStatus,
    SourceRecord,
    TuitionPayment,
    TuitionStatus,
)
from ledgersync.domain.errors import MappingError, ValidationError, missing_fields

TUITION_CATEGORY = "Tuition"
PAYROLL_CATEGORY = "Payroll"
PAYROLL_PAYMENT_METHOD = "Bank transfer"

MONTH_NAMES = [
    "",
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]

PAYMENT_METHODS = {
    "cash": "Cash",
    "bank_transfer": "Bank transfer",
    "mobile_money": "Mobile money",
    "check": "Check",
    "card": "Card",
}

TUITION_STATUSES = {
    TuitionStatus.PAID: EntryStatus.VALIDATED,
    TuitionStatus.PENDING: EntryStatus.PENDING,
    TuitionStatus.OVERDUE: EntryStatus.PENDING,
}

PAYROLL_STATUSES = {
    PayrollStatus.ACTIVE: EntryStatus.VALIDATED,
    PayrollStatus.PENDING: EntryStatus.PENDING,
    PayrollStatus.INACTIVE: EntryStatus.CANCELLED,
}

# Fields a modify event is allowed to overwrite on an existing entry
DERIVED_FIELDS = ("amount", "date", "status", "description", "payment_method")


def map_payment_method(method: Optional[str]) -> Optional[str]:
    """Map a register payment method code to its ledger label.

    Unknown codes pass through unchanged.
    """
    if method is None:
        return None
    return PAYMENT_METHODS.get(method, method)


def map_tuition_status(status: Optional[str]) -> EntryStatus:
    return TUITION_STATUSES.get(status, EntryStatus.PENDING)


def map_payroll_status(status: Optional[str]) -> EntryStatus:
    return PAYROLL_STATUSES.get(status, EntryStatus.PENDING)


def period_label(month: int, year: int) -> str:
    """Return a human-readable pay period, e.g. 'May 2024'."""
    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid payment month: {month}")
    return f"{MONTH_NAMES[month]} {year}"


def _require(record: Any, *names: str) -> None:
    missing = [name for name in names if getattr(record, name) in (None, "")]
    if missing:
        raise MappingError(missing_fields(record.id, missing))


def _require_positive(record_id: str, amount: Any) -> Decimal:
    try:
        amount = Decimal(amount)
    except (TypeError, ValueError, ArithmeticError) as e:
        raise MappingError(f"Record '{record_id}' has an invalid amount: {amount!r}") from e
    if not amount.is_finite():
        raise MappingError(f"Record '{record_id}' has an invalid amount: {amount}")
    if amount <= 0:
        raise MappingError(f"Record '{record_id}' has a non-positive amount: {amount}")
    return amount


def project_tuition(payment: TuitionPayment) -> LedgerEntry:
    """Project a tuition payment into an inflow ledger entry.

    Raises:
        MappingError: If a required field is missing or the amount is not positive
    """
    _require(payment, "id", "student_name", "amount", "payment_date")
    amount = _require_positive(payment.id, payment.amount)

    description = f"Tuition {payment.student_name.strip()}"
    if payment.period:
        description = f"{description} - {payment.period.strip()}"

    notes = "Automatic sync"
    if payment.class_name:
        notes = f"{notes} - Class: {payment.class_name}"

    return LedgerEntry(
        kind=EntryKind.INFLOW,
        category=TUITION_CATEGORY,
        description=description,
        amount=amount,
        date=payment.payment_date,
        payment_method=map_payment_method(payment.payment_method),
        status=map_tuition_status(payment.status),
        origin=Origin.TUITION,
        origin_id=payment.id,
        reference=payment.reference,
        notes=notes,
    )


def project_payroll(entry: PayrollEntry) -> LedgerEntry:
    """Project a payroll entry into an outflow ledger entry.

    Raises:
        MappingError: If a required field is missing or the amount is not positive
    """
    _require(
        entry,
        "id",
        "employee_name",
        "net_salary",
        "effective_date",
        "payment_month",
        "payment_year",
    )
    amount = _require_positive(entry.id, entry.net_salary)
    try:
        period = period_label(int(entry.payment_month), int(entry.payment_year))
    except (TypeError, ValueError, ArithmeticError) as e:
        raise MappingError(f"Record '{entry.id}': {e}") from e

    employee_code = (entry.employee_id or "")[:4].upper() or "EMP"

    notes_parts = ["Automatic sync"]
    if entry.position:
        notes_parts.append(f"Position: {entry.position}")
    if entry.department:
        notes_parts.append(f"Department: {entry.department}")

    return LedgerEntry(
        kind=EntryKind.OUTFLOW,
        category=PAYROLL_CATEGORY,
        description=f"Salary {entry.employee_name.strip()} - {period}",
        amount=amount,
        date=entry.effective_date,
        payment_method=PAYROLL_PAYMENT_METHOD,
        status=map_payroll_status(entry.status),
        origin=Origin.PAYROLL,
        origin_id=entry.id,
        reference=f"SAL-{entry.payment_year}-{employee_code}",
        notes=" - ".join(notes_parts),
    )


def project(record: SourceRecord) -> LedgerEntry:
    """Project any source record, dispatching on its type."""
    if isinstance(record, TuitionPayment):
        return project_tuition(record)
    if isinstance(record, PayrollEntry):
        return project_payroll(record)
    raise TypeError(f"Unsupported source record type: {type(record).__name__}")


def origin_of(record: SourceRecord) -> Origin:
    """Return the origin a source record's ledger entry carries."""
    if isinstance(record, TuitionPayment):
        return Origin.TUITION
    if isinstance(record, PayrollEntry):
        return Origin.PAYROLL
    raise TypeError(f"Unsupported source record type: {type(record).__name__}")


def is_completed(record: SourceRecord) -> bool:
    """Return True when the record denotes money that actually moved."""
    if isinstance(record, TuitionPayment):
        return record.status == TuitionStatus.PAID
    if isinstance(record, PayrollEntry):
        return record.status == PayrollStatus.ACTIVE
    raise TypeError(f"Unsupported source record type: {type(record).__name__}")


def derived_fields(entry: LedgerEntry) -> dict[str, Any]:
    """Return the source-derived fields of a projected entry."""
    return {name: getattr(entry, name) for name in DERIVED_FIELDS}
