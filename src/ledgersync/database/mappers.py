"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the domain keeps its enums and
Decimal amounts while the tables store plain strings and numerics.
"""

from decimal import Decimal
from typing import Any

from ledgersync.domain import entities as domain
from ledgersync.database.models import (
    LedgerEntry as ORMLedgerEntry,
    TuitionPayment as ORMTuitionPayment,
    PayrollEntry as ORMPayrollEntry,
)


def _decimal(value) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(value))


def ledger_entry_to_domain(orm_entry: ORMLedgerEntry) -> domain.LedgerEntry:
    """Convert SQLAlchemy LedgerEntry model to domain LedgerEntry entity."""
    return domain.LedgerEntry(
        id=orm_entry.id,
        kind=domain.EntryKind(orm_entry.kind),
        category=orm_entry.category,
        description=orm_entry.description,
        amount=_decimal(orm_entry.amount),
        date=orm_entry.date,
        payment_method=orm_entry.payment_method,
        status=domain.EntryStatus(orm_entry.status),
        reference=orm_entry.reference,
        origin=domain.Origin(orm_entry.origin),
        origin_id=orm_entry.origin_id,
        notes=orm_entry.notes,
        created_at=orm_entry.created_at,
        updated_at=orm_entry.updated_at,
    )


def ledger_entry_to_row(entry: domain.LedgerEntry) -> dict[str, Any]:
    """Return column values for a domain LedgerEntry.

    The ID is left to the database; timestamps are only passed when set.
    """
    values = {
        "kind": domain.EntryKind(entry.kind).value,
        "category": entry.category,
        "description": entry.description,
        "amount": entry.amount,
        "date": entry.date,
        "payment_method": entry.payment_method,
        "status": domain.EntryStatus(entry.status).value,
        "reference": entry.reference,
        "origin": domain.Origin(entry.origin).value,
        "origin_id": None if entry.origin == domain.Origin.MANUAL else entry.origin_id,
        "notes": entry.notes,
    }
    if entry.created_at is not None:
        values["created_at"] = entry.created_at
    if entry.updated_at is not None:
        values["updated_at"] = entry.updated_at
    return values


def tuition_payment_to_domain(orm_payment: ORMTuitionPayment) -> domain.TuitionPayment:
    """Convert SQLAlchemy TuitionPayment model to domain TuitionPayment entity."""
    return domain.TuitionPayment(
        id=orm_payment.id,
        student_name=orm_payment.student_name,
        amount=_decimal(orm_payment.amount),
        payment_date=orm_payment.payment_date,
        payment_method=orm_payment.payment_method,
        status=orm_payment.status,
        class_name=orm_payment.class_name,
        period=orm_payment.period,
        reference=orm_payment.reference,
    )


def tuition_payment_to_row(payment: domain.TuitionPayment) -> dict[str, Any]:
    """Return column values for a domain TuitionPayment."""
    return {
        "id": payment.id,
        "student_name": payment.student_name,
        "amount": payment.amount,
        "payment_date": payment.payment_date,
        "payment_method": payment.payment_method,
        "status": payment.status,
        "class_name": payment.class_name,
        "period": payment.period,
        "reference": payment.reference,
    }


def payroll_entry_to_domain(orm_entry: ORMPayrollEntry) -> domain.PayrollEntry:
    """Convert SQLAlchemy PayrollEntry model to domain PayrollEntry entity."""
    return domain.PayrollEntry(
        id=orm_entry.id,
        employee_id=orm_entry.employee_id,
        employee_name=orm_entry.employee_name,
        net_salary=_decimal(orm_entry.net_salary),
        effective_date=orm_entry.effective_date,
        payment_month=orm_entry.payment_month,
        payment_year=orm_entry.payment_year,
        position=orm_entry.position,
        department=orm_entry.department,
        status=orm_entry.status,
    )


def payroll_entry_to_row(entry: domain.PayrollEntry) -> dict[str, Any]:
    """Return column values for a domain PayrollEntry."""
    return {
        "id": entry.id,
        "employee_id": entry.employee_id,
        "employee_name": entry.employee_name,
        "net_salary": entry.net_salary,
        "effective_date": entry.effective_date,
        "payment_month": entry.payment_month,
        "payment_year": entry.payment_year,
        "position": entry.position,
        "department": entry.department,
        "status": entry.status,
    }
