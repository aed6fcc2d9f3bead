"""SQLAlchemy models for the ledgersync database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Index,
    Integer,
    String,
    DateTime,
    Date,
    Numeric,
    UniqueConstraint,
)
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class LedgerEntry(Base):
    """Unified ledger transaction model."""

    __tablename__ = "ledger_entries"

    id = Column(Integer, primary_key=True)
    kind = Column(String, nullable=False)
    category = Column(String, nullable=False)
    description = Column(String, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    date = Column(Date, nullable=False)
    payment_method = Column(String, nullable=True)
    status = Column(String, nullable=False)
    reference = Column(String, nullable=True)
    origin = Column(String, nullable=False)
    # NULL for manual entries; NULLs never collide in the unique constraint
    origin_id = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    # At most one entry per source record
    __table_args__ = (
        UniqueConstraint("origin", "origin_id", name="uq_ledger_origin"),
        Index("ix_ledger_date_kind", "date", "kind"),
    )


class TuitionPayment(Base):
    """Tuition register model."""

    __tablename__ = "tuition_payments"

    id = Column(String, primary_key=True)
    student_name = Column(String, nullable=True)
    amount = Column(Numeric(14, 2), nullable=True)
    payment_date = Column(Date, nullable=True)
    payment_method = Column(String, nullable=True)
    status = Column(String, nullable=False)
    class_name = Column(String, nullable=True)
    period = Column(String, nullable=True)
    reference = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class PayrollEntry(Base):
    """Payroll register model."""

    __tablename__ = "payroll_entries"

    id = Column(String, primary_key=True)
    employee_id = Column(String, nullable=True)
    employee_name = Column(String, nullable=True)
    net_salary = Column(Numeric(14, 2), nullable=True)
    effective_date = Column(Date, nullable=True)
    payment_month = Column(Integer, nullable=True)
    payment_year = Column(Integer, nullable=True)
    position = Column(String, nullable=True)
    department = Column(String, nullable=True)
    status = Column(String, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the engine."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
