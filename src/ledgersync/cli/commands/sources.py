"""Source register maintenance commands (tuition payments and payroll entries)."""

import uuid

import click
from ledgersync.cli.runtime import parse_or_fail, run_with_engine
from ledgersync.domain.entities import (
    Origin,
    PayrollEntry,
    PayrollStatus,
    TuitionPayment,
    TuitionStatus,
)
from ledgersync.utils.date_parser import parse_date
from ledgersync.utils.amount_parser import parse_amount

TUITION_STATUS_CHOICES = [TuitionStatus.PAID, TuitionStatus.PENDING, TuitionStatus.OVERDUE]
PAYROLL_STATUS_CHOICES = [PayrollStatus.ACTIVE, PayrollStatus.PENDING, PayrollStatus.INACTIVE]

sync_option = click.option(
    "--sync/--no-sync",
    default=True,
    show_default=True,
    help="Apply the change to the ledger right away",
)


def _echo_outcome(outcome) -> None:
    if outcome is not None:
        click.echo(f"  Ledger: {outcome.value}")


async def _remove_record(engine, register, origin: Origin, record_id: str, sync: bool):
    await register.delete_record(record_id)
    if sync:
        return await engine.orchestrator.on_record_removed(origin, record_id)
    return None


@click.group("tuition")
def tuition_group():
    """Manage tuition payments."""
    pass


@tuition_group.command("add")
@click.option("--student", required=True, help="Student name")
@click.option("--amount", required=True, help="Amount paid")
@click.option("--date", "payment_date", default="today", show_default=True, help="Payment date")
@click.option("--method", help="Payment method (e.g., cash, mobile_money, transfer)")
@click.option(
    "--status",
    type=click.Choice(TUITION_STATUS_CHOICES),
    default=TuitionStatus.PAID,
    show_default=True,
    help="Payment status",
)
@click.option("--class-name", help="Class of the student")
@click.option("--period", help="Period covered (e.g., 'October 2024')")
@click.option("--reference", help="Receipt reference")
@click.option("--id", "record_id", help="Record ID (auto-generated if not provided)")
@sync_option
@click.pass_context
def add_tuition(
    ctx,
    student: str,
    amount: str,
    payment_date: str,
    method: str | None,
    status: str,
    class_name: str | None,
    period: str | None,
    reference: str | None,
    record_id: str | None,
    sync: bool,
):
    """Record a tuition payment.

    Examples:
        ledgersync tuition add --student "Rakoto Jean" --amount 150000 --method cash --period "October 2024"
    """
    record = TuitionPayment(
        id=record_id or uuid.uuid4().hex,
        student_name=student,
        amount=parse_or_fail(ctx, parse_amount, amount, "amount"),
        payment_date=parse_or_fail(ctx, parse_date, payment_date, "date"),
        payment_method=method,
        status=status,
        class_name=class_name,
        period=period,
        reference=reference,
    )

    async def handler(engine):
        await engine.tuition_register.create_record(record)
        if sync:
            return await engine.orchestrator.on_record_added(record)
        return None

    outcome = run_with_engine(ctx, handler)
    click.echo(f"Created tuition payment {record.id}")
    _echo_outcome(outcome)


@tuition_group.command("list")
@click.pass_context
def list_tuition(ctx):
    """List tuition payments."""

    async def handler(engine):
        return await engine.tuition_register.list_records()

    records = run_with_engine(ctx, handler)
    if not records:
        click.echo("No tuition payments found.")
        return

    click.echo(f"{'ID':<34} {'Date':<12} {'Amount':>14} {'Status':<8} {'Student':<30}")
    click.echo("-" * 100)
    for record in records:
        amount_str = f"{record.amount:,.2f}" if record.amount is not None else "-"
        click.echo(
            f"{record.id:<34} {str(record.payment_date or '-'):<12} {amount_str:>14} "
            f"{record.status:<8} {(record.student_name or '')[:30]:<30}"
        )


@tuition_group.command("remove")
@click.argument("record_id")
@sync_option
@click.pass_context
def remove_tuition(ctx, record_id: str, sync: bool):
    """Remove a tuition payment."""

    async def handler(engine):
        return await _remove_record(
            engine, engine.tuition_register, Origin.TUITION, record_id, sync
        )

    outcome = run_with_engine(ctx, handler)
    click.echo(f"Removed tuition payment {record_id}")
    _echo_outcome(outcome)


@click.group("payroll")
def payroll_group():
    """Manage payroll entries."""
    pass


@payroll_group.command("add")
@click.option("--employee-id", required=True, help="Employee identifier")
@click.option("--name", required=True, help="Employee name")
@click.option("--salary", required=True, help="Net salary")
@click.option("--date", "effective_date", default="today", show_default=True, help="Effective date")
@click.option("--month", type=click.IntRange(1, 12), help="Payment month (default: month of --date)")
@click.option("--year", type=int, help="Payment year (default: year of --date)")
@click.option("--position", help="Position held")
@click.option("--department", help="Department")
@click.option(
    "--status",
    type=click.Choice(PAYROLL_STATUS_CHOICES),
    default=PayrollStatus.ACTIVE,
    show_default=True,
    help="Payroll status",
)
@click.option("--id", "record_id", help="Record ID (auto-generated if not provided)")
@sync_option
@click.pass_context
def add_payroll(
    ctx,
    employee_id: str,
    name: str,
    salary: str,
    effective_date: str,
    month: int | None,
    year: int | None,
    position: str | None,
    department: str | None,
    status: str,
    record_id: str | None,
    sync: bool,
):
    """Record a payroll entry.

    Examples:
        ledgersync payroll add --employee-id emp042 --name "Rasoa Marie" --salary 800000 --month 10 --year 2024
    """
    parsed_date = parse_or_fail(ctx, parse_date, effective_date, "date")
    record = PayrollEntry(
        id=record_id or uuid.uuid4().hex,
        employee_id=employee_id,
        employee_name=name,
        net_salary=parse_or_fail(ctx, parse_amount, salary, "salary"),
        effective_date=parsed_date,
        payment_month=month or parsed_date.month,
        payment_year=year or parsed_date.year,
        position=position,
        department=department,
        status=status,
    )

    async def handler(engine):
        await engine.payroll_register.create_record(record)
        if sync:
            return await engine.orchestrator.on_record_added(record)
        return None

    outcome = run_with_engine(ctx, handler)
    click.echo(f"Created payroll entry {record.id}")
    _echo_outcome(outcome)


@payroll_group.command("list")
@click.pass_context
def list_payroll(ctx):
    """List payroll entries."""

    async def handler(engine):
        return await engine.payroll_register.list_records()

    records = run_with_engine(ctx, handler)
    if not records:
        click.echo("No payroll entries found.")
        return

    click.echo(f"{'ID':<34} {'Period':<8} {'Salary':>14} {'Status':<8} {'Employee':<30}")
    click.echo("-" * 100)
    for record in records:
        salary_str = f"{record.net_salary:,.2f}" if record.net_salary is not None else "-"
        period = f"{record.payment_year}-{record.payment_month:02d}" if record.payment_month else "-"
        click.echo(
            f"{record.id:<34} {period:<8} {salary_str:>14} "
            f"{record.status:<8} {(record.employee_name or '')[:30]:<30}"
        )


@payroll_group.command("remove")
@click.argument("record_id")
@sync_option
@click.pass_context
def remove_payroll(ctx, record_id: str, sync: bool):
    """Remove a payroll entry."""

    async def handler(engine):
        return await _remove_record(
            engine, engine.payroll_register, Origin.PAYROLL, record_id, sync
        )

    outcome = run_with_engine(ctx, handler)
    click.echo(f"Removed payroll entry {record_id}")
    _echo_outcome(outcome)


def register_commands(cli):
    """Register source register commands with main CLI."""
    cli.add_command(tuition_group)
    cli.add_command(payroll_group)
