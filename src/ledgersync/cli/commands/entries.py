"""Manual ledger entry and listing commands."""

import click
from ledgersync.cli.runtime import parse_or_fail, run_with_engine
from ledgersync.domain.entities import EntryKind, EntryStatus, Origin
from ledgersync.utils.date_parser import parse_date, get_date_range
from ledgersync.utils.amount_parser import parse_amount


@click.command("add")
@click.option(
    "--kind",
    required=True,
    type=click.Choice([k.value for k in EntryKind], case_sensitive=False),
    help="Direction of money",
)
@click.option("--category", required=True, help="Category label (e.g., 'Supplies')")
@click.option("--description", required=True, help="Entry description")
@click.option("--amount", required=True, help="Positive amount (e.g., 150000 or '150 000 Ar')")
@click.option(
    "--date",
    "entry_date",
    default="today",
    show_default=True,
    help="Entry date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--payment-method", help="Payment method (e.g., 'Cash')")
@click.option(
    "--status",
    type=click.Choice([s.value for s in EntryStatus], case_sensitive=False),
    default=EntryStatus.VALIDATED.value,
    show_default=True,
    help="Entry status",
)
@click.option("--reference", help="Reference number")
@click.option("--notes", help="Notes")
@click.pass_context
def add_entry(
    ctx,
    kind: str,
    category: str,
    description: str,
    amount: str,
    entry_date: str,
    payment_method: str | None,
    status: str,
    reference: str | None,
    notes: str | None,
):
    """Add a manual ledger entry.

    Refused when an entry with the same signature already exists.

    Examples:
        ledgersync add --kind Outflow --category Supplies --description "Chalk" --amount 25000
        ledgersync add --kind Inflow --category Donation --description "PTA gift" --amount 100000 --date yesterday
    """
    parsed_date = parse_or_fail(ctx, parse_date, entry_date, "date format")
    parsed_amount = parse_or_fail(ctx, parse_amount, amount, "amount format")

    async def handler(engine):
        return await engine.ledger_service.create_manual_entry(
            kind=_enum_value(EntryKind, kind),
            category=category,
            description=description,
            amount=parsed_amount,
            date=parsed_date,
            payment_method=payment_method,
            status=_enum_value(EntryStatus, status),
            reference=reference,
            notes=notes,
        )

    entry_id = run_with_engine(ctx, handler)
    click.echo(f"Created entry {entry_id}")
    click.echo(f"  Date: {parsed_date}")
    click.echo(f"  Amount: {parsed_amount:,.2f}")
    click.echo(f"  Description: {description}")


@click.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD)")
@click.option("--end-date", help="End date (YYYY-MM-DD)")
@click.option(
    "--period",
    type=click.Choice(["this-month", "this-year", "last-month", "last-year"]),
    help="Named period (overrides --start-date/--end-date)",
)
@click.option(
    "--kind",
    type=click.Choice([k.value for k in EntryKind], case_sensitive=False),
    help="Only inflows or only outflows",
)
@click.option(
    "--origin",
    type=click.Choice([o.value for o in Origin], case_sensitive=False),
    help="Only entries from this origin",
)
@click.option("--verbose", "-v", is_flag=True, help="Show reference, notes and origin details")
@click.pass_context
def list_entries(
    ctx,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    kind: str | None,
    origin: str | None,
    verbose: bool,
):
    """List ledger entries with optional filters."""
    start = None
    end = None
    if period:
        start, end = get_date_range(period)
    else:
        if start_date:
            start = parse_or_fail(ctx, parse_date, start_date, "start date")
        if end_date:
            end = parse_or_fail(ctx, parse_date, end_date, "end date")

    async def handler(engine):
        return await engine.ledger_service.list_entries(
            start_date=start,
            end_date=end,
            kind=_enum_value(EntryKind, kind) if kind else None,
            origin=_enum_value(Origin, origin) if origin else None,
        )

    entries = run_with_engine(ctx, handler)

    if not entries:
        click.echo("No entries found.")
        return

    click.echo(f"\nFound {len(entries)} entr{'y' if len(entries) == 1 else 'ies'}:")
    if verbose:
        click.echo("=" * 100)
        for entry in entries:
            click.echo(f"\nEntry ID: {entry.id}")
            click.echo(f"  Date: {entry.date}")
            click.echo(f"  Kind: {entry.kind.value}")
            click.echo(f"  Amount: {entry.amount:,.2f}")
            click.echo(f"  Category: {entry.category}")
            click.echo(f"  Description: {entry.description}")
            click.echo(f"  Payment method: {entry.payment_method or '-'}")
            click.echo(f"  Status: {entry.status.value}")
            if entry.is_manual:
                click.echo("  Origin: Manual")
            else:
                click.echo(f"  Origin: {entry.origin.value} ({entry.origin_id})")
            if entry.reference:
                click.echo(f"  Reference: {entry.reference}")
            if entry.notes:
                click.echo(f"  Notes: {entry.notes}")
            click.echo("-" * 100)
        return

    click.echo("-" * 100)
    click.echo(
        f"{'ID':<6} {'Date':<12} {'Kind':<8} {'Amount':>14} {'Origin':<8} {'Status':<10} {'Description':<36}"
    )
    click.echo("-" * 100)
    for entry in entries:
        amount_str = f"{entry.amount:,.2f}"
        click.echo(
            f"{entry.id:<6} {str(entry.date):<12} {entry.kind.value:<8} {amount_str:>14} "
            f"{entry.origin.value:<8} {entry.status.value:<10} {entry.description[:36]:<36}"
        )


@click.command("delete")
@click.argument("entry_id", type=int)
@click.pass_context
def delete_entry(ctx, entry_id: int):
    """Delete a manual ledger entry.

    Synced entries belong to their register; remove the source record instead.
    """

    async def handler(engine):
        await engine.ledger_service.delete_manual_entry(entry_id)

    run_with_engine(ctx, handler)
    click.echo(f"Deleted entry {entry_id}")


@click.command("stats")
@click.pass_context
def stats(ctx):
    """Show ledger statistics."""

    async def handler(engine):
        return await engine.summary.get_stats()

    result = run_with_engine(ctx, handler)

    click.echo(f"Total entries: {result.total_entries}")
    click.echo(f"  Tuition: {result.tuition_entries}")
    click.echo(f"  Payroll: {result.payroll_entries}")
    click.echo(f"  Manual: {result.manual_entries}")
    click.echo(f"Validated inflows: {result.total_inflows:,.2f}")
    click.echo(f"Validated outflows: {result.total_outflows:,.2f}")
    click.echo(f"Net balance: {result.net_balance:,.2f}")


def _enum_value(enum_type, value: str):
    """Resolve a case-insensitive click choice to its enum member."""
    for member in enum_type:
        if member.value.lower() == value.lower():
            return member
    raise click.BadParameter(f"Unknown value: {value}")


def register_commands(cli):
    """Register ledger entry commands with main CLI."""
    cli.add_command(add_entry)
    cli.add_command(list_entries)
    cli.add_command(delete_entry)
    cli.add_command(stats)
