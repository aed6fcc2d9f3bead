"""Consistency validation and repair commands."""

import click

from ledgersync.cli.runtime import run_with_engine


@click.command("validate")
@click.option("--verbose", "-v", is_flag=True, help="List every violation")
@click.pass_context
def validate(ctx, verbose: bool):
    """Compare the registers with the ledger.

    Exits with status 1 when the ledger is inconsistent.
    """

    async def handler(engine):
        return await engine.consistency.validate()

    report = run_with_engine(ctx, handler)

    for origin, count in report.missing_by_origin.items():
        click.echo(f"Missing {origin.value.lower()} entries: {count}")
    click.echo(f"Orphaned entries: {report.orphan_count}")

    if verbose:
        for violation in report.violations:
            click.echo(f"  [{violation.invariant}] {violation.message}")

    if report.is_consistent:
        click.echo("Ledger is consistent.")
    else:
        for issue in report.issues:
            click.echo(f"Issue: {issue}", err=True)
        ctx.exit(1)


@click.command("repair")
@click.pass_context
def repair(ctx):
    """Create missing ledger entries and delete orphaned ones."""

    async def handler(engine):
        return await engine.consistency.repair()

    report = run_with_engine(ctx, handler)

    for origin, count in report.created_by_origin.items():
        click.echo(f"Created {origin.value.lower()} entries: {count}")
    click.echo(f"Orphans removed: {report.orphans_removed}")
    for error in report.errors:
        click.echo(f"  Error: {error}", err=True)
    if report.errors:
        ctx.exit(1)


def register_commands(cli):
    """Register consistency commands with main CLI."""
    cli.add_command(validate)
    cli.add_command(repair)
