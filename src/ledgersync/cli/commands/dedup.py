"""Duplicate analysis and removal commands."""

import click

from ledgersync.cli.runtime import run_with_engine


@click.group("dedup")
def dedup_group():
    """Find and remove duplicate ledger entries."""
    pass


@dedup_group.command("analyze")
@click.pass_context
def analyze(ctx):
    """Report groups of entries sharing a signature (read-only)."""

    async def handler(engine):
        return await engine.dedup.analyze()

    analysis = run_with_engine(ctx, handler)

    click.echo(f"Total entries: {analysis.total_entries}")
    click.echo(f"Duplicates found: {analysis.duplicates_found}")
    if not analysis.duplicate_groups:
        return

    click.echo(f"\n{'Count':>5}  {'Date':<10}  {'Amount':>14}  Description")
    click.echo("-" * 70)
    for group in analysis.duplicate_groups:
        click.echo(
            f"{group.count:>5}  {group.date.isoformat():<10}  "
            f"{group.amount:>14,.2f}  {group.sample_description}"
        )


@dedup_group.command("remove")
@click.option(
    "--by-origin",
    is_flag=True,
    help="Group by source record instead of signature (manual entries are left alone)",
)
@click.pass_context
def remove(ctx, by_origin):
    """Delete duplicates, keeping the most recently created entry of each group."""

    async def handler(engine):
        if by_origin:
            return await engine.dedup.remove_origin_duplicates()
        return await engine.dedup.remove()

    removal = run_with_engine(ctx, handler)

    click.echo(f"Duplicates removed: {removal.duplicates_removed}")
    click.echo(f"Entries kept: {removal.kept}")
    for error in removal.errors:
        click.echo(f"  Error: {error}", err=True)
    if removal.errors:
        ctx.exit(1)


@dedup_group.command("force-check")
@click.pass_context
def force_check(ctx):
    """Run one analyze + remove cycle now."""

    async def handler(engine):
        return await engine.scheduler.force_check()

    result = run_with_engine(ctx, handler)

    click.echo(f"Duplicates found: {result.duplicates_found}")
    click.echo(f"Duplicates removed: {result.duplicates_removed}")
    for error in result.errors:
        click.echo(f"  Error: {error}", err=True)
    if result.errors:
        ctx.exit(1)


def register_commands(cli):
    """Register dedup commands with main CLI."""
    cli.add_command(dedup_group)
