"""Sync lifecycle commands."""

import asyncio
import click

from ledgersync.cli.runtime import run_with_engine
from ledgersync.domain.notifications import (
    DeduplicationCompleted,
    DuplicateAlert,
    SyncCompleted,
    SyncError,
)
from ledgersync.domain.scheduler import SchedulerConfig


def _echo_notification(notification) -> None:
    stamp = notification.time.strftime("%H:%M:%S")
    if isinstance(notification, SyncCompleted):
        click.echo(
            f"[{stamp}] synced {notification.origin.value} {notification.origin_id} "
            f"({notification.amount:,.2f})"
        )
    elif isinstance(notification, SyncError):
        click.echo(
            f"[{stamp}] sync error {notification.origin.value} "
            f"{notification.origin_id or ''}: {notification.message}",
            err=True,
        )
    elif isinstance(notification, DuplicateAlert):
        click.echo(
            f"[{stamp}] warning: {notification.duplicates_found} duplicate(s) detected "
            f"(threshold {notification.threshold}), removing",
            err=True,
        )
    elif isinstance(notification, DeduplicationCompleted) and notification.removed:
        click.echo(f"[{stamp}] removed {notification.removed} duplicate(s)")


def _echo_sync_result(result) -> None:
    click.echo(f"Synced {result.synced_records} record(s)")
    for error in result.errors:
        click.echo(f"  Error: {error}", err=True)


@click.command("serve")
@click.option(
    "--dedup-interval",
    type=float,
    default=30.0,
    show_default=True,
    help="Seconds between automatic deduplication sweeps",
)
@click.option(
    "--alert-threshold",
    type=int,
    default=5,
    show_default=True,
    help="Duplicate count above which an alert is shown",
)
@click.option("--silent", is_flag=True, help="Do not show duplicate alerts")
@click.option("--no-dedup", is_flag=True, help="Disable automatic deduplication")
@click.option(
    "--duration",
    type=float,
    help="Stop after this many seconds (default: run until interrupted)",
)
@click.pass_context
def serve(
    ctx,
    dedup_interval: float,
    alert_threshold: int,
    silent: bool,
    no_dedup: bool,
    duration: float | None,
):
    """Backfill the ledger, then follow both registers live.

    Runs until interrupted (Ctrl+C) or until --duration elapses.
    """
    config = SchedulerConfig(
        enabled=not no_dedup,
        interval=dedup_interval,
        alert_threshold=alert_threshold,
        silent=silent,
    )

    async def handler(engine):
        engine.notifications.subscribe(_echo_notification)
        result = await engine.start()
        _echo_sync_result(result)
        status = engine.orchestrator.get_status()
        click.echo(f"Listening on {status.active_listeners} register(s). Press Ctrl+C to stop.")
        if duration is not None:
            await asyncio.sleep(duration)
        else:
            await asyncio.Event().wait()

    try:
        run_with_engine(ctx, handler, scheduler_config=config)
    except KeyboardInterrupt:
        click.echo("Stopped.")


@click.command("backfill")
@click.pass_context
def backfill(ctx):
    """Create ledger entries for every existing source record."""

    async def handler(engine):
        return await engine.orchestrator.sync_all_existing_data()

    result = run_with_engine(ctx, handler)
    click.echo(f"Tuition records synced: {result.tuition_synced}")
    click.echo(f"Payroll records synced: {result.payroll_synced}")
    for error in result.errors:
        click.echo(f"  Error: {error}", err=True)
    if result.errors:
        ctx.exit(1)


@click.command("health")
@click.pass_context
def health(ctx):
    """Start the sync once and report its health."""

    async def handler(engine):
        await engine.start(with_scheduler=False)
        return engine.health_check()

    report = run_with_engine(ctx, handler)
    if report.is_healthy:
        click.echo("Sync is healthy.")
        return

    click.echo("Issues:")
    for issue in report.issues:
        click.echo(f"  - {issue}")
    click.echo("Recommendations:")
    for recommendation in report.recommendations:
        click.echo(f"  - {recommendation}")
    ctx.exit(1)


def register_commands(cli):
    """Register sync commands with main CLI."""
    cli.add_command(serve)
    cli.add_command(backfill)
    cli.add_command(health)
