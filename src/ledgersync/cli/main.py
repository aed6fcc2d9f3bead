"""Main CLI entry point."""

import click
from ledgersync.database.factories import create_sqlite_store
from ledgersync.logging_config import setup_logging

# Import and register all commands at module level
from ledgersync.cli.commands import (
    sync,
    consistency,
    dedup,
    entries,
    sources,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides LEDGERSYNC_DB_PATH environment variable)",
    envvar="LEDGERSYNC_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    envvar="LEDGERSYNC_LOG_LEVEL",
    show_default=True,
    help="Log level",
)
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Log output format",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str, log_format: str):
    """Ledgersync - Tuition and payroll ledger reconciliation.

    Keeps a unified ledger in step with the tuition and payroll registers,
    removes duplicate entries and repairs missing or orphaned ones.
    """
    ctx.ensure_object(dict)
    setup_logging(log_level, log_format)

    # Create the store only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        ctx.obj["store"] = create_sqlite_store(database_path=db_path)


# Register all commands
sync.register_commands(cli)
consistency.register_commands(cli)
dedup.register_commands(cli)
entries.register_commands(cli)
sources.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
