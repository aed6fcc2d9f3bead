"""Run async engine work from synchronous click commands."""

import asyncio
from typing import Any, Awaitable, Callable

import click

from ledgersync.domain.errors import DomainError
from ledgersync.engine import ReconciliationEngine


def run_with_engine(
    ctx: click.Context,
    handler: Callable[[ReconciliationEngine], Awaitable[Any]],
    **engine_options: Any,
) -> Any:
    """Run handler against a fresh engine on the command's store.

    The schema is created if needed, and the engine and store are released
    when the handler returns. Domain errors exit the command with status 1.
    """
    store = ctx.obj["store"]

    async def runner():
        await store.initialize_schema()
        engine = ReconciliationEngine.from_store(store, **engine_options)
        try:
            return await handler(engine)
        finally:
            await engine.close()
            await store.disconnect()

    try:
        return asyncio.run(runner())
    except DomainError as e:
        fail(ctx, e)


def fail(ctx: click.Context, message: Any) -> None:
    """Print an error and exit the command with status 1."""
    click.echo(f"Error: {message}", err=True)
    ctx.exit(1)


def parse_or_fail(
    ctx: click.Context, parser: Callable[[str], Any], value: str, label: str
) -> Any:
    """Parse an option value, failing the command with 'Invalid <label>' on ValueError."""
    try:
        return parser(value)
    except ValueError as e:
        fail(ctx, f"Invalid {label}: {e}")
