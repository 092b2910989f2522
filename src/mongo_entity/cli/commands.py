"""
CLI commands for mongo-entity.

Uses click for command-line argument parsing. Connection settings come from
options or ``MONGO_*`` environment variables (a ``.env`` file is loaded first).
"""

import asyncio
import json
import sys
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any, TypeVar

import click
from dotenv import load_dotenv
from pymongo.errors import PyMongoError

from ..client import EntityClient
from ..config import DEFAULT_COMM_TIMEOUT_MS, DEFAULT_KEY_FIELD, ClientConfig
from ..exceptions import MongoEntityError

T = TypeVar("T")


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run an async coroutine synchronously."""
    return asyncio.run(coro)


def parse_record(ctx: click.Context, param: click.Parameter, value: str) -> dict[str, Any]:
    """Parse a JSON object argument."""
    try:
        record = json.loads(value)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"invalid JSON: {e}") from e
    if not isinstance(record, dict):
        raise click.BadParameter("expected a JSON object")
    return record


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


def execute(ctx: click.Context, operation: Callable[[EntityClient], Awaitable[T]]) -> T:
    """Open a client from the group options, run ``operation`` and close it."""

    async def run() -> T:
        config = ClientConfig(**ctx.obj)
        async with EntityClient(config) as client:
            return await operation(client)

    try:
        return run_async(run())
    except (MongoEntityError, PyMongoError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option(
    "--host",
    "hosts",
    multiple=True,
    envvar="MONGO_HOSTS",
    help="host:port of a server (repeatable, or comma-separated)",
)
@click.option("--user", "-u", envvar="MONGO_USER", default="", help="Database user")
@click.option("--password", "-p", envvar="MONGO_PASSWORD", default="", help="Database password")
@click.option("--database", "-d", envvar="MONGO_DATABASE", default="", help="Target database")
@click.option("--auth-database", envvar="MONGO_AUTH_DATABASE", default=None, help="Database holding the user")
@click.option(
    "--timeout",
    envvar="MONGO_TIMEOUT_MS",
    type=int,
    default=DEFAULT_COMM_TIMEOUT_MS,
    show_default=True,
    help="Communication timeout in milliseconds",
)
@click.option("--key-field", envvar="MONGO_KEY_FIELD", default=DEFAULT_KEY_FIELD, show_default=True, help="Key field name")
@click.pass_context
def cli(
    ctx: click.Context,
    hosts: tuple[str, ...],
    user: str,
    password: str,
    database: str,
    auth_database: str | None,
    timeout: int,
    key_field: str,
) -> None:
    """Key-addressed record operations on MongoDB."""
    ctx.ensure_object(dict)
    ctx.obj.update(
        hosts=",".join(hosts),
        user=user,
        password=password,
        database=database,
        auth_database=auth_database,
        comm_timeout_ms=timeout,
        key_field=key_field,
    )


@cli.command()
@click.pass_context
def ping(ctx: click.Context) -> None:
    """Check that the server is reachable."""
    execute(ctx, lambda client: client.ping())
    click.echo("OK")


@cli.command()
@click.argument("entity")
@click.argument("key")
@click.pass_context
def read(ctx: click.Context, entity: str, key: str) -> None:
    """Read the record of ENTITY with key KEY."""
    echo_json(execute(ctx, lambda client: client.read(entity, key)))


@cli.command()
@click.argument("entity")
@click.argument("field", required=False, default="")
@click.argument("value", required=False, default="")
@click.pass_context
def find(ctx: click.Context, entity: str, field: str, value: str) -> None:
    """List records of ENTITY, or those where FIELD equals VALUE."""
    echo_json(execute(ctx, lambda client: client.find(entity, field, value)))


@cli.command()
@click.argument("entity")
@click.argument("key")
@click.argument("record", callback=parse_record)
@click.pass_context
def create(ctx: click.Context, entity: str, key: str, record: dict[str, Any]) -> None:
    """Insert RECORD (a JSON object) into ENTITY under KEY."""
    echo_json(execute(ctx, lambda client: client.create(entity, key, record)))


@cli.command()
@click.argument("entity")
@click.argument("record", callback=parse_record)
@click.option("--id", "record_id", default="", help="Key of the record to update")
@click.pass_context
def update(ctx: click.Context, entity: str, record: dict[str, Any], record_id: str) -> None:
    """Merge RECORD (a JSON object) into a record of ENTITY."""
    execute(ctx, lambda client: client.update(entity, record_id, record))
    click.echo(f"Updated {entity}")


@cli.command()
@click.argument("entity")
@click.argument("record_id", metavar="ID")
@click.pass_context
def delete(ctx: click.Context, entity: str, record_id: str) -> None:
    """Delete the record of ENTITY with key ID."""
    execute(ctx, lambda client: client.delete(entity, record_id))
    click.echo(f"Deleted {entity}:{record_id}")


def main() -> None:
    """Entry point for the CLI."""
    load_dotenv()
    cli()


if __name__ == "__main__":
    main()
