"""Record commands -- list, get, create, update and delete.

Each command validates its arguments, resolves the active profile, opens a
:class:`~glueapi.client.SyncClient` for it and calls one library
operation. Records go to stdout in the active output format; retry and
backoff diagnostics go to stderr.

Example::

    glueapi list organizations --filter name=Acme
    glueapi get configurations 1234 --json
    glueapi update contacts 77 --body '{"title": "CTO"}'
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

import typer

from glueapi.commands import cli_options
from glueapi.exceptions import ConfigError, GlueError, InvalidUsageError
from glueapi.output import error, info, print_records


def _usage_error(message: str) -> InvalidUsageError:
    error(message)
    return InvalidUsageError(message)


def _parse_filters(pairs: list[str]) -> dict[str, str]:
    """Parse repeated ``--filter key=value`` options."""
    filters: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise _usage_error(f"Filters must look like key=value, got: {pair}")
        filters[key.strip()] = value.strip()
    return filters


def _parse_body(body: str) -> dict[str, Any]:
    """Parse a JSON object given inline or as ``@path/to/file.json``."""
    text = body
    if body.startswith("@"):
        path = Path(body[1:]).expanduser()
        if not path.is_file():
            raise _usage_error(f"Body file not found: {path}")
        text = path.read_text(encoding="utf-8")
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise _usage_error(f"Body is not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise _usage_error("Body must be a JSON object")
    return parsed


@contextmanager
def _exit_on_error() -> Iterator[None]:
    """Exit with the code of any :class:`~glueapi.exceptions.GlueError`.

    The error was logged where it was raised.
    """
    try:
        yield
    except GlueError as exc:
        raise typer.Exit(code=exc.exit_code) from None


@contextmanager
def _session(ctx: typer.Context) -> Iterator[Any]:
    """Open an authenticated client for the active profile."""
    from glueapi.auth import create_default_manager
    from glueapi.client import SyncClient
    from glueapi.config import resolve_config

    options = cli_options(ctx)
    _, profile = resolve_config(cli_profile=options.profile, cli_base_url=options.base_url)
    if profile is None:
        message = "No profile selected. Create one with 'glueapi config init' or pass --profile."
        error(message)
        raise ConfigError(message)
    with SyncClient(profile, auth_manager=create_default_manager()) as client:
        yield client


def list_command(
    ctx: typer.Context,
    endpoint: str = typer.Argument(help="Resource path, e.g. organizations."),
    filter_: list[str] = typer.Option(
        [], "--filter", "-F", help="Filter as key=value (repeatable)."
    ),
    sort: Optional[str] = typer.Option(None, "--sort", help="Sort expression, e.g. -updated_at."),
    page_size: Optional[int] = typer.Option(
        None, "--page-size", min=1, help="Starting page size (default from profile)."
    ),
) -> None:
    """Fetch every record of a list endpoint."""
    from glueapi.fetch import fetch_all

    with _exit_on_error():
        filters = _parse_filters(filter_)
        with _session(ctx) as client:
            records = fetch_all(client, endpoint, filters, sort=sort, page_size=page_size)
    info(f"{len(records)} records")
    print_records(records)


def get_command(
    ctx: typer.Context,
    endpoint: str = typer.Argument(help="Resource path, e.g. configurations."),
    record_id: str = typer.Argument(help="Record id."),
) -> None:
    """Fetch one record by id."""
    from glueapi.fetch import fetch_one

    with _exit_on_error(), _session(ctx) as client:
        record = fetch_one(client, endpoint, record_id)
    print_records(record)


def create_command(
    ctx: typer.Context,
    endpoint: str = typer.Argument(help="Resource path, e.g. contacts."),
    body: str = typer.Option(..., "--body", "-b", help="Attributes as JSON, or @file.json."),
    resource_type: Optional[str] = typer.Option(
        None, "--type", help="JSON:API resource type (default derived from the endpoint)."
    ),
) -> None:
    """Create a record."""
    from glueapi.fetch import mutate

    with _exit_on_error():
        attributes = _parse_body(body)
        with _session(ctx) as client:
            record = mutate(client, endpoint, "create", attributes, resource_type=resource_type)
    info(f"Created {endpoint} record {record.get('id', '') if record else ''}".rstrip())
    print_records(record)


def update_command(
    ctx: typer.Context,
    endpoint: str = typer.Argument(help="Resource path, e.g. contacts."),
    record_id: str = typer.Argument(help="Record id."),
    body: str = typer.Option(..., "--body", "-b", help="Attributes as JSON, or @file.json."),
    resource_type: Optional[str] = typer.Option(None, "--type", help="JSON:API resource type."),
) -> None:
    """Update a record."""
    from glueapi.fetch import mutate

    with _exit_on_error():
        attributes = _parse_body(body)
        with _session(ctx) as client:
            record = mutate(
                client,
                endpoint,
                "update",
                attributes,
                record_id=record_id,
                resource_type=resource_type,
            )
    info(f"Updated {endpoint} record {record_id}")
    print_records(record)


def delete_command(
    ctx: typer.Context,
    endpoint: str = typer.Argument(help="Resource path, e.g. contacts."),
    record_id: str = typer.Argument(help="Record id."),
) -> None:
    """Delete a record. Asks for confirmation unless --force is given."""
    from glueapi.fetch import mutate

    if not cli_options(ctx).force and not typer.confirm(f"Delete {endpoint} record {record_id}?"):
        info("Cancelled.")
        raise typer.Exit()

    with _exit_on_error(), _session(ctx) as client:
        mutate(client, endpoint, "delete", record_id=record_id)
    info(f"Deleted {endpoint} record {record_id}")
