"""Config commands -- create, inspect and select tenant profiles.

Provides the ``glueapi config`` sub-command group. Profiles hold the API
base URL, the auth strategy with its credential *sources* and the retry
settings; secrets themselves are never written to disk.
"""

from __future__ import annotations

from typing import Optional

import typer

from glueapi.commands import cli_options
from glueapi.exceptions import GlueError
from glueapi.output import error, info, print_records


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("init")
def config_init(
    ctx: typer.Context,
    name: str = typer.Argument(help="Profile name."),
    base_url: str = typer.Option(
        "https://api.itglue.com", "--base-url", help="API root URL."
    ),
    auth_type: str = typer.Option(
        "api_key", "--auth", help="Auth type: api_key or password."
    ),
    source: str = typer.Option(
        "prompt", "--source", help="API key source: env:VAR, file:/path or prompt."
    ),
    username_source: Optional[str] = typer.Option(
        None, "--username-source", help="Username source (password auth)."
    ),
    password_source: Optional[str] = typer.Option(
        None, "--password-source", help="Password source (password auth)."
    ),
    otp_source: Optional[str] = typer.Option(
        None, "--otp-source", help="One-time password source (password auth)."
    ),
    page_size: Optional[int] = typer.Option(
        None, "--page-size", min=1, help="Initial page size for list fetches."
    ),
    set_default: bool = typer.Option(
        False, "--default", help="Make this the default profile."
    ),
) -> None:
    """Create or overwrite a profile.

    Example::

        glueapi config init acme --source env:GLUE_API_KEY --default
        glueapi config init acme --auth password \\
            --username-source env:GLUE_USER --password-source prompt
    """
    from glueapi.auth import create_default_manager
    from glueapi.config import (
        load_global_config,
        profile_exists,
        save_global_config,
        save_profile,
    )
    from glueapi.models import AuthConfig, Profile, RequestConfig

    auth_types = create_default_manager().list_types()
    if auth_type not in auth_types:
        error(f"Unknown auth type: {auth_type}. Choose from: {', '.join(auth_types)}")
        raise typer.Exit(code=2)

    if profile_exists(name) and not cli_options(ctx).force:
        if not typer.confirm(f"Profile '{name}' exists. Overwrite?"):
            info("Cancelled.")
            raise typer.Exit()

    if auth_type == "password":
        auth = AuthConfig(
            type="password",
            username_source=username_source or "prompt",
            password_source=password_source or "prompt",
            otp_source=otp_source,
        )
    else:
        auth = AuthConfig(type="api_key", source=source)

    request = RequestConfig(page_size=page_size) if page_size else RequestConfig()
    save_profile(Profile(name=name, base_url=base_url.rstrip("/"), auth=auth, request=request))
    info(f"Saved profile '{name}'")

    if set_default:
        config = load_global_config()
        config.default_profile = name
        save_global_config(config)
        info(f"Default profile is now '{name}'")
    else:
        info(f"Make it the default with: glueapi config use {name}")


@config_app.command("show")
def config_show(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(
        None, help="Profile name (default: the active profile)."
    ),
) -> None:
    """Show a profile, or the global configuration when none is active."""
    from glueapi.config import get_config_dir, load_profile, resolve_config

    try:
        if name is not None:
            profile = load_profile(name)
            config = None
        else:
            config, profile = resolve_config(cli_profile=cli_options(ctx).profile)
    except GlueError as exc:
        raise typer.Exit(code=exc.exit_code) from None

    info(f"Config directory: {get_config_dir()}")
    if profile is not None:
        print_records(profile.model_dump(mode="json", exclude_none=True))
    elif config is not None:
        print_records(config.model_dump(mode="json"))


@config_app.command("list")
def config_list() -> None:
    """List stored profiles; the default one is marked with ``*``."""
    from glueapi.config import list_profiles, load_global_config

    names = list_profiles()
    if not names:
        info("No profiles configured.")
        info("Create one with: glueapi config init <name>")
        return

    default = load_global_config().default_profile
    for profile_name in names:
        marker = "*" if profile_name == default else " "
        typer.echo(f"{marker} {profile_name}")


@config_app.command("remove")
def config_remove(
    ctx: typer.Context,
    name: str = typer.Argument(help="Profile name."),
) -> None:
    """Delete a profile. Clears the default if it pointed at it."""
    from glueapi.config import delete_profile, load_global_config, save_global_config

    if not cli_options(ctx).force and not typer.confirm(f"Delete profile '{name}'?"):
        info("Cancelled.")
        raise typer.Exit()

    try:
        delete_profile(name)
    except GlueError as exc:
        raise typer.Exit(code=exc.exit_code) from None

    config = load_global_config()
    if config.default_profile == name:
        config.default_profile = None
        save_global_config(config)
    info(f"Deleted profile '{name}'")


@config_app.command("use")
def config_use(
    name: str = typer.Argument(help="Profile name."),
) -> None:
    """Set the default profile."""
    from glueapi.config import load_global_config, profile_exists, save_global_config

    if not profile_exists(name):
        error(f"Profile '{name}' not found")
        raise typer.Exit(code=2)

    config = load_global_config()
    config.default_profile = name
    save_global_config(config)
    info(f"Default profile is now '{name}'")


@config_app.command("output")
def config_output(
    record_format: str = typer.Argument(help="Default record format: auto, json, plain or rich."),
) -> None:
    """Set the record format used when neither --json nor --plain is given."""
    from glueapi.config import load_global_config, save_global_config
    from glueapi.output import OutputFormat

    try:
        chosen = OutputFormat(record_format)
    except ValueError:
        choices = ", ".join(f.value for f in OutputFormat)
        error(f"Unknown output format: {record_format}. Choose from: {choices}")
        raise typer.Exit(code=2) from None

    config = load_global_config()
    config.output.format = chosen.value
    save_global_config(config)
    info(f"Default output format is now '{chosen.value}'")
