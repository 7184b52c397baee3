"""Profiles, global settings and credential sources.

Layout under ``$XDG_CONFIG_HOME/glueapi`` (default ``~/.config/glueapi``)::

    config.json            GlobalConfig: default profile, output format
    profiles/<name>.json   one Profile per tenant

Crash logs live under ``$XDG_DATA_HOME/glueapi``. A profile stores where
its credentials come from (``env:NAME``, ``file:PATH`` or ``prompt``), never
the credentials; :func:`resolve_credential` reads them when a client
authenticates.
"""

from __future__ import annotations

import getpass
import json
import os
import sys
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from glueapi.exceptions import ConfigError
from glueapi.models import GlobalConfig, Profile
from glueapi.output import get_output

PROFILE_ENV = "GLUEAPI_PROFILE"
BASE_URL_ENV = "GLUEAPI_BASE_URL"

_ModelT = TypeVar("_ModelT", bound=BaseModel)


def _config_error(message: str) -> ConfigError:
    get_output().error(message)
    return ConfigError(message)


# --- Directories ---


def _app_dir(env_var: str, *fallback: str) -> Path:
    root = os.environ.get(env_var) or Path.home().joinpath(*fallback)
    path = Path(root) / "glueapi"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    return _app_dir("XDG_CONFIG_HOME", ".config")


def get_data_dir() -> Path:
    return _app_dir("XDG_DATA_HOME", ".local", "share")


def get_profiles_dir() -> Path:
    path = get_config_dir() / "profiles"
    path.mkdir(exist_ok=True)
    return path


# --- JSON documents ---


def _write_json(path: Path, model: BaseModel, **dump: Any) -> None:
    """Replace *path* with *model* as JSON, via a staging file and ``os.replace``."""
    text = json.dumps(model.model_dump(mode="json", **dump), indent=2) + "\n"
    path.parent.mkdir(parents=True, exist_ok=True)
    staging = path.with_name(f".{path.name}.{os.getpid()}.tmp")
    try:
        with staging.open("w", encoding="utf-8") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(staging, path)
    except BaseException:
        staging.unlink(missing_ok=True)
        raise


def _read_json(path: Path, model: type[_ModelT], what: str) -> _ModelT:
    try:
        return model.model_validate_json(path.read_bytes())
    except ValidationError as exc:
        raise _config_error(f"Invalid {what} at {path}: {exc}") from exc


def _global_config_file() -> Path:
    return get_config_dir() / "config.json"


def load_global_config() -> GlobalConfig:
    """Return the stored global settings, or the defaults if none are stored."""
    path = _global_config_file()
    if not path.is_file():
        return GlobalConfig()
    return _read_json(path, GlobalConfig, "global config")


def save_global_config(config: GlobalConfig) -> None:
    _write_json(_global_config_file(), config)


# --- Profiles ---


def _profile_file(name: str, must_exist: bool = False) -> Path:
    path = get_profiles_dir() / f"{name}.json"
    if must_exist and not path.is_file():
        raise _config_error(f"Profile '{name}' not found at {path}")
    return path


def list_profiles() -> list[str]:
    return sorted(p.stem for p in get_profiles_dir().glob("*.json") if p.is_file())


def profile_exists(name: str) -> bool:
    return _profile_file(name).is_file()


def load_profile(name: str) -> Profile:
    """Read a stored profile.

    Raises:
        ConfigError: The profile is missing or fails validation.
    """
    return _read_json(_profile_file(name, must_exist=True), Profile, f"profile '{name}'")


def save_profile(profile: Profile) -> None:
    _write_json(_profile_file(profile.name), profile, exclude_none=True)


def delete_profile(name: str) -> None:
    _profile_file(name, must_exist=True).unlink()


def resolve_config(
    cli_profile: Optional[str] = None,
    cli_base_url: Optional[str] = None,
) -> tuple[GlobalConfig, Optional[Profile]]:
    """Return the global settings and the active profile, if one can be chosen.

    The profile name is the first of *cli_profile*, ``$GLUEAPI_PROFILE`` and
    ``default_profile``; failing those, the only stored profile when
    ``auto_select_single_profile`` is on. *cli_base_url*, then
    ``$GLUEAPI_BASE_URL``, replaces the profile's base URL.
    """
    settings = load_global_config()
    name = cli_profile or os.environ.get(PROFILE_ENV) or settings.default_profile
    if name is None and settings.auto_select_single_profile:
        stored = list_profiles()
        if len(stored) == 1:
            name = stored[0]
    if name is None:
        return settings, None

    profile = load_profile(name)
    base_url = cli_base_url or os.environ.get(BASE_URL_ENV)
    if base_url:
        profile = profile.model_copy(update={"base_url": base_url})
    return settings, profile


# --- Credential sources ---


def _from_env(reference: str) -> str:
    value = os.environ.get(reference)
    if value is None:
        raise _config_error(f"Environment variable '{reference}' is not set")
    return value


def _from_file(reference: str) -> str:
    path = Path(reference).expanduser()
    try:
        return path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        raise _config_error(f"Credential file not found: {path}") from None
    except OSError as exc:
        raise _config_error(f"Cannot read credential file {path}: {exc}") from exc


_SOURCE_READERS: dict[str, Callable[[str], str]] = {
    "env": _from_env,
    "file": _from_file,
}


def resolve_credential(source: str, label: str = "credential") -> str:
    """Read the secret *source* points at.

    ``env:NAME`` reads an environment variable, ``file:PATH`` reads a file
    with surrounding whitespace stripped, and ``prompt`` asks on the
    terminal without echo. *label* names the secret in the prompt.

    Raises:
        ConfigError: The source is unknown or yields nothing.
    """
    if source == "prompt":
        if not sys.stdin.isatty():
            raise _config_error(f"Cannot prompt for {label}: stdin is not a TTY")
        return getpass.getpass(f"Enter {label}: ")

    scheme, _, reference = source.partition(":")
    reader = _SOURCE_READERS.get(scheme)
    if reader is None or not reference:
        raise _config_error(f"Unknown credential source format: {source}")
    return reader(reference)
