"""Shared test fixtures for glueapi.

Provides isolated config environments, output state management, a client
factory over mock transports, and a CLI runner. These fixtures are
discovered by pytest automatically.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from glueapi.client import SyncClient
from glueapi.output import LogSink, reset_output, set_output

from helpers import make_profile


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Drop the installed sink after every test.

    A sink binds sys.stderr when it is built, and CliRunner swaps that
    stream per invocation.
    """
    yield
    reset_output()


@pytest.fixture
def quiet_output() -> LogSink:
    """Install a colourless sink that only lets warnings and errors through."""
    output = LogSink(no_color=True, quiet=True)
    set_output(output)
    return output


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME and XDG_DATA_HOME at subdirectories of
    tmp_path and clears every GLUEAPI_* variable.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ("GLUEAPI_PROFILE", "GLUEAPI_BASE_URL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Client factory
# ---------------------------------------------------------------------------


@pytest.fixture
def make_client(quiet_output: LogSink) -> Callable[..., SyncClient]:
    """Factory for entered clients over a mock handler.

    Keyword arguments become :class:`~glueapi.models.RequestConfig` fields.
    Backoff sleeps are recorded on ``client.sleeps`` instead of blocking.
    Clients are closed at teardown.
    """
    opened: list[SyncClient] = []

    def _factory(handler: Callable[[httpx.Request], httpx.Response], **request: Any) -> SyncClient:
        sleeps: list[float] = []
        client = SyncClient(
            make_profile(**request),
            sleep=sleeps.append,
            transport=httpx.MockTransport(handler),
        )
        client.__enter__()
        client.sleeps = sleeps  # type: ignore[attr-defined]
        opened.append(client)
        return client

    yield _factory
    for client in opened:
        client.__exit__(None, None, None)


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
