"""Tests for glueapi.config -- XDG paths, JSON documents, profiles, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from glueapi.config import (
    _write_json,
    delete_profile,
    get_config_dir,
    get_data_dir,
    get_profiles_dir,
    list_profiles,
    load_global_config,
    load_profile,
    profile_exists,
    resolve_config,
    resolve_credential,
    save_global_config,
    save_profile,
)
from glueapi.exceptions import ConfigError
from glueapi.models import AuthConfig, GlobalConfig, OutputConfig, Profile, RequestConfig


def _make_profile(name: str = "acme", base_url: str = "https://api.itglue.com") -> Profile:
    return Profile(name=name, base_url=base_url)


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestPaths:
    def test_config_dir_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".config" / "glueapi"
        assert result.is_dir()

    def test_config_dir_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "custom"))
        assert get_config_dir() == tmp_path / "custom" / "glueapi"

    def test_empty_env_falls_back_to_home(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("XDG_DATA_HOME", "")
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        assert get_data_dir() == tmp_path / ".local" / "share" / "glueapi"

    def test_data_dir_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
        assert get_data_dir() == tmp_path / "data" / "glueapi"

    def test_profiles_dir_is_inside_config_dir(self, isolated_config: Path) -> None:
        assert get_profiles_dir() == get_config_dir() / "profiles"


# ---------------------------------------------------------------------------
# JSON documents
# ---------------------------------------------------------------------------


class TestWriteJson:
    def test_creates_file_and_parents(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "config.json"
        _write_json(target, GlobalConfig(default_profile="acme"))
        assert json.loads(target.read_text())["default_profile"] == "acme"
        assert [p.name for p in target.parent.iterdir()] == ["config.json"]

    def test_no_staging_file_left_on_error(self, tmp_path: Path) -> None:
        target = tmp_path / "config.json"
        with patch("glueapi.config.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                _write_json(target, GlobalConfig())
        assert list(tmp_path.iterdir()) == []

    def test_existing_file_survives_failed_write(self, tmp_path: Path) -> None:
        target = tmp_path / "config.json"
        _write_json(target, GlobalConfig(default_profile="old"))
        with patch("glueapi.config.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                _write_json(target, GlobalConfig(default_profile="new"))
        assert json.loads(target.read_text())["default_profile"] == "old"


# ---------------------------------------------------------------------------
# Global config and profiles
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_defaults_when_missing(self, isolated_config: Path) -> None:
        config = load_global_config()
        assert config.default_profile is None
        assert config.auto_select_single_profile is True
        assert config.output.format == "auto"

    def test_roundtrip(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(default_profile="acme", output=OutputConfig(format="json")))
        loaded = load_global_config()
        assert loaded.default_profile == "acme"
        assert loaded.output.format == "json"

    def test_invalid_json(self, isolated_config: Path, quiet_output, capsys) -> None:
        (get_config_dir() / "config.json").write_text("{nope")
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()
        assert "Error: Invalid global config" in capsys.readouterr().err

    def test_unknown_output_format_rejected(self, isolated_config: Path) -> None:
        (get_config_dir() / "config.json").write_text('{"output": {"format": "yaml"}}')
        with pytest.raises(ConfigError):
            load_global_config()


class TestProfiles:
    def test_save_list_load(self, isolated_config: Path) -> None:
        profile = Profile(
            name="acme",
            base_url="https://api.eu.itglue.com",
            auth=AuthConfig(type="api_key", source="env:GLUE_KEY"),
            request=RequestConfig(page_size=250, rate_limit_attempts=3),
        )
        save_profile(profile)

        assert list_profiles() == ["acme"]
        loaded = load_profile("acme")
        assert loaded.base_url == "https://api.eu.itglue.com"
        assert loaded.auth is not None and loaded.auth.source == "env:GLUE_KEY"
        assert loaded.request.page_size == 250
        assert loaded.request.rate_limit_backoff == 60

    def test_saved_profile_has_no_secrets_or_nulls(self, isolated_config: Path) -> None:
        save_profile(
            Profile(name="acme", base_url="https://x", auth=AuthConfig(type="api_key", source="env:K"))
        )
        data = json.loads((get_profiles_dir() / "acme.json").read_text())
        assert data["auth"] == {"type": "api_key", "source": "env:K"}

    def test_load_missing(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_profile("ghost")

    def test_load_invalid(self, isolated_config: Path) -> None:
        (get_profiles_dir() / "bad.json").write_text('{"name": "bad"}')
        with pytest.raises(ConfigError, match="Invalid profile 'bad'"):
            load_profile("bad")

    def test_delete(self, isolated_config: Path) -> None:
        save_profile(_make_profile())
        assert profile_exists("acme")
        delete_profile("acme")
        assert not profile_exists("acme")
        with pytest.raises(ConfigError):
            delete_profile("acme")

    def test_list_ignores_non_json(self, isolated_config: Path) -> None:
        save_profile(_make_profile("b"))
        save_profile(_make_profile("a"))
        (get_profiles_dir() / "notes.txt").write_text("hi")
        assert list_profiles() == ["a", "b"]


# ---------------------------------------------------------------------------
# Precedence resolution
# ---------------------------------------------------------------------------


class TestResolveConfig:
    @pytest.fixture(autouse=True)
    def _profiles(self, isolated_config: Path) -> None:
        save_profile(_make_profile("one", "https://one.example.com"))
        save_profile(_make_profile("two", "https://two.example.com"))

    def test_no_profile_selected_with_several(self) -> None:
        _, profile = resolve_config()
        assert profile is None

    def test_global_default(self) -> None:
        save_global_config(GlobalConfig(default_profile="two"))
        assert resolve_config()[1].name == "two"

    def test_env_overrides_global(self, monkeypatch: pytest.MonkeyPatch) -> None:
        save_global_config(GlobalConfig(default_profile="two"))
        monkeypatch.setenv("GLUEAPI_PROFILE", "one")
        assert resolve_config()[1].name == "one"

    def test_cli_overrides_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GLUEAPI_PROFILE", "one")
        assert resolve_config(cli_profile="two")[1].name == "two"

    def test_base_url_precedence(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GLUEAPI_BASE_URL", "https://env.example.com")
        assert resolve_config("one")[1].base_url == "https://env.example.com"
        assert (
            resolve_config("one", cli_base_url="https://cli.example.com")[1].base_url
            == "https://cli.example.com"
        )

    def test_auto_select_single_profile(self) -> None:
        delete_profile("two")
        assert resolve_config()[1].name == "one"

    def test_auto_select_disabled(self) -> None:
        delete_profile("two")
        save_global_config(GlobalConfig(auto_select_single_profile=False))
        assert resolve_config()[1] is None

    def test_unknown_profile(self) -> None:
        with pytest.raises(ConfigError):
            resolve_config(cli_profile="ghost")


# ---------------------------------------------------------------------------
# Credential sources
# ---------------------------------------------------------------------------


class TestResolveCredential:
    def test_env_source(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GLUE_KEY", "ITG.123")
        assert resolve_credential("env:GLUE_KEY") == "ITG.123"

    def test_env_source_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GLUE_KEY", raising=False)
        with pytest.raises(ConfigError, match="GLUE_KEY"):
            resolve_credential("env:GLUE_KEY")

    def test_file_source_stripped(self, tmp_path: Path) -> None:
        secret = tmp_path / "key"
        secret.write_text("  ITG.file\n")
        assert resolve_credential(f"file:{secret}") == "ITG.file"

    def test_file_source_missing(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            resolve_credential(f"file:{tmp_path / 'nope'}")

    def test_prompt_with_tty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("glueapi.config.sys.stdin.isatty", lambda: True)
        with patch("glueapi.config.getpass.getpass", return_value="typed") as mock_getpass:
            assert resolve_credential("prompt", "password") == "typed"
        mock_getpass.assert_called_once_with("Enter password: ")

    def test_prompt_without_tty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("glueapi.config.sys.stdin.isatty", lambda: False)
        with pytest.raises(ConfigError, match="not a TTY"):
            resolve_credential("prompt")

    def test_unknown_source(self) -> None:
        with pytest.raises(ConfigError, match="Unknown credential source"):
            resolve_credential("vault:secret/glue")

    def test_source_without_reference(self) -> None:
        with pytest.raises(ConfigError, match="Unknown credential source"):
            resolve_credential("env:")

    def test_failure_is_logged(self, monkeypatch: pytest.MonkeyPatch, quiet_output, capsys) -> None:
        monkeypatch.delenv("GLUE_KEY", raising=False)
        with pytest.raises(ConfigError):
            resolve_credential("env:GLUE_KEY")
        assert "Error: Environment variable 'GLUE_KEY' is not set" in capsys.readouterr().err
