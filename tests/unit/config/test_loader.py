"""Unit tests for the TOML configuration loader."""

import tomllib
from collections.abc import Callable
from pathlib import Path

import pytest

from docaudit.config.loader import (
    deep_merge,
    get_config_dir,
    get_environment,
    load_config,
    load_toml,
)


class TestDeepMerge:
    """Tests for deep_merge."""

    def test_nested_tables_merged(self) -> None:
        base = {"audit": {"collection_name": "auditlog", "write_timeout": 1.0}}
        override = {"audit": {"write_timeout": 5.0}}
        assert deep_merge(base, override) == {
            "audit": {"collection_name": "auditlog", "write_timeout": 5.0}
        }

    def test_scalar_replaces_table(self) -> None:
        assert deep_merge({"audit": {"a": 1}}, {"audit": "off"}) == {"audit": "off"}

    def test_inputs_untouched(self) -> None:
        base = {"storage": {"mongodb": {"database": "test"}}}
        override = {"storage": {"mongodb": {"database": "prod"}}}
        deep_merge(base, override)
        assert base == {"storage": {"mongodb": {"database": "test"}}}
        assert override == {"storage": {"mongodb": {"database": "prod"}}}

    def test_empty_sides(self) -> None:
        assert deep_merge({}, {"a": 1}) == {"a": 1}
        assert deep_merge({"a": 1}, {}) == {"a": 1}


class TestLoadToml:
    """Tests for load_toml."""

    def test_parses_tables(self, tmp_path: Path) -> None:
        path = tmp_path / "audit.toml"
        path.write_text('[audit]\ncollection_name = "history"\n')
        assert load_toml(path) == {"audit": {"collection_name": "history"}}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_toml(tmp_path / "absent.toml")

    def test_invalid_syntax(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.toml"
        path.write_text("[audit\n")
        with pytest.raises(tomllib.TOMLDecodeError):
            load_toml(path)


class TestEnvironmentAndDirectory:
    """Tests for get_environment and get_config_dir."""

    def test_environment_from_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DOCAUDIT_ENV", "production")
        assert get_environment() == "production"

    def test_environment_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DOCAUDIT_ENV", raising=False)
        assert get_environment() == "development"

    def test_explicit_directory(
        self, test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DOCAUDIT_CONFIG_DIR", str(test_config_dir))
        assert get_config_dir() == test_config_dir

    def test_explicit_directory_must_exist(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DOCAUDIT_CONFIG_DIR", str(tmp_path / "missing"))
        with pytest.raises(FileNotFoundError):
            get_config_dir()

    def test_searches_parent_directories(
        self, test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        nested = test_config_dir.parent / "service" / "src"
        nested.mkdir(parents=True)
        monkeypatch.delenv("DOCAUDIT_CONFIG_DIR", raising=False)
        monkeypatch.chdir(nested)
        assert get_config_dir() == test_config_dir


class TestLoadConfig:
    """Tests for load_config."""

    @pytest.fixture(autouse=True)
    def _point_at_test_dir(
        self, test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DOCAUDIT_CONFIG_DIR", str(test_config_dir))

    def test_default_only(
        self,
        mock_toml_files: Callable[[dict[str, str]], None],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("DOCAUDIT_ENV", "nonexistent")
        mock_toml_files({"default.toml": '[audit]\ncollection_name = "auditlog"\n'})
        assert load_config() == {"audit": {"collection_name": "auditlog"}}

    def test_environment_overlay(
        self,
        mock_toml_files: Callable[[dict[str, str]], None],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("DOCAUDIT_ENV", "staging")
        mock_toml_files({
            "default.toml": '[audit]\ncollection_name = "auditlog"\n',
            "staging.toml": "[audit]\nwrite_timeout = 2.5\n",
        })
        assert load_config() == {
            "audit": {"collection_name": "auditlog", "write_timeout": 2.5}
        }

    def test_missing_default(self) -> None:
        with pytest.raises(FileNotFoundError, match="default.toml"):
            load_config()
