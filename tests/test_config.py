"""Tests for fleet_patch.config."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from fleet_patch.config import RunConfig, Settings, load_settings
from fleet_patch.errors import ConfigurationError
from fleet_patch.models import Strategy


class TestLoadSettings:
    def test_defaults_without_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        assert load_settings() == Settings()

    def test_reads_default_file_in_cwd(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "fleet-patch.toml").write_text(
            '[fleet-patch]\nmanifest = "requirements/base.txt"\ntimeout = 60\n'
        )
        monkeypatch.chdir(tmp_path)
        settings = load_settings()
        assert settings.manifest == "requirements/base.txt"
        assert settings.timeout == 60

    def test_reads_hyphenated_keys(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.toml"
        path.write_text(
            "# org defaults\n"
            "[fleet-patch]\n"
            'direct-branch = "develop"\n'
            'propose-branch = "trunk"\n'
            "auto-approve = true\n"
            "limit = 50\n"
        )
        settings = load_settings(path)
        assert settings.direct_branch == "develop"
        assert settings.propose_branch == "trunk"
        assert settings.auto_approve is True
        assert settings.limit == 50

    def test_missing_table_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "other.toml"
        path.write_text('[tool.other]\nkey = "value"\n')
        assert load_settings(path) == Settings()

    def test_explicit_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            load_settings(tmp_path / "nope.toml")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.toml"
        path.write_text("[fleet-patch\nmanifest = \n")
        with pytest.raises(ConfigurationError, match="Invalid TOML"):
            load_settings(path)

    def test_unknown_key(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.toml"
        path.write_text('[fleet-patch]\nbranch = "dev"\n')
        with pytest.raises(ConfigurationError, match="Invalid settings"):
            load_settings(path)


class TestRunConfig:
    def test_working_branch_follows_strategy(self) -> None:
        assert RunConfig(org="acme").working_branch == "dev"
        assert RunConfig(org="acme", strategy=Strategy.PROPOSE).working_branch == "main"

    def test_custom_branches(self) -> None:
        config = RunConfig(org="acme", strategy=Strategy.PROPOSE, propose_branch="trunk")
        assert config.working_branch == "trunk"

    def test_is_frozen(self) -> None:
        config = RunConfig(org="acme")
        with pytest.raises(ValidationError):
            config.auto_approve = True  # type: ignore[misc]
