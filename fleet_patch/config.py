"""Run configuration.

Settings can come from a TOML file with a [fleet-patch] table, read with
tomlkit so the file stays hand-editable:

    [fleet-patch]
    manifest = "requirements/base.txt"
    timeout = 120
    limit = 500
    direct-branch = "dev"
    propose-branch = "main"
    auto-approve = false

CLI flags override file values. The merged result is frozen into a RunConfig
that every repository task receives unchanged.
"""

from __future__ import annotations

from pathlib import Path

import tomlkit
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from tomlkit.exceptions import ParseError

from .errors import ConfigurationError
from .models import Strategy
from .policy import PatchPolicy

DEFAULT_CONFIG_FILE = "fleet-patch.toml"
TABLE = "fleet-patch"


class Settings(BaseModel):
    """Defaults that may be supplied by a settings file."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    manifest: str = "requirements.txt"
    timeout: float = Field(default=300, gt=0)
    limit: int = Field(default=1000, gt=0)
    direct_branch: str = Field(default="dev", alias="direct-branch")
    propose_branch: str = Field(default="main", alias="propose-branch")
    auto_approve: bool = Field(default=False, alias="auto-approve")


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from a TOML file.

    When `path` is None, fleet-patch.toml in the current directory is used
    if it exists; otherwise defaults are returned.

    Raises:
        ConfigurationError: If an explicit path is missing, or the file is
            not valid TOML or has unknown/invalid keys.
    """
    if path is None:
        path = Path.cwd() / DEFAULT_CONFIG_FILE
        if not path.exists():
            return Settings()
    elif not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        doc = tomlkit.parse(path.read_text())
    except ParseError as exc:
        raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc

    table = doc.get(TABLE, {})
    try:
        # unwrap() turns tomlkit items into plain Python values
        return Settings.model_validate(table.unwrap() if table else {})
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings in {path}: {exc}") from exc


class RunConfig(BaseModel):
    """Immutable configuration shared by every repository in a run.

    Attributes:
        org: GitHub organization whose repositories are processed.
        strategy: DIRECT or PROPOSE.
        policy: Qualification policy.
        auto_approve: Skip the interactive confirmation.
        manifest: Manifest path relative to the repository root.
        direct_branch: Branch pushed to under DIRECT.
        propose_branch: Pull-request base branch under PROPOSE.
        timeout: Seconds allowed for each network operation.
        limit: Maximum number of repositories listed from the org.
    """

    model_config = ConfigDict(frozen=True)

    org: str
    strategy: Strategy = Strategy.DIRECT
    policy: PatchPolicy = Field(default_factory=PatchPolicy)
    auto_approve: bool = False
    manifest: str = "requirements.txt"
    direct_branch: str = "dev"
    propose_branch: str = "main"
    timeout: float = 300
    limit: int = 1000

    @property
    def working_branch(self) -> str:
        """Branch that must exist for a repository to be processed."""
        if self.strategy is Strategy.PROPOSE:
            return self.propose_branch
        return self.direct_branch
