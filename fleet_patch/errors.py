"""Exceptions raised by fleet-patch.

Configuration errors are fatal and raised before any repository is touched.
Everything else is scoped to one package or one repository and is caught
by the workflow or the pipeline.
"""

from __future__ import annotations


class FleetPatchError(Exception):
    """Base class for all fleet-patch errors."""


class ConfigurationError(FleetPatchError):
    """Invalid run configuration (conflicting modes, bad package, missing file)."""


class NoValidEntries(ConfigurationError):
    """A batch package list produced no usable entries."""


class RewriteVerificationFailed(FleetPatchError):
    """A manifest rewrite did not leave the package pinned to the new version."""

    def __init__(self, package: str, expected: str, found: str | None) -> None:
        self.package = package
        self.expected = expected
        self.found = found
        super().__init__(
            f"{package}: expected {package}=={expected} after rewrite, "
            f"found {found or 'no exact pin'}"
        )


class HostError(FleetPatchError):
    """A git or gh operation against a repository failed or timed out."""


class PublishError(HostError):
    """Pushing a branch or opening a pull request failed."""
