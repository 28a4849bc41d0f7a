"""Patch run: preflight → list repositories → patch each → summarize.

This module orchestrates a fleet-patch run:
1. Check that the GitHub CLI is installed and authenticated
2. Create a temporary workspace that holds every clone for the run
3. List the organization's repositories
4. Run each repository through the workflow, one at a time
5. Print a summary of what landed, what was skipped and what failed

Repositories are independent: a failure in one is recorded and the run moves
on. The workspace is removed however the run ends.
"""

from __future__ import annotations

import tempfile
from collections import Counter
from collections.abc import Callable
from pathlib import Path

from .config import RunConfig
from .errors import HostError
from .github import GitHubHost
from .models import PatchTarget, RepoResult, RepoStatus
from .shell import fatal, step, succeeds
from .workflow import Confirm, RepositoryHost, process_repository

HostFactory = Callable[[Path, float], RepositoryHost]


def preflight(timeout: float = 30) -> None:
    """Verify the GitHub CLI is usable before any repository is touched.

    Raises:
        SystemExit: If gh is missing or not authenticated.
    """
    if not succeeds("gh", "--version", timeout=timeout):
        fatal(
            "GitHub CLI (gh) is not installed. Please install it first.\n"
            "Visit https://cli.github.com/ for installation instructions."
        )
    if not succeeds("gh", "auth", "status", timeout=timeout):
        fatal("GitHub CLI is not authenticated. Please run 'gh auth login' first.")


def describe_run(config: RunConfig, targets: list[PatchTarget]) -> None:
    step(f"Patching repositories in {config.org}")
    print(f"  Strategy: {config.strategy.value} (branch {config.working_branch})")
    print(f"  Policy:   {config.policy.mode.value}, {config.policy.describe()}")
    print(f"  Manifest: {config.manifest}")
    for target in targets:
        print(f"  - {target.name} {target.version}")


def summarize(results: list[RepoResult]) -> str:
    """Render a short plain-text report of a run."""
    counts = Counter(r.status for r in results)
    lines = [f"Processed {len(results)} repositories:"]
    for status in RepoStatus:
        if counts[status]:
            lines.append(f"  {status.value}: {counts[status]}")
    for result in results:
        if result.status is RepoStatus.PUBLISHED:
            names = ", ".join(c.name for c in result.changes)
            suffix = f" ({result.pr_url})" if result.pr_url else ""
            lines.append(f"  ✓ {result.repo}: {names}{suffix}")
        elif result.status in (RepoStatus.PUBLISH_FAILED, RepoStatus.FAILED):
            lines.append(f"  ✗ {result.repo}: {result.message}")
    return "\n".join(lines)


def run_patch(
    config: RunConfig,
    targets: list[PatchTarget],
    confirm: Confirm,
    host_factory: HostFactory = GitHubHost,
) -> list[RepoResult]:
    """Execute a patch run across every repository in the organization.

    Args:
        config: Frozen run configuration.
        targets: Work list, shared read-only by every repository.
        confirm: Approval adapter called with each repository's diff.
        host_factory: Builds the repository host for a workspace directory.

    Returns:
        One RepoResult per repository, in listing order.

    Raises:
        HostError: If the organization's repositories cannot be listed.
    """
    describe_run(config, targets)
    results: list[RepoResult] = []

    with tempfile.TemporaryDirectory(prefix="fleet-patch-") as tmp:
        print(f"  Workspace: {tmp}")
        host = host_factory(Path(tmp), config.timeout)

        step(f"Fetching repositories from organization: {config.org}")
        repos = host.list_repositories(config.org, config.limit)
        if not repos:
            print(f"  No repositories found in organization {config.org}.")
            return results
        print(f"  Found {len(repos)} repositories.")

        for repo in repos:
            try:
                result = process_repository(repo, config, targets, host, confirm)
            except HostError as exc:
                print(f"  Error: {exc}")
                result = RepoResult(repo=repo, status=RepoStatus.FAILED, message=str(exc))
            print(f"  Finished processing {config.org}/{repo}.")
            results.append(result)

    step("Run complete")
    print(summarize(results))
    return results
