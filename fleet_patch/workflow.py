"""Per-repository patch workflow.

Each repository moves through a fixed sequence of gates, and any failed gate
ends processing of that repository only:

    branch exists → checkout → manifest present → qualify/rewrite each
    package → non-empty change set → approval → commit → publish

Publishing either pushes the working branch directly (DIRECT) or pushes a
feature branch and opens a pull request against the working branch
(PROPOSE). All edits for one repository land in a single commit.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Protocol

from .config import RunConfig
from .errors import HostError, PublishError, RewriteVerificationFailed
from .manifest import find_entry, rewrite
from .models import (
    PatchTarget,
    PublishPlan,
    QualificationResult,
    RepoResult,
    RepositoryChangeSet,
    RepoStatus,
    Strategy,
)
from .policy import PatchPolicy
from .shell import step, warn

Confirm = Callable[[str], bool]


class Tree(Protocol):
    def exists(self, name: str) -> bool: ...
    def read_file(self, name: str) -> str: ...
    def write_file(self, name: str, contents: str) -> None: ...


class RepositoryHost(Protocol):
    """Operations the workflow needs from the hosting service."""

    def list_repositories(self, org: str, limit: int = 1000) -> list[str]: ...
    def branch_exists(self, org: str, repo: str, branch: str) -> bool: ...
    def checkout(self, org: str, repo: str, branch: str) -> Tree: ...
    def diff(self, tree: Tree) -> str: ...
    def create_branch(self, tree: Tree, name: str) -> None: ...
    def commit_and_push(self, tree: Tree, branch: str, message: str) -> None: ...
    def create_pull_request(
        self, org: str, repo: str, base: str, head: str, title: str, body: str
    ) -> str: ...


def approve_all(diff: str) -> bool:
    """Confirmation adapter used with auto-approve."""
    print("  Auto-approve mode enabled. Proceeding with changes...")
    return True


def commit_message(changes: RepositoryChangeSet) -> str:
    """Build the commit message (also used as the pull-request title)."""
    if len(changes.changes) == 1:
        change = changes.changes[0]
        return f"Update {change.name} to {change.to_version}"
    return f"Update multiple packages: {', '.join(changes.names)}"


def feature_branch_name(
    changes: RepositoryChangeSet, now: datetime | None = None
) -> str:
    """Name the branch a PROPOSE change is pushed to.

    Examples:
        one package → "update-requests-to-2.28.0"
        several → "update-multiple-packages-20261018153000"
    """
    if len(changes.changes) == 1:
        change = changes.changes[0]
        return f"update-{change.name}-to-{change.to_version}"
    now = now or datetime.now(timezone.utc)
    return f"update-multiple-packages-{now.strftime('%Y%m%d%H%M%S')}"


def pull_request_body(changes: RepositoryChangeSet, policy: PatchPolicy) -> str:
    lines = ["This PR updates the following packages:", ""]
    lines.extend(
        f"- {c.name}: {c.from_version}->{c.to_version}" for c in changes.changes
    )
    lines.extend(["", f"Qualification: {policy.describe()}."])
    return "\n".join(lines)


def plan_publish(
    config: RunConfig, changes: RepositoryChangeSet, now: datetime | None = None
) -> PublishPlan:
    if config.strategy is Strategy.PROPOSE:
        return PublishPlan(
            strategy=Strategy.PROPOSE,
            working_branch=config.propose_branch,
            feature_branch=feature_branch_name(changes, now),
        )
    return PublishPlan(strategy=Strategy.DIRECT, working_branch=config.direct_branch)


_VERDICT_MESSAGES = {
    QualificationResult.ALREADY_AT_TARGET: "is already at target version {target}. Skipping.",
    QualificationResult.ALREADY_SATISFIED: "version {current} is already above {target}. Skipping.",
    QualificationResult.BELOW_MINIMUM: "version {current} is below minimum version {minimum}. Not qualified for update.",
    QualificationResult.MAJOR_MISMATCH: "version {current} has a different major version than {gate}. Not qualified for update.",
}


def apply_targets(
    text: str,
    targets: list[PatchTarget],
    policy: PatchPolicy,
    manifest: str = "requirements.txt",
) -> tuple[str, RepositoryChangeSet]:
    """Qualify and rewrite every work item against one manifest.

    Packages are handled in work-list order. Missing packages, failed
    qualification and failed verification each skip only that package.

    Returns:
        The rewritten manifest text and the verified changes.
    """
    changes = RepositoryChangeSet()

    for target in targets:
        entry = find_entry(text, target.name)
        if entry is None:
            print(f"  Package {target.name} not found in {manifest}. Skipping.")
            continue

        current = entry.current_version
        print(f"  Current version of {target.name}: {current}")

        verdict = policy.qualify(current, target)
        if verdict is not QualificationResult.QUALIFIED:
            message = _VERDICT_MESSAGES[verdict].format(
                current=current,
                target=target.version,
                minimum=policy.minimum,
                gate=policy.minimum or target.version,
            )
            print(f"  Package {target.name} {message}")
            continue

        try:
            text = rewrite(text, target.name, target.version)
        except RewriteVerificationFailed as exc:
            warn(f"rewrite not applied: {exc}")
            continue

        print(f"  {target.name}: {current} → {target.version}")
        changes.add(target.name, current, target.version)

    return text, changes


def process_repository(
    repo: str,
    config: RunConfig,
    targets: list[PatchTarget],
    host: RepositoryHost,
    confirm: Confirm,
    now: datetime | None = None,
) -> RepoResult:
    """Run one repository through the patch workflow.

    Skips and publish failures are returned as a RepoResult. HostError from
    the branch lookup or the diff propagates and is recorded by the pipeline.
    """
    org = config.org
    step(f"Processing repository: {org}/{repo}")
    branch = config.working_branch

    if not host.branch_exists(org, repo, branch):
        print(f"  Branch {branch} not found in {org}/{repo}. Skipping repository.")
        return RepoResult(repo=repo, status=RepoStatus.SKIPPED_BRANCH)
    print(f"  Using {config.strategy.value} strategy. Working with branch: {branch}")

    try:
        tree = host.checkout(org, repo, branch)
    except HostError as exc:
        print(f"  {exc}. Skipping.")
        return RepoResult(repo=repo, status=RepoStatus.SKIPPED_CHECKOUT, message=str(exc))

    if not tree.exists(config.manifest):
        print(f"  {config.manifest} not found in {branch} branch of {org}/{repo}. Skipping.")
        return RepoResult(repo=repo, status=RepoStatus.SKIPPED_MANIFEST)

    try:
        original = tree.read_file(config.manifest)
    except (OSError, UnicodeError) as exc:
        print(f"  Could not read {config.manifest} in {org}/{repo}: {exc}. Skipping.")
        return RepoResult(repo=repo, status=RepoStatus.SKIPPED_MANIFEST, message=str(exc))

    text, changes = apply_targets(original, targets, config.policy, config.manifest)
    if changes.is_empty:
        print("  No packages qualified for update. Repository left untouched.")
        return RepoResult(repo=repo, status=RepoStatus.NO_CHANGES)

    tree.write_file(config.manifest, text)
    plan = plan_publish(config, changes, now)
    message = commit_message(changes)

    diff = host.diff(tree)
    print("  Changes to be made:")
    print(diff)
    if not confirm(diff):
        print("  Changes not approved. Skipping.")
        return RepoResult(repo=repo, status=RepoStatus.REJECTED, changes=changes.changes)

    pr_url = None
    try:
        if plan.strategy is Strategy.PROPOSE:
            host.create_branch(tree, plan.feature_branch)
            host.commit_and_push(tree, plan.feature_branch, message)
            print(f"  Changes pushed to branch {plan.feature_branch} in {org}/{repo}.")
            pr_url = host.create_pull_request(
                org,
                repo,
                base=plan.working_branch,
                head=plan.feature_branch,
                title=message,
                body=pull_request_body(changes, config.policy),
            )
            print(f"  Pull request created: {pr_url}")
        else:
            host.commit_and_push(tree, plan.working_branch, message)
            print(f"  Changes pushed directly to {plan.working_branch} branch in {org}/{repo}.")
    except PublishError as exc:
        print(f"  Failed to publish changes to {org}/{repo}: {exc}")
        return RepoResult(
            repo=repo,
            status=RepoStatus.PUBLISH_FAILED,
            changes=changes.changes,
            message=str(exc),
        )

    return RepoResult(
        repo=repo,
        status=RepoStatus.PUBLISHED,
        changes=changes.changes,
        pr_url=pr_url,
        message=message,
    )
