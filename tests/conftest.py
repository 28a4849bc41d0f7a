"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from fleet_patch.errors import HostError, PublishError


class FakeTree:
    """In-memory working tree."""

    def __init__(self, files: dict[str, str]) -> None:
        self.files = dict(files)

    def exists(self, name: str) -> bool:
        return name in self.files

    def read_file(self, name: str) -> str:
        return self.files[name]

    def write_file(self, name: str, contents: str) -> None:
        self.files[name] = contents


class FakeHost:
    """Repository host that records every call instead of running git/gh.

    Args:
        repos: Map of repo name → (branches, files on the working branch).
    """

    def __init__(
        self,
        repos: dict[str, tuple[set[str], dict[str, str]]],
        *,
        fail_checkout: set[str] | None = None,
        fail_push: set[str] | None = None,
        fail_pr: set[str] | None = None,
    ) -> None:
        self.repos = repos
        self.fail_checkout = fail_checkout or set()
        self.fail_push = fail_push or set()
        self.fail_pr = fail_pr or set()
        self.trees: dict[str, FakeTree] = {}
        self.calls: list[tuple] = []

    def _repo_of(self, tree: FakeTree) -> str:
        return next(name for name, t in self.trees.items() if t is tree)

    def list_repositories(self, org: str, limit: int = 1000) -> list[str]:
        return list(self.repos)[:limit]

    def branch_exists(self, org: str, repo: str, branch: str) -> bool:
        return branch in self.repos[repo][0]

    def checkout(self, org: str, repo: str, branch: str) -> FakeTree:
        if repo in self.fail_checkout:
            raise HostError(f"Cloning {org}/{repo} failed: not found")
        self.calls.append(("checkout", repo, branch))
        tree = FakeTree(self.repos[repo][1])
        self.trees[repo] = tree
        return tree

    def diff(self, tree: FakeTree) -> str:
        return "-old\n+new"

    def create_branch(self, tree: FakeTree, name: str) -> None:
        self.calls.append(("create_branch", self._repo_of(tree), name))

    def commit_and_push(self, tree: FakeTree, branch: str, message: str) -> None:
        repo = self._repo_of(tree)
        self.calls.append(("commit_and_push", repo, branch, message))
        if repo in self.fail_push:
            raise PublishError(f"Push to {branch} failed: rejected")

    def create_pull_request(
        self, org: str, repo: str, base: str, head: str, title: str, body: str
    ) -> str:
        self.calls.append(("create_pull_request", repo, base, head, title, body))
        if repo in self.fail_pr:
            raise PublishError("Creating pull request failed: forbidden")
        return f"https://github.com/{org}/{repo}/pull/1"

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]


@pytest.fixture
def manifest_text() -> str:
    """A requirements.txt with look-alike package names and comments."""
    return (
        "# runtime\n"
        "requests==2.20.0\n"
        "requests-toolbelt==0.9.1\n"
        "django==4.0.0\n"
        "fastapi==0.110.0\n"
        "starlette==0.36.3  # pinned by fastapi\n"
        "flask-restful==1.0\n"
    )


@pytest.fixture
def package_list(tmp_path: Path) -> Path:
    """A batch package list on disk."""
    path = tmp_path / "packages.txt"
    path.write_text("# security batch\nfastapi, 0.120.4\n\nstarlette, 0.49.1\n")
    return path
