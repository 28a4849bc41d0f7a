"""GitHub and git adapters for the repository workflow.

GitHubHost implements every external operation the workflow needs (listing,
branch lookup, clone, diff, commit/push, branch creation, pull requests) on
top of the `git` and `gh` command line tools. Each call is bounded by the
run's timeout, and failures surface as HostError/PublishError so a single
repository can never abort the run.
"""

from __future__ import annotations

import subprocess
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .errors import HostError, PublishError
from .shell import gh, git


class WorkingTree:
    """A cloned repository checked out on one branch."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self, name: str) -> bool:
        return (self.path / name).is_file()

    def read_file(self, name: str) -> str:
        # newline="" keeps CRLF endings intact; surrogateescape round-trips
        # bytes that are not valid UTF-8
        with open(
            self.path / name, encoding="utf-8", errors="surrogateescape", newline=""
        ) as fh:
            return fh.read()

    def write_file(self, name: str, contents: str) -> None:
        with open(
            self.path / name, "w", encoding="utf-8", errors="surrogateescape", newline=""
        ) as fh:
            fh.write(contents)


def _stderr(exc: subprocess.CalledProcessError) -> str:
    return (exc.stderr or "").strip() or f"exit status {exc.returncode}"


@contextmanager
def _translate(action: str, error: type[HostError] = HostError) -> Iterator[None]:
    """Turn subprocess failures into the given HostError subclass."""
    try:
        yield
    except subprocess.CalledProcessError as exc:
        raise error(f"{action} failed: {_stderr(exc)}") from exc
    except subprocess.TimeoutExpired as exc:
        raise error(f"{action} timed out after {exc.timeout}s") from exc
    except FileNotFoundError as exc:
        raise error(f"{action} failed: {exc}") from exc


class GitHubHost:
    """Repository operations backed by `gh` and `git`.

    Args:
        workspace: Directory that receives one clone per repository. The
                   caller owns its lifetime.
        timeout: Seconds allowed for each network operation.
    """

    def __init__(self, workspace: Path, timeout: float = 300) -> None:
        self.workspace = workspace
        self.timeout = timeout

    def list_repositories(self, org: str, limit: int = 1000) -> list[str]:
        with _translate(f"Listing repositories in {org}"):
            output = gh(
                "repo", "list", org,
                "--limit", str(limit),
                "--json", "name",
                "-q", ".[].name",
                timeout=self.timeout,
            )
        return [line for line in output.splitlines() if line.strip()]

    def branch_exists(self, org: str, repo: str, branch: str) -> bool:
        """Check the remote for a branch without cloning.

        A 404 from the API (non-zero exit) means the branch is absent.
        """
        try:
            gh(
                "api", f"repos/{org}/{repo}/branches/{branch}", "--silent",
                timeout=self.timeout,
            )
        except subprocess.CalledProcessError:
            return False
        except subprocess.TimeoutExpired as exc:
            raise HostError(
                f"Branch lookup for {org}/{repo} timed out after {exc.timeout}s"
            ) from exc
        return True

    def checkout(self, org: str, repo: str, branch: str) -> WorkingTree:
        dest = self.workspace / repo
        with _translate(f"Cloning {org}/{repo}"):
            gh(
                "repo", "clone", f"{org}/{repo}", str(dest),
                "--", "--branch", branch,
                timeout=self.timeout,
            )
        return WorkingTree(dest)

    def diff(self, tree: WorkingTree) -> str:
        with _translate("git diff"):
            return git("diff", cwd=tree.path, timeout=self.timeout)

    def create_branch(self, tree: WorkingTree, name: str) -> None:
        with _translate(f"Creating branch {name}", PublishError):
            git("checkout", "-b", name, cwd=tree.path, timeout=self.timeout)

    def commit_and_push(self, tree: WorkingTree, branch: str, message: str) -> None:
        """Commit all tracked modifications and push them to `branch`."""
        with _translate("Commit", PublishError):
            git("add", "--update", cwd=tree.path, timeout=self.timeout)
            git("commit", "-m", message, cwd=tree.path, timeout=self.timeout)
        with _translate(f"Push to {branch}", PublishError):
            git("push", "-u", "origin", branch, cwd=tree.path, timeout=self.timeout)

    def create_pull_request(
        self,
        org: str,
        repo: str,
        base: str,
        head: str,
        title: str,
        body: str,
    ) -> str:
        """Open a pull request and return its URL."""
        with _translate("Creating pull request", PublishError):
            return gh(
                "pr", "create",
                "--repo", f"{org}/{repo}",
                "--base", base,
                "--head", head,
                "--title", title,
                "--body", body,
                timeout=self.timeout,
            )
