"""Shell, git and gh utilities.

Provides simple wrappers around subprocess calls for running git and the
GitHub CLI, plus output formatting helpers used for operator feedback.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

DEFAULT_TIMEOUT = 300


def git(
    *args: str,
    cwd: Path | str | None = None,
    check: bool = True,
    timeout: float | None = DEFAULT_TIMEOUT,
) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "status", "--short").
        cwd: Working tree to run in. Defaults to the current directory.
        check: If True (default), raise on non-zero exit. Set to False
               for commands that may legitimately fail (e.g., ls-remote).
        timeout: Seconds before the command is killed.

    Returns:
        Stripped stdout from the git command.

    Raises:
        subprocess.CalledProcessError: On non-zero exit when check is True.
        subprocess.TimeoutExpired: When the command runs past timeout.
    """
    result = subprocess.run(
        ["git", *args],
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        cwd=cwd,
        check=check,
        timeout=timeout,
        stdin=subprocess.DEVNULL,
    )
    return result.stdout.strip()


def gh(
    *args: str,
    cwd: Path | str | None = None,
    check: bool = True,
    timeout: float | None = DEFAULT_TIMEOUT,
) -> str:
    """Run a GitHub CLI command and return stdout.

    Same contract as git(), but invokes `gh`.
    """
    result = subprocess.run(
        ["gh", *args],
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        cwd=cwd,
        check=check,
        timeout=timeout,
        stdin=subprocess.DEVNULL,
    )
    return result.stdout.strip()


def succeeds(*args: str, timeout: float | None = DEFAULT_TIMEOUT) -> bool:
    """Return True if the command exits with status 0.

    Output is discarded. A missing executable counts as failure.
    """
    try:
        result = subprocess.run(
            args,
            capture_output=True,
            timeout=timeout,
            stdin=subprocess.DEVNULL,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return False
    return result.returncode == 0


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate repositories and run phases in terminal output.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def warn(msg: str) -> None:
    """Print a non-fatal warning, indented like other progress lines."""
    print(f"  Warning: {msg}")


def fatal(msg: str) -> None:
    """Print an error message and exit with code 1.

    Use only for unrecoverable errors found before any repository is touched.
    """
    print(f"ERROR: {msg}", file=sys.stderr)
    sys.exit(1)
