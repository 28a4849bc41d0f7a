"""Work-list loading.

Builds the list of PatchTargets for a run, either from a single
package/version pair or from a batch file of "name, version" lines:

    # security patches
    fastapi, 0.120.4
    starlette, 0.49.1

Blank lines and lines starting with "#" are ignored. Malformed lines are
dropped with a warning; a file with no usable lines is a configuration error.

resolve_work_list() also picks the qualification mode, since that depends on
which inputs were given.
"""

from __future__ import annotations

from pathlib import Path

from packaging.utils import canonicalize_name
from pydantic import ValidationError

from .errors import ConfigurationError, NoValidEntries
from .models import PatchTarget, PolicyMode
from .policy import PatchPolicy
from .shell import warn


def _first_error(exc: ValidationError) -> str:
    return exc.errors()[0]["msg"].removeprefix("Value error, ")


def load_single(name: str, version: str) -> list[PatchTarget]:
    """Build a one-element work list from CLI arguments.

    Raises:
        ConfigurationError: If the name is too short or the version empty.
    """
    try:
        return [PatchTarget(name=name, version=version)]
    except ValidationError as exc:
        raise ConfigurationError(_first_error(exc)) from exc


def load_batch(contents: str) -> list[PatchTarget]:
    """Parse a batch package list.

    Only the first comma separates name from version. Later duplicates of
    a package (compared by PEP 503 normalized name) are dropped so a commit
    never mentions the same package twice.

    Raises:
        NoValidEntries: If no line yields a valid PatchTarget.
    """
    targets: list[PatchTarget] = []
    seen: set[str] = set()

    for lineno, line in enumerate(contents.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        name, sep, version = stripped.partition(",")
        if not sep:
            warn(f"line {lineno}: expected 'name, version', got {stripped!r}")
            continue
        if "," in version:
            warn(f"line {lineno}: version must not contain a comma: {stripped!r}")
            continue

        try:
            target = PatchTarget(name=name, version=version)
        except ValidationError as exc:
            warn(f"line {lineno}: {_first_error(exc)}")
            continue

        key = canonicalize_name(target.name)
        if key in seen:
            warn(f"line {lineno}: {target.name} already listed, ignoring")
            continue
        seen.add(key)
        targets.append(target)

    if not targets:
        raise NoValidEntries("No valid package entries found in package list")
    return targets


def load_batch_file(path: Path) -> list[PatchTarget]:
    """Read and parse a batch package list from disk.

    Raises:
        ConfigurationError: If the file does not exist or cannot be read.
        NoValidEntries: If it contains no usable entries.
    """
    if not path.is_file():
        raise ConfigurationError(f"Package list file not found: {path}")
    try:
        contents = path.read_text()
    except OSError as exc:
        raise ConfigurationError(f"Cannot read package list {path}: {exc}") from exc
    return load_batch(contents)


def resolve_work_list(
    package: str | None = None,
    target: str | None = None,
    minimum: str | None = None,
    package_file: Path | None = None,
    require_major_match: bool = False,
) -> tuple[list[PatchTarget], PatchPolicy]:
    """Choose the run mode from CLI inputs and load the work list.

    - package + target: target-version mode, minimum is an optional floor
    - package + minimum: minimum-as-target mode
    - package_file: target-version mode for every listed package, minimum
      (if given) is the floor for all of them

    Raises:
        ConfigurationError: For conflicting or incomplete inputs.
    """
    if package and package_file:
        raise ConfigurationError(
            "Specify either a single package (-p) or a package list (-f), not both."
        )

    if package_file:
        if target:
            raise ConfigurationError(
                "A target version (-r) cannot be combined with a package list (-f)."
            )
        policy = PatchPolicy(
            mode=PolicyMode.TARGET_VERSION,
            minimum=minimum,
            require_major_match=require_major_match,
        )
        return load_batch_file(package_file), policy

    if not package:
        if target:
            raise ConfigurationError("A target version (-r) requires a package (-p).")
        raise ConfigurationError("Specify a package (-p) or a package list (-f).")

    if target:
        policy = PatchPolicy(
            mode=PolicyMode.TARGET_VERSION,
            minimum=minimum,
            require_major_match=require_major_match,
        )
        return load_single(package, target), policy

    if minimum:
        policy = PatchPolicy(
            mode=PolicyMode.MINIMUM_AS_TARGET,
            require_major_match=require_major_match,
        )
        return load_single(package, minimum), policy

    raise ConfigurationError(
        f"Package {package!r} needs a target version (-r) or a minimum version (-v)."
    )
