"""CLI entry point for fleet-patch."""

from __future__ import annotations

from pathlib import Path

import click

from fleet_patch.config import RunConfig, load_settings
from fleet_patch.errors import ConfigurationError, HostError
from fleet_patch.models import RepoStatus, Strategy
from fleet_patch.package_set import load_batch_file, resolve_work_list
from fleet_patch.pipeline import preflight, run_patch
from fleet_patch.workflow import approve_all


def interactive_confirm(diff: str) -> bool:
    """Ask the operator to approve a repository's diff."""
    return click.confirm("  Approve these changes?", default=False)


@click.group()
@click.version_option(package_name="fleet-patch")
def cli() -> None:
    """Patch a pinned dependency across every repository in a GitHub org."""


@cli.command()
@click.option("-o", "--org", required=True, help="GitHub organization name.")
@click.option("-p", "--package", default=None, help="Package name to check and update.")
@click.option("-r", "--target", default=None, help="Target version to update to.")
@click.option(
    "-v",
    "--minimum",
    default=None,
    help="Minimum version. With -r: only pins >= this qualify. "
    "Without -r: pins below it are raised to it.",
)
@click.option(
    "-f",
    "--file",
    "package_file",
    type=click.Path(path_type=Path),
    default=None,
    help="Package list with one 'name, version' per line ('#' for comments).",
)
@click.option("-y", "--yes", is_flag=True, help="Auto-approve all changes.")
@click.option(
    "--main",
    "use_main",
    is_flag=True,
    help="Open a PR against main instead of pushing directly to dev.",
)
@click.option(
    "--require-major-match",
    is_flag=True,
    help="Only update pins whose major version matches the gate version.",
)
@click.option("--manifest", default=None, help="Manifest path. [default: requirements.txt]")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Settings file. [default: ./fleet-patch.toml if present]",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds per network operation.",
)
@click.option(
    "--limit",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum repositories to list.",
)
def patch(
    org: str,
    package: str | None,
    target: str | None,
    minimum: str | None,
    package_file: Path | None,
    yes: bool,
    use_main: bool,
    require_major_match: bool,
    manifest: str | None,
    config_path: Path | None,
    timeout: float | None,
    limit: int | None,
) -> None:
    """Update a package pin in every repository of an organization."""
    try:
        settings = load_settings(config_path)
        targets, policy = resolve_work_list(
            package, target, minimum, package_file, require_major_match
        )
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc

    config = RunConfig(
        org=org,
        strategy=Strategy.PROPOSE if use_main else Strategy.DIRECT,
        policy=policy,
        auto_approve=yes or settings.auto_approve,
        manifest=manifest or settings.manifest,
        direct_branch=settings.direct_branch,
        propose_branch=settings.propose_branch,
        timeout=timeout if timeout is not None else settings.timeout,
        limit=limit if limit is not None else settings.limit,
    )

    preflight()
    confirm = approve_all if config.auto_approve else interactive_confirm
    try:
        results = run_patch(config, targets, confirm)
    except HostError as exc:
        raise click.ClickException(str(exc)) from exc

    landed = sum(1 for r in results if r.status is RepoStatus.PUBLISHED)
    click.echo(f"\nDone! {landed} of {len(results)} repositories updated.")


@cli.command()
@click.option(
    "-f",
    "--file",
    "package_file",
    type=click.Path(path_type=Path),
    required=True,
    help="Package list to check.",
)
def validate(package_file: Path) -> None:
    """Parse a package list and print the packages it would patch."""
    try:
        targets = load_batch_file(package_file)
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"✓ {len(targets)} packages in {package_file}")
    for target in targets:
        click.echo(f"  {target.name} {target.version}")
