from __future__ import annotations

import typer

from forkrel.cli.commands._helpers import exit_release_error
from forkrel.cli.context import build_context
from forkrel.core.result import Err
from forkrel.release.service import run_release


def release(
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Resolve and print the plan; change nothing"
    ),
    skip_build: bool = typer.Option(
        False, "--skip-build", help="Skip cleaning and build commands (pack still runs)"
    ),
) -> None:
    """Build, pack, tag and publish the next fork prerelease."""
    ctx = build_context()
    result = run_release(
        project_root=ctx.project.root,
        config=ctx.config,
        console=ctx.console,
        dry_run=dry_run,
        skip_build=skip_build,
    )
    if isinstance(result, Err):
        exit_release_error(result.error, ctx.console)
