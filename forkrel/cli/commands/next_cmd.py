from __future__ import annotations

import json

import typer

from forkrel.cli.commands._helpers import exit_release_error
from forkrel.cli.context import build_context
from forkrel.core.config import DEFAULT_MARKER
from forkrel.core.errors import ErrorCode
from forkrel.core.result import Err
from forkrel.git.repository import Repository
from forkrel.output.console import ConsoleProtocol, RichConsole, Style
from forkrel.release.resolver import NextRelease, tag_pattern
from forkrel.release.service import resolve_release
from forkrel.release.tag_source import GitTagSource, StaticTagSource, TagSource


def next_release(
    base: str | None = typer.Option(
        None, "--base", help="Base version to use instead of the manifest's"
    ),
    marker: str | None = typer.Option(
        None, "--marker", help="Fork marker (default from forkrel.toml, else 'bscotch')"
    ),
    offline: bool = typer.Option(
        False, "--offline", help="Resolve from --base and --tag only, without a checkout"
    ),
    tags: list[str] = typer.Option([], "--tag", help="Known tag (repeatable, --offline only)"),
    as_json: bool = typer.Option(False, "--json", help="Print a JSON object"),
) -> None:
    """Print the next fork version and tag."""
    source: TagSource
    console: ConsoleProtocol
    if offline:
        if base is None:
            typer.echo("error: --offline requires --base", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))
        source = StaticTagSource(version=base, tags=frozenset(tags))
        console = RichConsole(stderr=as_json)
        marker = marker or DEFAULT_MARKER
    else:
        if tags:
            typer.echo("error: --tag is only valid with --offline", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))
        ctx = build_context()
        console = RichConsole(stderr=True) if as_json else ctx.console
        git_source = GitTagSource(
            repo=Repository(ctx.project.root),
            manifest_path=ctx.project.manifest_path(ctx.config.release.manifest),
        )
        marker = marker or ctx.config.release.marker
        source = git_source
        if base is not None:
            known = git_source.list_tags(tag_pattern(marker))
            if isinstance(known, Err):
                exit_release_error(known.error, console)
            source = StaticTagSource(version=base, tags=known.value)

    result = resolve_release(tags=source, marker=marker)
    if isinstance(result, Err):
        exit_release_error(result.error, console)

    nxt = result.value
    if as_json:
        typer.echo(json.dumps(_as_dict(nxt), sort_keys=True))
        return

    console.print(f"version: {nxt.version}")
    console.print(f"tag: {nxt.tag}", Style.BOLD)
    if nxt.anchor is None:
        console.print(f"new family for {nxt.base}", Style.DIM)
    else:
        console.print(f"after {nxt.anchor}", Style.DIM)


def _as_dict(nxt: NextRelease) -> dict[str, object]:
    return {
        "version": nxt.version,
        "tag": nxt.tag,
        "base": str(nxt.base),
        "marker": nxt.marker,
        "counter": nxt.counter,
        "anchor": nxt.anchor,
    }
