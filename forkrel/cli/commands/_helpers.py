"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import NoReturn

import typer

from forkrel.core.errors import ErrorCode
from forkrel.output.console import ConsoleProtocol, Style
from forkrel.release.errors import ReleaseError


def release_error_code(kind: str) -> ErrorCode:
    if kind in {"gh_missing", "gh_auth_required", "dirty_tree"}:
        return ErrorCode.ENV_ERROR
    if kind in {"build_failed", "pack_failed"}:
        return ErrorCode.BUILD_ERROR
    if kind in {"remote_failed", "publish_failed"}:
        return ErrorCode.NETWORK_ERROR
    if kind in {"git_failed", "manifest_failed", "notes_failed"}:
        return ErrorCode.IO_ERROR
    return ErrorCode.USER_ERROR


def exit_release_error(error: ReleaseError, console: ConsoleProtocol) -> NoReturn:
    """Print ``error`` with its hint and exit with the code for its kind."""
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)
    raise typer.Exit(code=int(release_error_code(error.kind)))
