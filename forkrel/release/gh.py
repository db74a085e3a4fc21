from __future__ import annotations

import re
import shutil
from pathlib import Path

from forkrel.core.result import Err, Ok, Result
from forkrel.platform.process import run as run_process
from forkrel.release.errors import ReleaseError
from forkrel.release.timeouts import GH_TIMEOUT_SECONDS, GH_UPLOAD_TIMEOUT_SECONDS

_REMOTE_RE = re.compile(
    r"^(?:https://(?:[^@/]+@)?github\.com/|git@github\.com:|ssh://git@github\.com/)"
    r"(?P<slug>[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+?)(?:\.git)?/?$"
)


def ensure_gh_available() -> Result[None, ReleaseError]:
    if shutil.which("gh") is None:
        return Err(
            ReleaseError(
                kind="gh_missing",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


def ensure_gh_auth(*, project_root: Path) -> Result[None, ReleaseError]:
    result = run_process(["gh", "auth", "status"], cwd=project_root, timeout=GH_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(
            ReleaseError(
                kind="gh_auth_required",
                message="gh auth required",
                hint="Run: gh auth login",
            )
        )
    return Ok(None)


def slug_from_remote(url: str) -> str | None:
    """Extract ``owner/name`` from a GitHub https or ssh remote URL."""
    m = _REMOTE_RE.match(url.strip())
    if m is None:
        return None
    return m.group("slug")


def release_create_cmd(
    *,
    repo: str,
    tag: str,
    archive: Path,
    notes_file: Path,
    target: str,
    prerelease: bool,
) -> list[str]:
    cmd = [
        "gh",
        "release",
        "create",
        tag,
        f"{archive}#package",
        "-t",
        f"Release {tag}",
        "--target",
        target,
        "--repo",
        repo,
        "--notes-file",
        str(notes_file),
    ]
    if prerelease:
        cmd.append("--prerelease")
    return cmd


def create_release(
    *,
    project_root: Path,
    repo: str,
    tag: str,
    archive: Path,
    notes_file: Path,
    target: str,
    prerelease: bool,
) -> Result[str, ReleaseError]:
    """Create the GitHub release and upload the archive. Returns the release URL."""
    cmd = release_create_cmd(
        repo=repo,
        tag=tag,
        archive=archive,
        notes_file=notes_file,
        target=target,
        prerelease=prerelease,
    )
    result = run_process(cmd, cwd=project_root, timeout=GH_UPLOAD_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        e = result.error
        return Err(
            ReleaseError(
                kind="publish_failed",
                message=f"gh release create failed for {tag}",
                hint=e.stderr.strip() or e.stdout.strip() or None,
            )
        )
    return Ok(result.value.strip())
