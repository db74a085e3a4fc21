from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from forkrel.core.result import Err, Ok, Result
from forkrel.platform.files import atomic_write_text
from forkrel.release.errors import ReleaseError


@dataclass(frozen=True, slots=True)
class WrittenNotes:
    path: Path
    markdown: str


def release_asset_url(*, repo: str, tag: str, archive: str) -> str:
    return f"https://github.com/{repo}/releases/download/{tag}/{archive}"


def compare_url(*, repo: str, previous_tag: str, tag: str) -> str:
    return f"https://github.com/{repo}/compare/{previous_tag}..{tag}"


def render_release_notes(
    *,
    repo: str,
    tag: str,
    archive: str,
    previous_tag: str | None,
) -> str:
    asset = release_asset_url(repo=repo, tag=tag, archive=archive)

    lines: list[str] = []
    if previous_tag is not None:
        lines.append("## Changelog")
        lines.append("")
        lines.append(compare_url(repo=repo, previous_tag=previous_tag, tag=tag))
        lines.append("")

    lines.append("## Installation")
    lines.append("")
    lines.append(f"- `npm install {asset}`")
    lines.append(f"- `pnpm add {asset}`")
    lines.append(f"- `yarn add {asset}`")

    return "\n".join(lines) + "\n"


def write_release_notes(
    *,
    path: Path,
    repo: str,
    tag: str,
    archive: str,
    previous_tag: str | None,
) -> Result[WrittenNotes, ReleaseError]:
    markdown = render_release_notes(repo=repo, tag=tag, archive=archive, previous_tag=previous_tag)
    try:
        atomic_write_text(path, markdown)
    except OSError as e:
        return Err(
            ReleaseError(
                kind="notes_failed",
                message=f"failed to write release notes: {e}",
                hint=str(path),
            )
        )
    return Ok(WrittenNotes(path=path, markdown=markdown))
