from __future__ import annotations

from pathlib import Path

from forkrel.core.result import Ok
from forkrel.release.notes import render_release_notes, write_release_notes

_REPO = "bscotch/ts-json-schema-generator"
_ARCHIVE = "ts-json-schema-generator-2.0.0-bscotch.2.tgz"
_ASSET = f"https://github.com/{_REPO}/releases/download/v2.0.0-bscotch.2/{_ARCHIVE}"


def test_render_includes_compare_link_and_install_lines() -> None:
    md = render_release_notes(
        repo=_REPO,
        tag="v2.0.0-bscotch.2",
        archive=_ARCHIVE,
        previous_tag="v2.0.0-bscotch.1",
    )
    assert md.startswith("## Changelog\n\n")
    assert f"https://github.com/{_REPO}/compare/v2.0.0-bscotch.1..v2.0.0-bscotch.2" in md
    assert f"- `npm install {_ASSET}`" in md
    assert f"- `pnpm add {_ASSET}`" in md
    assert f"- `yarn add {_ASSET}`" in md


def test_render_without_previous_tag_skips_changelog() -> None:
    md = render_release_notes(repo=_REPO, tag="v2.0.0-bscotch.2", archive=_ARCHIVE, previous_tag=None)
    assert "## Changelog" not in md
    assert md.startswith("## Installation")


def test_write_release_notes(tmp_path: Path) -> None:
    path = tmp_path / "NOTES.md"
    written = write_release_notes(
        path=path,
        repo=_REPO,
        tag="v2.0.0-bscotch.2",
        archive=_ARCHIVE,
        previous_tag=None,
    )
    assert isinstance(written, Ok)
    assert path.read_text(encoding="utf-8") == written.value.markdown
