"""Error payload for the release context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "invalid_version_format",
    "invalid_tag_format",
    "invalid_input",
    "remote_failed",
    "dirty_tree",
    "git_failed",
    "build_failed",
    "pack_failed",
    "manifest_failed",
    "notes_failed",
    "gh_missing",
    "gh_auth_required",
    "publish_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Canonical release error.

    Resolver, adapters and orchestration all fail with this type, so the CLI
    can render any of them and map ``kind`` to an exit code without knowing
    which layer produced it.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
