"""Where the resolver's inputs come from.

``TagSource`` is read-only and snapshot-per-call: the resolver calls each
method once per release attempt and never expects the answers to change
underneath it.
"""

from __future__ import annotations

import fnmatch
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from forkrel.core.result import Err, Ok, Result
from forkrel.git.repository import Repository
from forkrel.release.errors import ReleaseError
from forkrel.release.manifest import read_manifest


class TagSource(Protocol):
    def list_tags(self, pattern: str) -> Result[frozenset[str], ReleaseError]:
        """Every tag whose name matches the glob ``pattern``."""
        ...

    def read_manifest_version(self) -> Result[str, ReleaseError]:
        """The base version currently declared in the manifest."""
        ...


class GitTagSource:
    """Tags from a git checkout, version from its package.json."""

    def __init__(self, *, repo: Repository, manifest_path: Path) -> None:
        self._repo = repo
        self._manifest_path = manifest_path

    def list_tags(self, pattern: str) -> Result[frozenset[str], ReleaseError]:
        result = self._repo.list_tags(pattern)
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="git_failed",
                    message=f"failed to list tags matching {pattern}",
                    hint=result.error.message,
                )
            )
        return Ok(result.value)

    def read_manifest_version(self) -> Result[str, ReleaseError]:
        return read_manifest(path=self._manifest_path).map(lambda m: m.version)


@dataclass(frozen=True, slots=True)
class StaticTagSource:
    """Fixed inputs, for ``forkrel next --base`` and tests."""

    version: str
    tags: frozenset[str] = field(default_factory=frozenset)

    def list_tags(self, pattern: str) -> Result[frozenset[str], ReleaseError]:
        # git tag --list uses fnmatch-style globs
        return Ok(frozenset(t for t in self.tags if fnmatch.fnmatchcase(t, pattern)))

    def read_manifest_version(self) -> Result[str, ReleaseError]:
        return Ok(self.version)
