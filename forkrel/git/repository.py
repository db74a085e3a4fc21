"""Git repository abstraction.

Wraps the handful of git commands a fork release needs. Every method that can
fail returns a Result.

Usage:
    repo = Repository(Path("/path/to/fork"))

    match repo.list_tags("v*-bscotch.*"):
        case Ok(tags):
            print(sorted(tags))
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from forkrel.core.result import Err, Ok, Result
from forkrel.platform.process import ProcessError
from forkrel.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

__all__ = [
    "GitError",
    "Repository",
    "StatusEntry",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """One line of ``git status --porcelain``.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path
    """

    xy: str
    path: str

    @property
    def is_untracked(self) -> bool:
        return self.xy == "??"

    def pretty_xy(self) -> str:
        """Format XY with dots for spaces (". M" instead of " M")."""
        return self.xy.replace(" ", ".")


class Repository:
    """Git operations on the fork checkout.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        return (self.path / ".git").exists()

    def changes(self) -> Result[tuple[StatusEntry, ...], GitError]:
        """List uncommitted changes, untracked files included.

        An empty tuple means the working tree is clean.
        """
        result = self._run(["status", "--porcelain"])
        match result:
            case Err(e):
                return Err(self._error("status", e, "git status failed"))
            case Ok(stdout):
                entries: list[StatusEntry] = []
                for line in stdout.splitlines():
                    entry = _parse_entry(line)
                    if entry is not None:
                        entries.append(entry)
                return Ok(tuple(entries))

    def list_tags(self, pattern: str) -> Result[frozenset[str], GitError]:
        """Return every tag whose name matches the glob ``pattern``."""
        result = self._run(["tag", "--list", pattern])
        match result:
            case Err(e):
                return Err(self._error("tag --list", e, "git tag --list failed"))
            case Ok(stdout):
                return Ok(frozenset(ln.strip() for ln in stdout.splitlines() if ln.strip()))

    def pull_tags(self) -> Result[str, GitError]:
        """Rebase onto upstream and fetch all tags (``git pull --rebase --tags``)."""
        result = self._run(["pull", "--rebase", "--tags"])
        match result:
            case Err(e):
                return Err(self._error("pull --rebase --tags", e, "pull failed"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def create_tag(self, tag: str, *, message: str) -> Result[None, GitError]:
        """Create an annotated tag at HEAD."""
        result = self._run(["tag", "-a", tag, "-m", message])
        if isinstance(result, Err):
            return Err(self._error("tag -a", result.error, f"failed to create tag {tag}"))
        return Ok(None)

    def push_tags(self) -> Result[None, GitError]:
        result = self._run(["push", "--tags"])
        if isinstance(result, Err):
            return Err(self._error("push --tags", result.error, "push failed"))
        return Ok(None)

    def remote_url(self, name: str = "origin") -> Result[str, GitError]:
        result = self._run(["remote", "get-url", name])
        match result:
            case Err(e):
                return Err(self._error("remote get-url", e, f"no remote named {name}"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if command in {"fetch", "pull", "push"}
            else _GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)

    @staticmethod
    def _error(command: str, e: ProcessError, fallback: str) -> GitError:
        return GitError(
            command=command,
            message=e.stderr.strip() or e.stdout.strip() or fallback,
            returncode=e.returncode,
        )


def _parse_entry(line: str) -> StatusEntry | None:
    if len(line) < 4:
        return None
    if line.startswith("?? "):
        return StatusEntry(xy="??", path=line[3:])
    return StatusEntry(xy=line[:2], path=line[3:])
