"""Subprocess execution for git, gh and build commands.

The only module that calls ``subprocess`` directly. ``run`` captures output for
commands whose answer forkrel parses (git, gh); ``run_silent`` lets build and
pack output stream to the terminal.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from forkrel.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run", "run_silent"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that could not run, timed out, or exited non-zero.

    ``returncode`` is -1 when the process never started or was killed on
    timeout. ``stdout``/``stderr`` are empty for ``run_silent`` failures.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        shown = " ".join(self.command[:3])
        if len(self.command) > 3:
            shown += " ..."
        return f"{shown} failed (exit {self.returncode})"


def _spawn(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None,
    timeout: float | None,
    *,
    capture: bool,
) -> Result[subprocess.CompletedProcess[str], ProcessError]:
    argv = tuple(cmd)
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=capture,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        partial = e.stdout if isinstance(e.stdout, str) else ""
        return Err(ProcessError(argv, -1, partial, f"Command timed out after {timeout}s"))
    except OSError as e:
        return Err(ProcessError(argv, -1, "", str(e)))

    if proc.returncode != 0:
        return Err(ProcessError(argv, proc.returncode, proc.stdout or "", proc.stderr or ""))
    return Ok(proc)


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run ``cmd`` in ``cwd`` and return its stdout.

    Args:
        cmd: Command and arguments.
        cwd: Working directory.
        env: Full environment, or None to inherit.
        timeout: Seconds before the process is killed (None for no limit).
    """
    return _spawn(cmd, cwd, env, timeout, capture=True).map(lambda proc: proc.stdout)


def run_silent(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[None, ProcessError]:
    """Run ``cmd`` with output going straight to the terminal."""
    return _spawn(cmd, cwd, env, timeout, capture=False).map(lambda _proc: None)
