"""Typed configuration loading and access.

Configuration lives in an optional ``forkrel.toml`` at the project root. Every
field has a default, so a missing file yields a usable ``Config()``.
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_str, get_str_list, get_table

__all__ = [
    "BuildConfig",
    "Config",
    "ConfigError",
    "ReleaseConfig",
    "CONFIG_FILE_NAME",
    "DEFAULT_MARKER",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILE_NAME = "forkrel.toml"

DEFAULT_MARKER = "bscotch"
DEFAULT_MANIFEST = "package.json"
DEFAULT_TARGET = "origin/release"
DEFAULT_NOTES_FILE = "NOTES.md"

DEFAULT_CLEAN = ("node_modules", "dist")
DEFAULT_BUILD_COMMANDS = ("yarn --frozen-lockfile", "yarn build")
DEFAULT_PACK_COMMAND = "npm pack"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Tagging and publishing settings."""

    marker: str = DEFAULT_MARKER
    manifest: str = DEFAULT_MANIFEST
    # owner/name; derived from the origin remote when unset
    repo: str | None = None
    target: str = DEFAULT_TARGET
    prerelease: bool = True
    notes_file: str = DEFAULT_NOTES_FILE


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Commands run before packing.

    ``clean`` entries are paths relative to the project root removed before
    building. ``commands`` run in order; each is split with shell rules but
    never run through a shell.
    """

    clean: tuple[str, ...] = DEFAULT_CLEAN
    commands: tuple[str, ...] = DEFAULT_BUILD_COMMANDS
    pack: str = DEFAULT_PACK_COMMAND


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    release: ReleaseConfig = field(default_factory=ReleaseConfig)
    build: BuildConfig = field(default_factory=BuildConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        release: StrDict = get_table(data, "release") or {}
        build: StrDict = get_table(data, "build") or {}

        prerelease = get_bool(release, "prerelease")
        clean = get_str_list(build, "clean")
        commands = get_str_list(build, "commands")

        return cls(
            release=ReleaseConfig(
                marker=get_str(release, "marker") or DEFAULT_MARKER,
                manifest=get_str(release, "manifest") or DEFAULT_MANIFEST,
                repo=get_str(release, "repo"),
                target=get_str(release, "target") or DEFAULT_TARGET,
                prerelease=True if prerelease is None else prerelease,
                notes_file=get_str(release, "notes_file") or DEFAULT_NOTES_FILE,
            ),
            build=BuildConfig(
                clean=DEFAULT_CLEAN if clean is None else clean,
                commands=DEFAULT_BUILD_COMMANDS if commands is None else commands,
                pack=get_str(build, "pack") or DEFAULT_PACK_COMMAND,
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        return Err(ConfigError(f"config file not found: {path}", path=path))
    except OSError as e:
        return Err(ConfigError(f"cannot read {path}: {e.strerror or e}", path=path))

    try:
        parsed: object = tomllib.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"{path.name} is not UTF-8: {e.reason}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML in {path.name}: {e}", path=path))

    table = as_str_dict(parsed)
    if table is None:
        return Err(ConfigError(f"{path.name} must contain a TOML table", path=path))
    return Ok(table)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to forkrel.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config if the file exists, else defaults.

    A file that exists but does not parse is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
