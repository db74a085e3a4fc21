"""Tests for forkrel.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from forkrel.core.config import (
    BuildConfig,
    Config,
    ReleaseConfig,
    load_config,
    load_config_or_default,
)
from forkrel.core.result import Err, Ok


class TestDefaults:
    def test_release_defaults(self) -> None:
        release = ReleaseConfig()
        assert release.marker == "bscotch"
        assert release.manifest == "package.json"
        assert release.repo is None
        assert release.target == "origin/release"
        assert release.prerelease is True
        assert release.notes_file == "NOTES.md"

    def test_build_defaults(self) -> None:
        build = BuildConfig()
        assert build.clean == ("node_modules", "dist")
        assert build.commands == ("yarn --frozen-lockfile", "yarn build")
        assert build.pack == "npm pack"

    def test_frozen(self) -> None:
        config = Config()
        with pytest.raises(AttributeError):
            config.release = ReleaseConfig()  # type: ignore[misc]


class TestFromDict:
    def test_empty(self) -> None:
        assert Config.from_dict({}) == Config()

    def test_full(self) -> None:
        config = Config.from_dict(
            {
                "release": {
                    "marker": "acme",
                    "manifest": "packages/core/package.json",
                    "repo": "acme/fork",
                    "target": "main",
                    "prerelease": False,
                    "notes_file": "RELEASE.md",
                },
                "build": {
                    "clean": ["lib"],
                    "commands": ["pnpm install", "pnpm build"],
                    "pack": "pnpm pack",
                },
            }
        )
        assert config.release == ReleaseConfig(
            marker="acme",
            manifest="packages/core/package.json",
            repo="acme/fork",
            target="main",
            prerelease=False,
            notes_file="RELEASE.md",
        )
        assert config.build == BuildConfig(
            clean=("lib",),
            commands=("pnpm install", "pnpm build"),
            pack="pnpm pack",
        )

    def test_empty_command_list_disables_build(self) -> None:
        config = Config.from_dict({"build": {"commands": [], "clean": []}})
        assert config.build.commands == ()
        assert config.build.clean == ()

    def test_wrong_types_fall_back_to_defaults(self) -> None:
        config = Config.from_dict(
            {
                "release": {"marker": 3, "prerelease": "no", "repo": "  "},
                "build": {"commands": ["yarn", 1]},
            }
        )
        assert config.release.marker == "bscotch"
        assert config.release.prerelease is True
        assert config.release.repo is None
        assert config.build.commands == ("yarn --frozen-lockfile", "yarn build")


class TestLoadConfig:
    def test_load(self, tmp_path: Path) -> None:
        path = tmp_path / "forkrel.toml"
        path.write_text('[release]\nmarker = "acme"\n\n[build]\npack = "yarn pack"\n', encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Ok)
        assert result.value.release.marker == "acme"
        assert result.value.build.pack == "yarn pack"

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / "forkrel.toml")
        assert isinstance(result, Err)
        assert "not found" in result.error.message

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "forkrel.toml"
        path.write_text("[release\n", encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message
        assert result.error.path == path

    def test_or_default_when_missing(self, tmp_path: Path) -> None:
        assert load_config_or_default(tmp_path / "forkrel.toml") == Ok(Config())

    def test_or_default_still_reports_parse_errors(self, tmp_path: Path) -> None:
        path = tmp_path / "forkrel.toml"
        path.write_text("marker = \n", encoding="utf-8")
        assert isinstance(load_config_or_default(path), Err)
