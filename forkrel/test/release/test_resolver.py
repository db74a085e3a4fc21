from __future__ import annotations

import itertools

import pytest

from forkrel.core.result import Err, Ok
from forkrel.release.resolver import (
    NextRelease,
    family_tags,
    resolve_next,
    tag_pattern,
)
from forkrel.release.semver import SemanticVersion, parse_tag


def _next(base: str, tags: set[str] | list[str], *, marker: str = "bscotch") -> NextRelease:
    result = resolve_next(base, tags, marker=marker)
    assert isinstance(result, Ok), result
    return result.value


def _kind(base: str, tags: set[str] | list[str], *, marker: str = "bscotch") -> str:
    result = resolve_next(base, tags, marker=marker)
    assert isinstance(result, Err), result
    return result.error.kind


class TestNewFamily:
    @pytest.mark.parametrize("base", ["0.0.0", "1.0.0", "2.13.7", "10.0.1"])
    def test_empty_tags_start_at_zero(self, base: str) -> None:
        nxt = _next(base, set())
        assert nxt.tag == f"v{base}-bscotch.0"
        assert nxt.version == f"{base}-bscotch.0"
        assert nxt.counter == 0
        assert nxt.anchor is None
        assert nxt.is_new_family

    def test_example_one_zero_zero(self) -> None:
        assert _next("1.0.0", set()).tag == "v1.0.0-bscotch.0"

    def test_custom_marker(self) -> None:
        assert _next("3.1.4", set(), marker="acme").tag == "v3.1.4-acme.0"

    def test_build_metadata_on_base_is_dropped(self) -> None:
        assert _next("1.2.0+sha.abc", set()).tag == "v1.2.0-bscotch.0"

    def test_surrounding_whitespace_is_tolerated(self) -> None:
        assert _next(" 1.2.0\n", set()).tag == "v1.2.0-bscotch.0"


class TestExistingFamily:
    @pytest.mark.parametrize("k", [0, 1, 4, 9, 10, 41])
    def test_contiguous_family_increments(self, k: int) -> None:
        tags = {f"v1.4.2-bscotch.{i}" for i in range(k + 1)}
        nxt = _next("1.4.2", tags)
        assert nxt.tag == f"v1.4.2-bscotch.{k + 1}"
        assert nxt.anchor == f"v1.4.2-bscotch.{k}"

    def test_older_base_family_is_ignored(self) -> None:
        tags = {"v2.0.0-bscotch.0", "v2.0.0-bscotch.1", "v1.9.9-bscotch.7"}
        nxt = _next("2.0.0", tags)
        assert nxt.tag == "v2.0.0-bscotch.2"
        assert nxt.version == "2.0.0-bscotch.2"

    def test_gaps_are_tolerated(self) -> None:
        tags = {"v1.0.0-bscotch.0", "v1.0.0-bscotch.3", "v1.0.0-bscotch.17"}
        assert _next("1.0.0", tags).tag == "v1.0.0-bscotch.18"

    def test_numeric_not_lexical_ordering(self) -> None:
        tags = {"v1.0.0-bscotch.9", "v1.0.0-bscotch.10", "v1.0.0-bscotch.2"}
        nxt = _next("1.0.0", tags)
        assert nxt.anchor == "v1.0.0-bscotch.10"
        assert nxt.tag == "v1.0.0-bscotch.11"

    def test_build_metadata_on_family_tag_is_accepted(self) -> None:
        tags = {"v1.0.0-bscotch.4+ci.12"}
        assert _next("1.0.0", tags).tag == "v1.0.0-bscotch.5"

    def test_result_is_never_an_existing_tag(self) -> None:
        tags = {f"v5.0.0-bscotch.{i}" for i in (0, 2, 5)} | {"v5.0.0", "v5.0.1-bscotch.0"}
        nxt = _next("5.0.0", tags)
        assert nxt.tag not in tags


class TestBaseVersionChange:
    def test_bump_resets_counter(self) -> None:
        tags = {f"v1.2.0-bscotch.{i}" for i in range(6)}
        assert _next("1.3.0", tags).tag == "v1.3.0-bscotch.0"

    def test_decrease_starts_fresh_family(self) -> None:
        tags = {f"v1.3.0-bscotch.{i}" for i in range(3)}
        assert _next("1.2.0", tags).tag == "v1.2.0-bscotch.0"

    def test_returning_to_an_old_base_continues_its_family(self) -> None:
        tags = {
            "v1.2.0-bscotch.0",
            "v1.2.0-bscotch.1",
            "v1.3.0-bscotch.0",
        }
        assert _next("1.2.0", tags).tag == "v1.2.0-bscotch.2"


class TestFiltering:
    def test_unrelated_tags_are_ignored(self) -> None:
        noise = {
            "v1.0.0",
            "v1.0.1",
            "v1.0.0-beta.7",
            "v1.0.0-bscotchy.9",
            "v1.0.0-other.3",
            "v0.9.0-bscotch.12",
            "release-2020",
            "",
            "not a tag",
            "1.0.0-bscotch.99",
            "V1.0.0-bscotch.99",
        }
        family = {"v1.0.0-bscotch.0", "v1.0.0-bscotch.1"}
        assert _next("1.0.0", noise | family) == _next("1.0.0", family)

    def test_malformed_tags_outside_family_are_ignored(self) -> None:
        tags = {"v1.0-bscotch.x", "v01.0.0-bscotch.1", "v2.0.0-bscotch.01"}
        assert _next("1.0.0", tags).tag == "v1.0.0-bscotch.0"

    def test_other_marker_family_is_ignored(self) -> None:
        tags = {"v1.0.0-acme.5"}
        assert _next("1.0.0", tags).tag == "v1.0.0-bscotch.0"
        assert _next("1.0.0", tags, marker="acme").tag == "v1.0.0-acme.6"

    def test_accepts_any_iterable(self) -> None:
        tags = ["v1.0.0-bscotch.0", "v1.0.0-bscotch.0", "v1.0.0-bscotch.1"]
        assert _next("1.0.0", iter(tags)).tag == "v1.0.0-bscotch.2"


class TestMonotonicity:
    FAMILY = [
        "v3.0.0-bscotch.0",
        "v3.0.0-bscotch.2",
        "v3.0.0-bscotch.9",
        "v3.0.0-bscotch.10",
        "v3.0.0-bscotch.1+build",
    ]
    NOISE = ["v3.0.0", "v2.9.9-bscotch.50", "junk"]

    def test_order_independence(self) -> None:
        seen: set[str] = set()
        for perm in itertools.permutations(self.FAMILY + self.NOISE[:1]):
            seen.add(_next("3.0.0", list(perm)).tag)
        assert seen == {"v3.0.0-bscotch.11"}

    def test_result_exceeds_every_family_member(self) -> None:
        nxt = _next("3.0.0", self.FAMILY + self.NOISE)
        result_key = SemanticVersion(3, 0, 0, ("bscotch", str(nxt.counter))).precedence()
        for tag in self.FAMILY:
            v = parse_tag(tag)
            assert v is not None
            assert result_key > v.precedence()

    def test_result_sorts_below_the_plain_release(self) -> None:
        # prereleases of the base never outrank the upstream release itself
        nxt = _next("3.0.0", self.FAMILY)
        assert SemanticVersion(3, 0, 0, ("bscotch", str(nxt.counter))).precedence() < (
            SemanticVersion(3, 0, 0).precedence()
        )


class TestErrors:
    @pytest.mark.parametrize(
        "base",
        ["1.0", "1", "", "v1.0.0", "1.0.0.0", "01.0.0", "1.0.x", "latest", "1.0.0-", "1\u0662.0.0"],
    )
    def test_invalid_base_version(self, base: str) -> None:
        assert _kind(base, set()) == "invalid_version_format"

    @pytest.mark.parametrize("base", ["1.0.0-bscotch.3", "1.0.0-rc.1", "2.0.0-0"])
    def test_base_with_prerelease_is_rejected(self, base: str) -> None:
        result = resolve_next(base, set())
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_version_format"
        assert result.error.hint is not None

    def test_base_error_wins_over_tag_error(self) -> None:
        assert _kind("1.0", {"v1.0.0-bscotch.oops"}) == "invalid_version_format"

    @pytest.mark.parametrize(
        "bad",
        [
            "v1.0.0-bscotch.01",
            "v1.0.0-bscotch.x",
            "v1.0.0-bscotch.",
            "v1.0.0-bscotch.1.2",
            "v1.0.0-bscotch.-1",
            "v1.0.0-bscotch.3 ",
            "v1.0.0-bscotch.3\n",
            "v1.0.0-bscotch.1\u0662",
            "v1.0.0-bscotch.\u0661",
        ],
    )
    def test_malformed_family_tag(self, bad: str) -> None:
        tags = {"v1.0.0-bscotch.0", bad}
        result = resolve_next("1.0.0", tags)
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_tag_format"
        assert bad in result.error.message

    @pytest.mark.parametrize("marker", ["", "12", "has.dot", "sp ace", "ü"])
    def test_invalid_marker(self, marker: str) -> None:
        assert _kind("1.0.0", set(), marker=marker) == "invalid_input"


class TestFamilyTags:
    def test_sorted_by_precedence(self) -> None:
        base = SemanticVersion(1, 0, 0)
        result = family_tags(base, {"v1.0.0-bscotch.10", "v1.0.0-bscotch.9", "v1.0.1-bscotch.0"})
        assert isinstance(result, Ok)
        assert [m.counter for m in result.value] == [9, 10]

    def test_tag_pattern(self) -> None:
        assert tag_pattern() == "v*-bscotch.*"
        assert tag_pattern("acme") == "v*-acme.*"
