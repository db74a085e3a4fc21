"""Next-tag resolution for a fork's prerelease family.

The fork tags its releases ``v<base>-<marker>.<N>`` where ``<base>`` is the
version declared in the manifest. For a given base, every tag starting with
``v<base>-<marker>.`` belongs to the active family; the next release takes the
family's highest counter plus one, or ``0`` when the family does not exist yet.

A change of base version (up or down) therefore starts over at ``.0`` unless
the new base already has a family, in which case that family continues. Tags
outside the family are never inspected, so upstream tags, other markers and
junk refs cannot affect or break the result.

Pure: no I/O, no state, independent of input order.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from forkrel.core.config import DEFAULT_MARKER
from forkrel.core.result import Err, Ok, Result
from forkrel.release.errors import ReleaseError
from forkrel.release.semver import (
    TAG_PREFIX,
    SemanticVersion,
    is_numeric_identifier,
    is_valid_identifier,
    parse_tag,
    parse_version,
)


@dataclass(frozen=True, slots=True)
class FamilyTag:
    tag: str
    version: SemanticVersion
    counter: int


@dataclass(frozen=True, slots=True)
class NextRelease:
    """The resolved next release.

    Attributes:
        base: Base version the family is anchored to (MAJOR.MINOR.PATCH)
        marker: Fork marker identifier
        counter: Counter of the new tag
        anchor: Highest existing family tag, None when the family is new
    """

    base: SemanticVersion
    marker: str
    counter: int
    anchor: str | None

    @property
    def version(self) -> str:
        return str(self.base.with_prerelease(self.marker, str(self.counter)))

    @property
    def tag(self) -> str:
        return f"{TAG_PREFIX}{self.version}"

    @property
    def is_new_family(self) -> bool:
        return self.anchor is None


def tag_pattern(marker: str = DEFAULT_MARKER) -> str:
    """Glob matching every fork tag, any base (for ``git tag --list``)."""
    return f"{TAG_PREFIX}*-{marker}.*"


def family_prefix(base: SemanticVersion, marker: str) -> str:
    return f"{TAG_PREFIX}{base.major}.{base.minor}.{base.patch}-{marker}."


def validate_marker(marker: str) -> Result[str, ReleaseError]:
    if not is_valid_identifier(marker) or marker.isdigit():
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=f"invalid fork marker: {marker!r}",
                hint="Use a non-numeric prerelease identifier, e.g. 'bscotch' ([0-9A-Za-z-]).",
            )
        )
    return Ok(marker)


def parse_base_version(text: str) -> Result[SemanticVersion, ReleaseError]:
    """Parse the manifest version. Build metadata is dropped, prerelease rejected."""
    v = parse_version(text.strip())
    if v is None:
        return Err(
            ReleaseError(
                kind="invalid_version_format",
                message=f"invalid base version: {text!r}",
                hint="Expected MAJOR.MINOR.PATCH, e.g. 1.2.0",
            )
        )
    if v.is_prerelease:
        return Err(
            ReleaseError(
                kind="invalid_version_format",
                message=f"base version must not have a prerelease segment: {text}",
                hint=f"Set the manifest version to {v.core}",
            )
        )
    return Ok(v.core)


def family_tags(
    base: SemanticVersion,
    all_tags: Iterable[str],
    *,
    marker: str = DEFAULT_MARKER,
) -> Result[list[FamilyTag], ReleaseError]:
    """Select and parse the active family, ordered by precedence.

    A tag that looks like a family member but is not exactly
    ``v<base>-<marker>.<N>[+build]`` is an error rather than skipped: it means
    someone hand-made a tag that could break counter monotonicity.
    """
    prefix = family_prefix(base, marker)
    members: list[FamilyTag] = []

    for tag in sorted(set(all_tags)):
        if not tag.startswith(prefix):
            continue
        v = parse_tag(tag)
        if v is None:
            return Err(
                ReleaseError(
                    kind="invalid_tag_format",
                    message=f"fork tag is not a valid semantic version: {tag}",
                    hint=f"Expected {prefix}N; delete or rename the tag.",
                )
            )
        if len(v.prerelease) != 2 or not is_numeric_identifier(v.prerelease[1]):
            return Err(
                ReleaseError(
                    kind="invalid_tag_format",
                    message=f"fork tag has an unexpected prerelease shape: {tag}",
                    hint=f"Expected {prefix}N; delete or rename the tag.",
                )
            )
        members.append(FamilyTag(tag=tag, version=v, counter=int(v.prerelease[1])))

    members.sort(key=lambda m: (m.version.precedence(), m.tag))
    return Ok(members)


def resolve_next(
    base_version: str,
    all_tags: Iterable[str],
    *,
    marker: str = DEFAULT_MARKER,
) -> Result[NextRelease, ReleaseError]:
    """Compute the next fork release for ``base_version``.

    Args:
        base_version: Manifest version, MAJOR.MINOR.PATCH without prerelease
        all_tags: Every known tag; unrelated entries are ignored
        marker: Fork marker identifier

    Returns:
        Ok(NextRelease) whose tag is absent from ``all_tags`` and above every
        family member, or Err(ReleaseError) with kind
        ``invalid_version_format``, ``invalid_tag_format`` or ``invalid_input``.
    """
    ok = validate_marker(marker)
    if isinstance(ok, Err):
        return ok

    base = parse_base_version(base_version)
    if isinstance(base, Err):
        return base

    family = family_tags(base.value, all_tags, marker=marker)
    if isinstance(family, Err):
        return family

    if not family.value:
        return Ok(NextRelease(base=base.value, marker=marker, counter=0, anchor=None))

    anchor = family.value[-1]
    return Ok(
        NextRelease(
            base=base.value,
            marker=marker,
            counter=anchor.counter + 1,
            anchor=anchor.tag,
        )
    )
