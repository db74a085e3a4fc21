from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, replace

TAG_PREFIX = "v"

_NUM = r"0|[1-9][0-9]*"
_PRE_ID = r"(?:0|[1-9][0-9]*|[0-9]*[A-Za-z-][0-9A-Za-z-]*)"
_BUILD_ID = r"[0-9A-Za-z-]+"

_SEMVER_RE = re.compile(
    rf"({_NUM})\.({_NUM})\.({_NUM})"
    rf"(?:-({_PRE_ID}(?:\.{_PRE_ID})*))?"
    rf"(?:\+({_BUILD_ID}(?:\.{_BUILD_ID})*))?"
)
_NUMERIC_RE = re.compile(r"0|[1-9][0-9]*")
_IDENTIFIER_RE = re.compile(r"[0-9A-Za-z-]+")

# (major, minor, patch, release_rank, prerelease ids)
# release_rank is 1 for a normal release so it sorts above any prerelease of
# the same triple. Numeric ids rank 0 and alphanumeric ids rank 1.
PrecedenceKey = tuple[int, int, int, int, tuple[tuple[int, int, str], ...]]


@dataclass(frozen=True, slots=True)
class SemanticVersion:
    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: str | None = None

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    @property
    def core(self) -> SemanticVersion:
        """The MAJOR.MINOR.PATCH part alone."""
        return SemanticVersion(self.major, self.minor, self.patch)

    def with_prerelease(self, *identifiers: str) -> SemanticVersion:
        for ident in identifiers:
            if not is_valid_identifier(ident):
                raise ValueError(f"invalid prerelease identifier: {ident!r}")
        return replace(self, prerelease=tuple(identifiers), build=None)

    def precedence(self) -> PrecedenceKey:
        ids: list[tuple[int, int, str]] = []
        for ident in self.prerelease:
            if _NUMERIC_RE.fullmatch(ident):
                ids.append((0, int(ident), ""))
            else:
                ids.append((1, 0, ident))
        rank = 0 if self.prerelease else 1
        return (self.major, self.minor, self.patch, rank, tuple(ids))

    def to_tag(self, prefix: str = TAG_PREFIX) -> str:
        return f"{prefix}{self}"

    def __str__(self) -> str:
        out = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            out += "-" + ".".join(self.prerelease)
        if self.build:
            out += "+" + self.build
        return out


def is_valid_identifier(ident: str) -> bool:
    """True for a legal prerelease identifier (numeric ones without leading zeros)."""
    if not _IDENTIFIER_RE.fullmatch(ident):
        return False
    if ident.isdigit():
        return _NUMERIC_RE.fullmatch(ident) is not None
    return True


def is_numeric_identifier(ident: str) -> bool:
    return _NUMERIC_RE.fullmatch(ident) is not None


def parse_version(text: str) -> SemanticVersion | None:
    m = _SEMVER_RE.fullmatch(text)
    if m is None:
        return None
    pre = tuple(m.group(4).split(".")) if m.group(4) else ()
    return SemanticVersion(
        major=int(m.group(1)),
        minor=int(m.group(2)),
        patch=int(m.group(3)),
        prerelease=pre,
        build=m.group(5),
    )


def parse_tag(tag: str, *, prefix: str = TAG_PREFIX) -> SemanticVersion | None:
    if not tag.startswith(prefix):
        return None
    return parse_version(tag[len(prefix) :])


def compare(a: SemanticVersion, b: SemanticVersion) -> int:
    """Return -1, 0 or 1. Build metadata never affects the result."""
    ka = a.precedence()
    kb = b.precedence()
    if ka < kb:
        return -1
    if ka > kb:
        return 1
    return 0


def sort_tags(tags: Iterable[str], *, prefix: str = TAG_PREFIX) -> list[str]:
    """Sort tags by version precedence, dropping the ones that do not parse.

    Ties (same precedence, different build metadata) break on the tag text so
    the result does not depend on input order.
    """
    parsed: list[tuple[PrecedenceKey, str]] = []
    for tag in tags:
        v = parse_tag(tag, prefix=prefix)
        if v is not None:
            parsed.append((v.precedence(), tag))
    parsed.sort()
    return [tag for _, tag in parsed]


def max_tag(tags: Iterable[str], *, prefix: str = TAG_PREFIX) -> str | None:
    ordered = sort_tags(tags, prefix=prefix)
    return ordered[-1] if ordered else None
