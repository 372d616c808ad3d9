"""
Minimal npm-style semantic version ranges.

Only what the support decision needs is implemented: parsing `x.y.z`
versions with optional prerelease tags, validating the common range grammar
(`>=`, `>`, `<`, `<=`, `=`, `^`, `~`, x-ranges, hyphen ranges and `||`
alternatives), and answering whether a range admits any version below a
threshold. A range admits a version below `T` exactly when its lowest
admitted version is below `T`, so ranges are reduced to that lower bound.
Upper bounds never raise the lower bound and are only validated.
"""

from __future__ import annotations

import re
from typing import List, NamedTuple, Optional, Tuple

_PRERELEASE = r"(?:-(?P<pre>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
_VERSION_RE = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)" + _PRERELEASE + "$"
)
_PARTIAL_RE = re.compile(
    r"^(?P<op>>=|<=|>|<|=|\^|~>?)?\s*v?"
    r"(?P<major>\d+|[xX*])"
    r"(?:\.(?P<minor>\d+|[xX*]))?"
    r"(?:\.(?P<patch>\d+|[xX*]))?" + _PRERELEASE + "$"
)
_HYPHEN_RE = re.compile(r"^(\S+)\s+-\s+(\S+)$")
_OPERATOR_SPACE_RE = re.compile(r"(>=|<=|>|<|=|\^|~>?)\s+")


def _identifier_key(identifier: str) -> Tuple[int, int, str]:
    # Numeric identifiers sort numerically and before alphanumeric ones.
    if identifier.isdigit():
        return (0, int(identifier), "")
    return (1, 0, identifier)


class Version(NamedTuple):
    major: int
    minor: int
    patch: int
    prerelease: Tuple[str, ...] = ()

    def precedence(self) -> Tuple:
        """Sort key under which `1.0.0-beta < 1.0.0-beta.0 < 1.0.0`."""
        if not self.prerelease:
            return (self.major, self.minor, self.patch, 1, ())
        return (self.major, self.minor, self.patch, 0, tuple(_identifier_key(part) for part in self.prerelease))


ZERO = Version(0, 0, 0)


def _prerelease(match: "re.Match[str]") -> Tuple[str, ...]:
    pre = match.group("pre")
    return tuple(pre.split(".")) if pre else ()


def parse_version(text: str) -> Optional[Version]:
    """Parse a full `x.y.z` version; build metadata is dropped."""
    match = _VERSION_RE.match(text.strip())
    if not match:
        return None
    return Version(int(match.group("major")), int(match.group("minor")), int(match.group("patch")), _prerelease(match))


def _is_wild(part: Optional[str]) -> bool:
    return part is None or part in ("x", "X", "*")


def _comparator_floor(token: str) -> Optional[Version]:
    """Lowest version a single comparator admits, or None if invalid."""
    match = _PARTIAL_RE.match(token)
    if not match:
        return None
    op = match.group("op") or "="
    major, minor, patch = match.group("major"), match.group("minor"), match.group("patch")

    if _is_wild(major):
        return ZERO
    if op in ("<", "<="):
        return ZERO

    if _is_wild(minor) or _is_wild(patch):
        # A prerelease tag only binds to a complete version.
        prerelease: Tuple[str, ...] = ()
    else:
        prerelease = _prerelease(match)
    numbers = [int(major), 0 if _is_wild(minor) else int(minor), 0 if _is_wild(patch) else int(patch)]
    if op == ">":
        if prerelease:
            # The smallest successor of `x.y.z-pre` is `x.y.z-pre.0`.
            return Version(numbers[0], numbers[1], numbers[2], prerelease + ("0",))
        # Bump the last specified component.
        if _is_wild(minor):
            return Version(numbers[0] + 1, 0, 0)
        if _is_wild(patch):
            return Version(numbers[0], numbers[1] + 1, 0)
        return Version(numbers[0], numbers[1], numbers[2] + 1)
    return Version(numbers[0], numbers[1], numbers[2], prerelease)


def _comparator_set_floor(text: str) -> Optional[Version]:
    text = text.strip()
    if text in ("", "*", "x", "X"):
        return ZERO
    hyphen = _HYPHEN_RE.match(text)
    if hyphen:
        low, high = hyphen.groups()
        if _comparator_floor(high) is None:
            return None
        return _comparator_floor(low)

    floor = ZERO
    for token in _OPERATOR_SPACE_RE.sub(r"\1", text).split():
        token_floor = _comparator_floor(token)
        if token_floor is None:
            return None
        floor = max(floor, token_floor, key=Version.precedence)
    return floor


def _range_floors(text: str) -> Optional[List[Version]]:
    floors: List[Version] = []
    for alternative in text.split("||"):
        floor = _comparator_set_floor(alternative)
        if floor is None:
            return None
        floors.append(floor)
    return floors


def valid_range(text: Optional[str]) -> Optional[str]:
    """Return the normalized range when `text` parses, else None."""
    if not isinstance(text, str):
        return None
    if _range_floors(text) is None:
        return None
    return " || ".join(part.strip() or "*" for part in text.split("||"))


def min_version(range_text: str) -> Version:
    """Lowest version admitted by a range.

    Raises:
        ValueError: If the range does not parse.
    """
    floors = _range_floors(range_text)
    if floors is None:
        raise ValueError(f"Invalid version range: {range_text!r}")
    return min(floors, key=Version.precedence)


def intersects_below(range_text: str, threshold: str) -> bool:
    """Whether the range intersects `<threshold`."""
    limit = parse_version(threshold)
    if limit is None:
        raise ValueError(f"Invalid version: {threshold!r}")
    return min_version(range_text).precedence() < limit.precedence()


__all__ = [
    "Version",
    "intersects_below",
    "min_version",
    "parse_version",
    "valid_range",
]
