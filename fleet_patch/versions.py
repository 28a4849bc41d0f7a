"""Version parsing and ordering utilities.

Versions are compared on their leading numeric run only:
- "2.28.0" → (2, 28, 0)
- "1.0rc1" → (1, 0)
- "4.2.1+build5" → (4, 2, 1)
- "latest" → ()

Missing trailing segments count as zero, so "1.2" equals "1.2.0". Suffixes
such as pre-release or local tags are ignored, which is an approximation and
not full semantic-version ordering. A version without a leading digit
normalizes to the empty sequence and orders below any positive version.
"""

from __future__ import annotations

import re
from enum import IntEnum
from functools import total_ordering
from itertools import zip_longest

_NUMERIC_RUN = re.compile(r"^[0-9.]*")


class Ordering(IntEnum):
    """Result of a three-way comparison."""

    LESS = -1
    EQUAL = 0
    GREATER = 1


def _segment(part: str) -> int:
    # Empty segments and digit runs too long for int() are malformed
    try:
        return int(part) if part else 0
    except ValueError:
        return 0


def numeric_prefix(raw: str) -> tuple[int, ...]:
    """Extract the numeric ordering key from a raw version string.

    Takes the maximal leading run of digits and dots, splits on dots, and
    parses each segment. Malformed segments (e.g. the empty one in "1..2")
    become 0.
    """
    run = _NUMERIC_RUN.match(raw.strip()).group(0)
    if not run:
        return ()
    return tuple(_segment(part) for part in run.split("."))


@total_ordering
class Version:
    """Immutable ordering key derived from a raw version string."""

    __slots__ = ("_raw", "_prefix")

    def __init__(self, raw: str) -> None:
        object.__setattr__(self, "_raw", raw.strip())
        object.__setattr__(self, "_prefix", numeric_prefix(raw))

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("Version is immutable")

    @property
    def raw(self) -> str:
        return self._raw

    @property
    def numeric_prefix(self) -> tuple[int, ...]:
        return self._prefix

    @property
    def major(self) -> int:
        """First numeric segment, 0 when there is none."""
        return self._prefix[0] if self._prefix else 0

    def _key(self) -> tuple[int, ...]:
        # Trailing zeros are insignificant: "1.2.0" and "1.2" share a key.
        key = list(self._prefix)
        while key and key[-1] == 0:
            key.pop()
        return tuple(key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return compare(self, other) is Ordering.EQUAL

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return compare(self, other) is Ordering.LESS

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return self._raw

    def __repr__(self) -> str:
        return f"Version({self._raw!r})"


def _coerce(v: Version | str) -> Version:
    return v if isinstance(v, Version) else Version(v)


def compare(a: Version | str, b: Version | str) -> Ordering:
    """Three-way compare two versions segment by segment.

    The first differing segment decides; a missing segment counts as 0.
    This is the single comparison used everywhere, so less_than() and
    greater_than() can never disagree with each other.
    """
    left, right = _coerce(a).numeric_prefix, _coerce(b).numeric_prefix
    for x, y in zip_longest(left, right, fillvalue=0):
        if x < y:
            return Ordering.LESS
        if x > y:
            return Ordering.GREATER
    return Ordering.EQUAL


def less_than(a: Version | str, b: Version | str) -> bool:
    return compare(a, b) is Ordering.LESS


def greater_than(a: Version | str, b: Version | str) -> bool:
    return compare(a, b) is Ordering.GREATER


def equal(a: Version | str, b: Version | str) -> bool:
    return compare(a, b) is Ordering.EQUAL
