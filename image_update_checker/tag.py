"""
Image tag parsing.

A tag is split into an optional flavor prefix, a version and an optional
flavor suffix, e.g. ``jdk-17.0.2_8-alpine`` or ``18-slim``.
"""

from __future__ import annotations

import re
from typing import List, Optional

from .version import ComparableVersion


DIGEST = re.compile(r"[0-9a-f]{64}")

_WORDS_WITH_BUILD = r"(?:(?:-[a-z]+)+-[0-9]+)+"
_VERSION = (
    r"v?(?P<version>[0-9]+(?:[_.][0-9]+)*"
    rf"(?:\.[a-z0-9]+|{_WORDS_WITH_BUILD}|-(?:kb)?[0-9]+)*)"
)

# Tried in order; the first one that matches wins.
_NAME_WITH_VERSION = (
    re.compile(rf"(?P<prefix>[a-z][a-z0-9.\-_]*-)?{_VERSION}", re.IGNORECASE),
    re.compile(rf"{_VERSION}(?P<suffix>-[a-z][a-z0-9.\-]*)?", re.IGNORECASE),
    re.compile(rf"(?P<prefix>[a-z\-_]+-)?{_VERSION}(?P<suffix>-[a-z\-]+)?", re.IGNORECASE),
)

_YEAR_MONTH = re.compile(r"^[12]\d{3}(?:[.\-]|$)")
_YEAR_MONTH_DAY = re.compile(r"^[12](?:\d{5}|\d{7})(?:[.\-]|$)")
_SHA_SUFFIXED = re.compile(r"(?:^|-g?)[0-9a-f]{7,}$")
_BUILD_NUM = re.compile(r"^\d+$")


def _match_name(name: str) -> Optional[re.Match]:
    for pattern in _NAME_WITH_VERSION:
        match = pattern.fullmatch(name)
        if match:
            return match
    return None


class Tag:
    """An image tag as listed by a registry."""

    __slots__ = ("name", "prefix", "suffix", "version", "numeric_version")

    def __init__(self, name: str) -> None:
        self.name = name
        match = _match_name(name)
        groups = match.groupdict() if match else {}
        self.prefix: Optional[str] = groups.get("prefix")
        self.suffix: Optional[str] = groups.get("suffix")
        self.version: Optional[str] = groups.get("version")
        self.numeric_version: Optional[str] = None
        if self.version is not None:
            numeric = re.sub(r"kb", "", self.version, flags=re.IGNORECASE)
            numeric = re.sub(r"-[a-z]+", "", numeric, flags=re.IGNORECASE)
            self.numeric_version = numeric.lower()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tag):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __repr__(self) -> str:
        return f"<Tag('{self.name}')>"

    def __str__(self) -> str:
        return self.name

    @property
    def comparable(self) -> bool:
        return self.numeric_version is not None

    @property
    def is_digest(self) -> bool:
        return bool(DIGEST.search(self.name))

    @property
    def canonical(self) -> bool:
        """Whether the tag looks like a plain release rather than a branch."""
        if self.numeric_version is None:
            return False
        literal = f"v{self.numeric_version}"
        return self.name in (
            self.numeric_version,
            f"{self.numeric_version}-sdk",
            literal,
            f"{literal}-sdk",
        )

    @property
    def looks_like_prerelease(self) -> bool:
        return self.numeric_version is not None and bool(re.search(r"[a-z]", self.numeric_version))

    @property
    def format(self) -> str:
        if self.version and _YEAR_MONTH.match(self.version):
            return "year_month"
        if self.version and _YEAR_MONTH_DAY.match(self.version):
            return "year_month_day"
        if _SHA_SUFFIXED.search(self.name):
            return "sha_suffixed"
        if self.version and _BUILD_NUM.match(self.version):
            return "build_num"
        return "normal"

    @property
    def segments(self) -> List[str]:
        if self.numeric_version is None:
            return []
        return re.split(r"[.-]", self.numeric_version)

    @property
    def precision(self) -> int:
        return len(self.segments)

    @property
    def comparable_version(self) -> ComparableVersion:
        if self.numeric_version is None:
            raise ValueError(f"Tag {self.name!r} has no comparable version")
        return ComparableVersion(self.numeric_version)

    def same_precision(self, other: Tag) -> bool:
        return self.precision == other.precision

    def same_but_less_precise(self, other: Tag) -> bool:
        """True if this tag is a strict prefix of ``other``, segment by segment."""
        if len(self.segments) >= len(other.segments):
            return False
        return all(mine == theirs for mine, theirs in zip(self.segments, other.segments))

    def comparable_to(self, other: Tag) -> bool:
        if not self.comparable:
            return False

        other_format = other.format
        equal_prefix = self.prefix == other.prefix
        equal_format = self.format == other_format
        if other_format == "sha_suffixed":
            return equal_prefix and equal_format

        return equal_prefix and equal_format and self.suffix == other.suffix
