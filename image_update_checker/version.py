"""
Orderable versions for image tags.

Tag versions are looser than PEP 440: they may carry an ``_N`` update
number (``17.0.2_8``), ``-N`` build numbers and ``.word`` markers. They are
normalized to a PEP 440 string so that ``packaging`` does the ordering.
"""

from __future__ import annotations

import re
from functools import total_ordering
from typing import Tuple

from packaging import version as pkg_version


_TOKEN = re.compile(r"\d+|[a-z]+")

_PRE_LABELS = {
    "a": "a",
    "alpha": "a",
    "b": "b",
    "beta": "b",
    "c": "rc",
    "rc": "rc",
    "pre": "rc",
    "preview": "rc",
}


def to_pep440(value: str) -> str:
    """Normalize a tag's numeric version to a PEP 440 version string.

    >>> to_pep440("17.0.2_8")
    '17.0.2.post8'
    >>> to_pep440("1.0.rc1")
    '1.0rc1'
    """
    release_part, _, update_part = value.lower().partition("_")
    tokens = _TOKEN.findall(release_part.replace("-", "."))
    if not tokens or not tokens[0].isdigit():
        raise ValueError(f"Not a numeric version: {value!r}")

    release = []
    while tokens and tokens[0].isdigit():
        release.append(str(int(tokens.pop(0))))
    normalized = ".".join(release)

    if tokens:
        # Unknown words still mark a pre-release; they sort lowest.
        label = _PRE_LABELS.get(tokens.pop(0), "dev")
        number = tokens.pop(0) if tokens and tokens[0].isdigit() else "0"
        normalized += f".dev{int(number)}" if label == "dev" else f"{label}{int(number)}"

    if update_part[:1].isdigit():
        match = re.match(r"\d+", update_part)
        normalized += f".post{int(match.group(0))}"

    return normalized


@total_ordering
class ComparableVersion:
    """A tag's numeric version wrapped for ordering.

    ``1.2`` and ``1.2.0`` compare equal; missing segments count as zero.
    """

    __slots__ = ("original", "_version")

    def __init__(self, numeric_version: str) -> None:
        self.original = numeric_version
        self._version = pkg_version.Version(to_pep440(numeric_version))

    @property
    def pep440(self) -> pkg_version.Version:
        return self._version

    @property
    def release(self) -> Tuple[int, ...]:
        return self._version.release

    @property
    def is_prerelease(self) -> bool:
        return self._version.is_prerelease

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ComparableVersion):
            return NotImplemented
        return self._version == other._version

    def __lt__(self, other: ComparableVersion) -> bool:
        if not isinstance(other, ComparableVersion):
            return NotImplemented
        return self._version < other._version

    def __hash__(self) -> int:
        return hash(self._version)

    def __repr__(self) -> str:
        return f"<ComparableVersion('{self.original}')>"

    def __str__(self) -> str:
        return self.original
