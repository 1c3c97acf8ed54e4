"""
Flavor inference over a repository's tag list.

Tokens that recur in tag names but do not carry version information
(``alpine``, ``slim``, ``sdk``...) are treated as flavor components. A
candidate must carry exactly the same components as the current tag.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Iterable, List


_VERSION_PLACEHOLDER = "VERSION"
_UPDATE_VERSION = re.compile(r"\d+\.\d+\.\d+_\d+")
_SEPARATORS = re.compile(r"[-./]")

_VERSION_RELATED_PATTERNS = {
    "number": re.compile(r"^\d+$"),
    "semver": re.compile(r"^\d+\.\d+$"),
    "v_prefix": re.compile(r"^v\d+"),
    "version_marker": re.compile(r"^(rc|jre)$"),
    "prerelease": re.compile(r"^(?=.*\d)(?=.*[a-z])[a-z\d]+$", re.IGNORECASE),
    "sha": re.compile(r"^g[0-9a-f]{5,}$"),
    "timestamp": re.compile(r"^\d{8,14}$"),
    "underscore_parts": re.compile(r"\d+_\d+"),
}


def version_related_pattern(part: str) -> bool:
    return any(pattern.search(part) for pattern in _VERSION_RELATED_PATTERNS.values())


def tokenize(tag_name: str) -> List[str]:
    processed = _UPDATE_VERSION.sub(_VERSION_PLACEHOLDER, tag_name)
    return [part for part in _SEPARATORS.split(processed) if part]


def identify_common_components(tag_names: Iterable[str]) -> List[str]:
    """Return the non-version tokens found across ``tag_names``.

    Order follows first occurrence so results are stable for logging.
    """
    part_counts: Counter = Counter()
    for name in tag_names:
        part_counts.update(tokenize(name))

    return [
        part
        for part in part_counts
        if len(part) > 1 and part != _VERSION_PLACEHOLDER and not version_related_pattern(part)
    ]


def extract_tag_components(tag_name: str, common_components: Iterable[str]) -> List[str]:
    return [
        component
        for component in common_components
        if re.search(rf"\b{re.escape(component)}\b", tag_name)
    ]


def compatible_components(tag_components: Iterable[str], original_components: Iterable[str]) -> bool:
    return set(tag_components) == set(original_components)
