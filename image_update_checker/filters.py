"""
Candidate filter stages.

Each stage takes the output of the previous one; the update checker runs
them in this order: comparable tags, downgrades, prereleases, ignore rules,
sort, cooldown.
"""

from __future__ import annotations

import logging
from functools import cmp_to_key
from typing import Callable, Iterable, List, Sequence

from .components import compatible_components, extract_tag_components
from .errors import AllVersionsIgnored
from .requirement import IgnoreRequirement
from .tag import Tag


logger = logging.getLogger(__name__)


def comparable_tags(tags: Iterable[Tag], current: Tag, common_components: Sequence[str]) -> List[Tag]:
    """Tags with the same shape and the same flavor components as ``current``."""
    original_components = extract_tag_components(current.name, common_components)
    logger.info("Original tag components: %s", ",".join(original_components))

    return [
        tag
        for tag in tags
        if tag.comparable_to(current)
        and (
            not original_components
            or compatible_components(extract_tag_components(tag.name, common_components), original_components)
        )
    ]


def remove_version_downgrades(tags: Iterable[Tag], current: Tag) -> List[Tag]:
    current_version = current.comparable_version
    return [tag for tag in tags if tag.comparable_version >= current_version]


def remove_prereleases(tags: Iterable[Tag], current: Tag, is_prerelease: Callable[[Tag], bool]) -> List[Tag]:
    if is_prerelease(current):
        return list(tags)
    return [tag for tag in tags if not is_prerelease(tag)]


def filter_lower_versions(tags: Iterable[Tag], current: Tag) -> List[Tag]:
    """Tags strictly newer than ``current``."""
    current_version = current.comparable_version
    return [tag for tag in tags if tag.comparable_version > current_version]


def filter_ignored(
    tags: Sequence[Tag],
    current: Tag,
    ignore_requirements: Sequence[IgnoreRequirement],
    raise_on_ignored: bool = False,
    has_digest_requirements: bool = False,
) -> List[Tag]:
    filtered = [
        tag
        for tag in tags
        if not any(requirement.satisfied_by(tag.comparable_version) for requirement in ignore_requirements)
    ]
    if (
        raise_on_ignored
        and not filter_lower_versions(filtered, current)
        and filter_lower_versions(tags, current)
        and not has_digest_requirements
    ):
        raise AllVersionsIgnored(f"All versions newer than {current.name} are ignored")

    return filtered


def sort_tags(tags: Iterable[Tag], current: Tag) -> List[Tag]:
    """Ascending by version; on ties the tag keeping current precision goes last."""

    def compare(tag_a: Tag, tag_b: Tag) -> int:
        version_a = tag_a.comparable_version
        version_b = tag_b.comparable_version
        if version_a > version_b:
            return 1
        if version_a < version_b:
            return -1
        if tag_a.same_precision(current):
            return 1
        if tag_b.same_precision(current):
            return -1
        return 0

    return sorted(tags, key=cmp_to_key(compare))


def remove_precision_changes(tags: Iterable[Tag], current: Tag) -> List[Tag]:
    return [tag for tag in tags if tag.same_precision(current)]
