import pytest

from image_update_checker.errors import AllVersionsIgnored
from image_update_checker.filters import (
    comparable_tags,
    filter_ignored,
    filter_lower_versions,
    remove_precision_changes,
    remove_prereleases,
    remove_version_downgrades,
    sort_tags,
)
from image_update_checker.requirement import parse_ignore_requirements
from image_update_checker.tag import Tag


def tags(*names):
    return [Tag(name) for name in names]


def names(result):
    return [tag.name for tag in result]


def test_comparable_tags_keeps_matching_flavor():
    registry_tags = tags("1.2.4-alpine", "1.2.4", "1.2.5-slim", "latest")

    result = comparable_tags(registry_tags, Tag("1.2.3-alpine"), ["alpine", "slim", "latest"])

    assert names(result) == ["1.2.4-alpine"]


def test_comparable_tags_without_components():
    registry_tags = tags("1.2.4", "1.2.4-alpine", "latest")

    result = comparable_tags(registry_tags, Tag("1.2.3"), ["alpine", "latest"])

    assert names(result) == ["1.2.4"]


def test_remove_version_downgrades_keeps_current():
    result = remove_version_downgrades(tags("1.2.2", "1.2.3", "1.2.4"), Tag("1.2.3"))

    assert names(result) == ["1.2.3", "1.2.4"]


def test_remove_prereleases():
    candidates = tags("1.2.3", "1.2.4.rc1", "1.2.4")

    def is_prerelease(tag):
        return tag.looks_like_prerelease

    assert names(remove_prereleases(candidates, Tag("1.2.3"), is_prerelease)) == ["1.2.3", "1.2.4"]
    assert names(remove_prereleases(candidates, Tag("1.2.3.rc1"), is_prerelease)) == names(candidates)


def test_filter_lower_versions():
    assert names(filter_lower_versions(tags("1.2.3", "1.2.4"), Tag("1.2.3"))) == ["1.2.4"]


def test_filter_ignored_drops_matching_tags():
    candidates = tags("1.2.3", "1.2.4", "1.2.5")
    ignored = parse_ignore_requirements([">= 1.2.5"])

    assert names(filter_ignored(candidates, Tag("1.2.3"), ignored)) == ["1.2.3", "1.2.4"]


def test_filter_ignored_raises_when_everything_newer_is_ignored():
    candidates = tags("1.2.3", "1.2.4", "1.2.5")
    ignored = parse_ignore_requirements(["> 1.2.3"])

    with pytest.raises(AllVersionsIgnored):
        filter_ignored(candidates, Tag("1.2.3"), ignored, raise_on_ignored=True)


def test_filter_ignored_does_not_raise_for_digest_requirements():
    candidates = tags("1.2.3", "1.2.4")
    ignored = parse_ignore_requirements(["> 1.2.3"])

    result = filter_ignored(candidates, Tag("1.2.3"), ignored, raise_on_ignored=True, has_digest_requirements=True)

    assert names(result) == ["1.2.3"]


def test_filter_ignored_does_not_raise_without_newer_versions():
    candidates = tags("1.2.3")
    ignored = parse_ignore_requirements(["> 1.2.3"])

    assert names(filter_ignored(candidates, Tag("1.2.3"), ignored, raise_on_ignored=True)) == ["1.2.3"]


def test_sort_tags_prefers_current_precision_on_ties():
    current = Tag("1.2")

    assert names(sort_tags(tags("1.3", "1.3.0", "1.2"), current)) == ["1.2", "1.3.0", "1.3"]
    assert names(sort_tags(tags("1.3.0", "1.3", "1.2"), current)) == ["1.2", "1.3.0", "1.3"]


def test_remove_precision_changes():
    assert names(remove_precision_changes(tags("1.3", "1.3.1", "1.4"), Tag("1.2"))) == ["1.3", "1.4"]


def test_remove_version_downgrades_is_idempotent():
    current = Tag("1.2.2")
    candidates = tags("1.2", "1.2.0", "1.2.3_8", "1.2.2", "1.2.2-alpine", "1.1.9")

    once = remove_version_downgrades(candidates, current)

    assert remove_version_downgrades(once, current) == once
    assert names(once) == ["1.2.3_8", "1.2.2", "1.2.2-alpine"]
