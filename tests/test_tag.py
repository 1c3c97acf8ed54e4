import pytest

from image_update_checker.tag import Tag


@pytest.mark.parametrize(
    "name, prefix, suffix, numeric_version",
    [
        ("1.2.3", None, None, "1.2.3"),
        ("v1.2.3", None, None, "1.2.3"),
        ("18-slim", None, "-slim", "18"),
        ("1.2.3-alpine", None, "-alpine", "1.2.3"),
        ("jdk-17.0.2_8", "jdk-", None, "17.0.2_8"),
        ("1.0.RC1", None, None, "1.0.rc1"),
    ],
)
def test_tag_parts(name, prefix, suffix, numeric_version):
    tag = Tag(name)

    assert tag.comparable
    assert tag.prefix == prefix
    assert tag.suffix == suffix
    assert tag.numeric_version == numeric_version


def test_non_version_tag_is_not_comparable():
    tag = Tag("latest")

    assert not tag.comparable
    assert not tag.canonical
    assert tag.precision == 0
    with pytest.raises(ValueError):
        tag.comparable_version


def test_digest_tag():
    assert Tag("a" * 64).is_digest
    assert not Tag("1.2.3").is_digest


@pytest.mark.parametrize(
    "name, expected",
    [
        ("1.2.3", "normal"),
        ("18-slim", "build_num"),
        ("2024.01", "year_month"),
        ("20240115", "year_month_day"),
        ("1.2.3-gabcdef1", "sha_suffixed"),
    ],
)
def test_tag_format(name, expected):
    assert Tag(name).format == expected


def test_precision_counts_dot_and_dash_segments():
    assert Tag("1.2").precision == 2
    assert Tag("1.2.3").precision == 3
    assert Tag("jdk-17.0.2_8").precision == 3


def test_canonical_tags():
    assert Tag("1.2.3").canonical
    assert Tag("v1.2.3").canonical
    assert not Tag("1.2.3-alpine").canonical


def test_prerelease_detection():
    assert Tag("1.2.3.rc1").looks_like_prerelease
    assert not Tag("1.2.3").looks_like_prerelease


def test_same_but_less_precise():
    assert Tag("1.3").same_but_less_precise(Tag("1.3.1"))
    assert not Tag("1.2").same_but_less_precise(Tag("1.3.1"))
    assert not Tag("1.2.3").same_but_less_precise(Tag("1.2"))
    assert not Tag("1.3").same_but_less_precise(Tag("1.3"))


def test_comparable_to_requires_matching_shape():
    current = Tag("1.2.3-alpine")

    assert Tag("1.2.4-alpine").comparable_to(current)
    assert not Tag("1.2.4").comparable_to(current)
    assert not Tag("latest").comparable_to(current)
    assert not Tag("2024.01").comparable_to(Tag("1.2.3"))


def test_comparable_version_ordering():
    assert Tag("1.2.10").comparable_version > Tag("1.2.9").comparable_version
    assert Tag("v1.2").comparable_version == Tag("1.2.0").comparable_version


def test_equality_by_name():
    assert Tag("1.2.3") == Tag("1.2.3")
    assert Tag("1.2.3") != Tag("v1.2.3")
    assert len({Tag("1.2.3"), Tag("1.2.3")}) == 1
