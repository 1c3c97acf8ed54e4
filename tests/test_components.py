import pytest

from image_update_checker.components import (
    compatible_components,
    extract_tag_components,
    identify_common_components,
    tokenize,
    version_related_pattern,
)


def test_tokenize_replaces_update_versions():
    assert tokenize("17.0.2_8-jdk") == ["VERSION", "jdk"]
    assert tokenize("1.2.3-alpine") == ["1", "2", "3", "alpine"]


@pytest.mark.parametrize(
    "part, expected",
    [
        ("12", True),
        ("rc", True),
        ("v1", True),
        ("alpine3", True),
        ("gabcdef1", True),
        ("20240101", True),
        ("slim", False),
        ("alpine", False),
    ],
)
def test_version_related_pattern(part, expected):
    assert version_related_pattern(part) is expected


def test_identify_common_components():
    tags = ["1.2.3-alpine", "1.2.4-slim", "1.2.4", "latest", "1.2.5-alpine3.18"]

    assert identify_common_components(tags) == ["alpine", "slim", "latest"]


def test_identify_common_components_ignores_placeholder():
    assert identify_common_components(["17.0.2_8-jdk", "17.0.3_7-jdk"]) == ["jdk"]


def test_extract_tag_components():
    common = ["alpine", "slim", "latest"]

    assert extract_tag_components("1.2.3-alpine", common) == ["alpine"]
    assert extract_tag_components("1.2.3", common) == []


def test_compatible_components_compares_sets():
    assert compatible_components(["alpine", "slim"], ["slim", "alpine"])
    assert not compatible_components(["alpine"], ["alpine", "slim"])
