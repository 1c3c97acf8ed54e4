"""Tests for the image_update_checker package."""

import pytest


def test_package_import():
    """Test that the package can be imported."""
    import image_update_checker
    assert image_update_checker.__version__ == "0.1.0"


def test_cli_import():
    """Test that CLI module can be imported."""
    from image_update_checker.cli import main
    assert callable(main)


def test_update_checker_import():
    """Test that the update checker is exported at package level."""
    from image_update_checker import UpdateChecker
    assert UpdateChecker is not None


def test_dependency_digest_requirements():
    """Test that digest requirements are picked out of a dependency."""
    from image_update_checker.models import Dependency, Requirement, RequirementSource

    pinned = Requirement(source=RequirementSource(tag="1.2.3", digest="a" * 64))
    floating = Requirement(source=RequirementSource(tag="1.2.3"))
    dependency = Dependency(name="ubuntu", version="1.2.3", requirements=(pinned, floating))

    assert dependency.digest_requirements == (pinned,)


def test_requirement_with_source_keeps_metadata():
    """Test that updating a requirement's source leaves the rest alone."""
    from image_update_checker.models import Requirement, RequirementSource

    requirement = Requirement(
        source=RequirementSource(tag="1.2.3", registry="ghcr.io"),
        file="Dockerfile",
        groups=("build",),
    )
    updated = requirement.with_source(tag="1.2.5")

    assert updated.source == RequirementSource(tag="1.2.5", registry="ghcr.io")
    assert updated.file == "Dockerfile"
    assert updated.groups == ("build",)
    assert requirement.source.tag == "1.2.3"


def test_cooldown_options_globs():
    """Test include and exclude matching for cooldown options."""
    from image_update_checker.models import CooldownOptions

    assert CooldownOptions().included("anything")
    assert not CooldownOptions(exclude=frozenset({"ubuntu"})).included("ubuntu")
    assert CooldownOptions(include=frozenset({"my*"})).included("myorg/api")


def test_parse_http_date():
    """Test Last-Modified parsing with and without RFC 7231 formatting."""
    from datetime import datetime, timezone
    from image_update_checker.time_utils import parse_http_date

    expected = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)

    assert parse_http_date("Wed, 01 May 2024 10:00:00 GMT") == expected
    assert parse_http_date("2024-05-01T10:00:00Z") == expected
    assert parse_http_date(None) is None
    assert parse_http_date("yesterday") is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
