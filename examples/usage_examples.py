#!/usr/bin/env python3
"""
Example script showing how to use the image update checker.
"""

from image_update_checker import (
    CooldownOptions,
    Dependency,
    Requirement,
    RequirementSource,
    UpdateChecker,
)


def example_basic_check():
    """Example: Newest tag for an official image."""
    print("="*60)
    print("Example 1: Basic Check")
    print("="*60)

    dependency = Dependency(
        name="ubuntu",
        version="22.04",
        requirements=(Requirement(source=RequirementSource(tag="22.04")),),
    )
    result = UpdateChecker(dependency).resolve()

    print(f"\nImage: {result.dependency}")
    print(f"Current: {result.current_version}")
    print(f"Latest: {result.latest_version}")
    print(f"Up to date: {result.up_to_date}")


def example_flavored_tag_with_ignores():
    """Example: Keep the -alpine flavor and skip a major version."""
    print("\n" + "="*60)
    print("Example 2: Flavored Tag With Ignore Rules")
    print("="*60)

    dependency = Dependency(
        name="node",
        version="18.12.0-alpine",
        requirements=(Requirement(source=RequirementSource(tag="18.12.0-alpine")),),
    )
    checker = UpdateChecker(dependency, ignored_versions=[">= 21"])

    print(f"\nLatest: {checker.latest_version()}")
    print(f"Can update: {checker.can_update()}")


def example_cooldown_and_digest():
    """Example: Digest-pinned image with a two week cooldown."""
    print("\n" + "="*60)
    print("Example 3: Cooldown With A Pinned Digest")
    print("="*60)

    source = RequirementSource(
        tag="1.25",
        digest="0000000000000000000000000000000000000000000000000000000000000000",
    )
    dependency = Dependency(
        name="nginx",
        version="1.25",
        requirements=(Requirement(source=source, file="Dockerfile"),),
    )
    checker = UpdateChecker(dependency, update_cooldown=CooldownOptions(default_days=14))

    for requirement in checker.updated_requirements():
        print(f"\n{requirement.file}: {requirement.source.tag}@sha256:{requirement.source.digest}")


if __name__ == "__main__":
    import sys

    print("Image Update Checker - Example Usage")
    print("="*60)
    print("\nNOTE: These examples require network access to Docker Hub.")

    try:
        example_basic_check()
        example_flavored_tag_with_ignores()
        example_cooldown_and_digest()

        print("\n" + "="*60)
        print("Examples completed successfully!")
        print("="*60)

    except Exception as e:
        print(f"\nError running examples: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(1)
