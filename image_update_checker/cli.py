"""
Command-line interface for the image update checker.
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict

from .errors import ImageUpdateCheckerError
from .models import CooldownOptions, Dependency, Requirement, RequirementSource
from .update_checker import UpdateChecker


def build_parser():
    parser = argparse.ArgumentParser(
        prog="image-update-checker",
        description="Find the newest suitable tag and digest for a container image"
    )

    parser.add_argument(
        "image",
        help="Image name, e.g. ubuntu or myorg/api"
    )

    parser.add_argument(
        "--tag",
        default=None,
        help="Tag the image is currently pinned to"
    )

    parser.add_argument(
        "--digest",
        default=None,
        help="Digest the image is currently pinned to (hex, without sha256:)"
    )

    parser.add_argument(
        "--registry",
        default=None,
        help="Registry hostname. Default: registry.hub.docker.com"
    )

    parser.add_argument(
        "--ignore",
        action="append",
        default=[],
        metavar="RANGE",
        help="Version range to ignore, e.g. '>= 2.0'. May be repeated"
    )

    parser.add_argument(
        "--raise-on-ignored",
        action="store_true",
        help="Fail when every newer version is ignored"
    )

    parser.add_argument(
        "--cooldown-days",
        type=int,
        default=None,
        help="Only propose tags published at least this many days ago"
    )

    parser.add_argument(
        "--cooldown-include",
        action="append",
        default=[],
        metavar="GLOB",
        help="Apply the cooldown only to matching image names. May be repeated"
    )

    parser.add_argument(
        "--cooldown-exclude",
        action="append",
        default=[],
        metavar="GLOB",
        help="Never apply the cooldown to matching image names. May be repeated"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON"
    )

    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level. Default: WARNING"
    )

    return parser


def build_dependency(args):
    source = RequirementSource(tag=args.tag, digest=args.digest, registry=args.registry)
    return Dependency(
        name=args.image,
        version=args.tag or args.digest,
        requirements=(Requirement(source=source),),
    )


def build_cooldown(args):
    if args.cooldown_days is None:
        return None
    return CooldownOptions(
        default_days=args.cooldown_days,
        include=frozenset(args.cooldown_include),
        exclude=frozenset(args.cooldown_exclude),
    )


def main(argv=None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.tag and not args.digest:
        parser.error("one of --tag or --digest is required")

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    checker = UpdateChecker(
        build_dependency(args),
        ignored_versions=args.ignore,
        raise_on_ignored=args.raise_on_ignored,
        update_cooldown=build_cooldown(args),
    )

    try:
        result = checker.resolve()
    except ImageUpdateCheckerError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps(asdict(result), indent=2, default=str))
        return

    print("=" * 60)
    print(f"Image: {result.dependency}")
    print(f"Registry: {checker.registry_hostname}")
    print(f"Current: {result.current_version}")
    print(f"Latest: {result.latest_version}")
    if result.digest:
        print(f"Digest: sha256:{result.digest}")
    print(f"Up to date: {'yes' if result.up_to_date else 'no'}")
    print("=" * 60)


if __name__ == "__main__":
    main()
