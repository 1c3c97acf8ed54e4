"""
Ignore rules expressed as version ranges.

Accepts both PEP 440 style (``>=1.2, <2``) and the Ruby style used by most
update tooling (``>= 1.2.a, < 2``, ``~> 1.2``). Comma separated constraints
must all hold.

Bounds are compared with the same ordering used to rank tags, so ``> 17.0.2``
covers ``17.0.2_9`` and ``< 2.0`` covers ``2.0.rc1``.
"""

from __future__ import annotations

import operator
import re
from typing import Iterable, List, Tuple

from packaging import version as pkg_version

from .version import ComparableVersion, to_pep440


_CONSTRAINT = re.compile(r"^\s*(?P<op>~>|~=|>=|<=|!=|==|=|>|<)?\s*v?(?P<version>[0-9][^\s,]*)\s*$")

_OPERATORS = {
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
    "==": operator.eq,
    "!=": operator.ne,
}

Bound = Tuple[str, pkg_version.Version]


def _pessimistic_upper(version: pkg_version.Version) -> pkg_version.Version:
    release = version.release
    if len(release) == 1:
        return pkg_version.Version(str(release[0] + 1))
    bumped = list(release[:-1])
    bumped[-1] += 1
    return pkg_version.Version(".".join(str(part) for part in bumped))


def parse_constraint(constraint: str) -> List[Bound]:
    """Translate one constraint into ``(operator, version)`` bounds."""
    match = _CONSTRAINT.match(constraint)
    if not match:
        raise ValueError(f"Invalid version requirement: {constraint!r}")

    op = match.group("op") or "=="
    version = pkg_version.Version(to_pep440(match.group("version")))
    if op in ("~>", "~="):
        return [(">=", version), ("<", _pessimistic_upper(version))]
    if op == "=":
        op = "=="
    return [(op, version)]


class IgnoreRequirement:
    """A version range whose matching tags must not be proposed."""

    def __init__(self, requirement: str) -> None:
        self.requirement = requirement
        constraints = [part for part in requirement.split(",") if part.strip()]
        if not constraints:
            raise ValueError(f"Empty version requirement: {requirement!r}")
        self.bounds: List[Bound] = [bound for part in constraints for bound in parse_constraint(part)]

    def satisfied_by(self, version: ComparableVersion) -> bool:
        return all(_OPERATORS[op](version.pep440, bound) for op, bound in self.bounds)

    def __repr__(self) -> str:
        return f"<IgnoreRequirement({self.requirement!r})>"


def parse_ignore_requirements(ignored_versions: Iterable[str]) -> List[IgnoreRequirement]:
    return [IgnoreRequirement(requirement) for requirement in ignored_versions]
