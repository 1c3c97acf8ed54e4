"""
Core data models for image update checks.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from fnmatch import fnmatchcase
from typing import Any, Dict, FrozenSet, Optional, Tuple


@dataclass(frozen=True)
class PublicationRecord:
    """When a tag was published, as far as the registry can tell."""

    version: str
    released_at: Optional[datetime]
    yanked: bool = False
    latest: bool = False


@dataclass(frozen=True)
class CooldownOptions:
    """Minimum age a release must reach before it is proposed.

    Only ``default_days`` is applied; the semver-level windows are carried
    for configuration compatibility and are not consulted yet.
    """

    default_days: int = 0
    semver_major_days: int = 0
    semver_minor_days: int = 0
    semver_patch_days: int = 0
    include: FrozenSet[str] = frozenset()
    exclude: FrozenSet[str] = frozenset()

    def included(self, dependency_name: str) -> bool:
        if any(fnmatchcase(dependency_name, pattern) for pattern in self.exclude):
            return False
        if not self.include:
            return True
        return any(fnmatchcase(dependency_name, pattern) for pattern in self.include)


@dataclass(frozen=True)
class RequirementSource:
    """Where an image reference points: a tag, a digest, or both."""

    tag: Optional[str] = None
    digest: Optional[str] = None
    registry: Optional[str] = None


@dataclass(frozen=True)
class Requirement:
    """One occurrence of the image in a manifest."""

    source: RequirementSource
    file: Optional[str] = None
    groups: Tuple[str, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def with_source(self, **changes: Any) -> Requirement:
        return replace(self, source=replace(self.source, **changes))


@dataclass(frozen=True)
class Dependency:
    """An image under management and all of its requirements."""

    name: str
    version: Optional[str]
    requirements: Tuple[Requirement, ...] = ()

    @property
    def digest_requirements(self) -> Tuple[Requirement, ...]:
        return tuple(req for req in self.requirements if req.source.digest)


@dataclass(frozen=True)
class CheckResult:
    """Everything an update check decided for one dependency."""

    dependency: str
    current_version: Optional[str]
    latest_version: Optional[str]
    digest: Optional[str]
    up_to_date: bool
    requirements: Tuple[Requirement, ...]
