"""
Update checker for a single container image reference.

Given the tag (and optionally digest) an image is pinned to, decide which
tag to move to and which digest goes with it.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Callable, List, Mapping, Optional, Sequence, Tuple

from .components import identify_common_components
from .cooldown import CooldownEngine
from .errors import (
    DependencyFileNotResolvable,
    PrivateSourceAuthenticationFailure,
    PrivateSourceBadResponse,
    PrivateSourceTimedOut,
)
from .filters import (
    comparable_tags,
    filter_ignored,
    remove_prereleases,
    remove_version_downgrades,
    sort_tags,
)
from .interfaces import RegistryClient
from .models import CheckResult, CooldownOptions, Dependency, Requirement
from .reconciler import reconcile_precision
from .registry import DOCKER_HUB_HOSTNAME, RegistrySettings, base_registry, build_registry_client
from .requirement import parse_ignore_requirements
from .session import RegistrySession, ResolutionCache
from .tag import Tag
from .time_utils import utc_now


logger = logging.getLogger(__name__)

_UNSET = object()


class ResolutionState(str, Enum):
    IDLE = "idle"
    FETCHING_TAGS = "fetching_tags"
    ANALYZING_COMPONENTS = "analyzing_components"
    FILTERING = "filtering"
    COOLDOWN_CHECK = "cooldown_check"
    DIGEST_RECONCILIATION = "digest_reconciliation"
    RESOLVED = "resolved"
    NO_UPDATE_FOUND = "no_update_found"
    REGISTRY_AUTH_FAILED = "registry_auth_failed"
    REGISTRY_TIMED_OUT = "registry_timed_out"
    REGISTRY_UNAVAILABLE = "registry_unavailable"


class UpdateChecker:
    """Resolve the newest suitable tag and digest for one dependency."""

    def __init__(
        self,
        dependency: Dependency,
        registry_client: Optional[RegistryClient] = None,
        credentials: Sequence[Mapping[str, str]] = (),
        ignored_versions: Sequence[str] = (),
        raise_on_ignored: bool = False,
        update_cooldown: Optional[CooldownOptions] = None,
        cooldown_enabled: bool = True,
        clock: Optional[Callable[[], datetime]] = None,
        settings: Optional[RegistrySettings] = None,
    ) -> None:
        self.dependency = dependency
        self.credentials = list(credentials)
        self.ignore_requirements = parse_ignore_requirements(ignored_versions)
        self.raise_on_ignored = raise_on_ignored
        self.state = ResolutionState.IDLE

        self.registry_hostname = self._registry_hostname()
        self.registry_client = registry_client or build_registry_client(
            self.registry_hostname, self.credentials, settings
        )
        self.cache = ResolutionCache()
        self.session = RegistrySession(
            self.registry_client,
            self.docker_repo_name,
            hostname=self.registry_hostname,
            using_docker_hub=self.using_docker_hub,
            cache=self.cache,
        )
        self.cooldown = CooldownEngine(
            update_cooldown,
            dependency.name,
            self.session.publication_record,
            clock=clock or utc_now,
            enabled=cooldown_enabled,
        )
        self._updated_digest = _UNSET

    # Public surface

    def latest_version(self) -> str:
        return self.latest_version_from(self._current_version())

    def latest_resolvable_version(self) -> str:
        # Images have no resolvability constraints beyond the tag itself.
        return self.latest_version()

    def latest_resolvable_version_with_no_unlock(self) -> Optional[str]:
        return self.dependency.version

    def up_to_date(self) -> bool:
        if self.dependency.digest_requirements:
            return self.version_up_to_date() and self.digest_up_to_date()
        return self.version_up_to_date()

    def can_update(self) -> bool:
        if self.dependency.digest_requirements:
            return not self.digest_up_to_date()
        return not self.version_up_to_date()

    def updated_digest(self) -> Optional[str]:
        if self._updated_digest is _UNSET:
            if self.latest_tag_from(self._current_version()).is_digest:
                self._updated_digest = self.session.latest_digest()
            else:
                self._updated_digest = self.session.digest_of(self.latest_version())
        return self._updated_digest

    def updated_requirements(self) -> Tuple[Requirement, ...]:
        updated = []
        for requirement in self.dependency.requirements:
            source = requirement.source
            changes = {}
            if source.tag:
                latest = self.latest_version_from(source.tag)
                changes["tag"] = latest
                if source.digest:
                    changes["digest"] = self.session.digest_of(latest)
            elif source.digest:
                changes["digest"] = self.session.latest_digest()
            updated.append(requirement.with_source(**changes) if changes else requirement)
        return tuple(updated)

    def resolve(self) -> CheckResult:
        latest_version = self.latest_version()
        return CheckResult(
            dependency=self.dependency.name,
            current_version=self.dependency.version,
            latest_version=latest_version,
            digest=self.updated_digest(),
            up_to_date=self.up_to_date(),
            requirements=self.updated_requirements(),
        )

    # Registry addressing

    def _registry_hostname(self) -> str:
        for requirement in self.dependency.requirements:
            if requirement.source.registry:
                return requirement.source.registry
        return base_registry(self.credentials)

    @property
    def using_docker_hub(self) -> bool:
        return self.registry_hostname == DOCKER_HUB_HOSTNAME

    @property
    def docker_repo_name(self) -> str:
        name = self.dependency.name
        if not self.using_docker_hub or "/" in name:
            return name
        return f"library/{name}"

    # Resolution

    def _current_version(self) -> str:
        if not self.dependency.version:
            raise ValueError(f"Dependency {self.dependency.name} has no current version")
        return self.dependency.version

    def version_up_to_date(self) -> bool:
        version = self.dependency.version
        if not version:
            return False

        version_tag = Tag(version)
        if not version_tag.comparable:
            return True

        latest_tag = self.latest_tag_from(version)
        return latest_tag.comparable_version <= version_tag.comparable_version

    def digest_up_to_date(self) -> bool:
        updated_digest = self.updated_digest()
        if updated_digest is None:
            return True
        return all(req.source.digest == updated_digest for req in self.dependency.digest_requirements)

    def latest_version_from(self, version: str) -> str:
        return self.latest_tag_from(version).name

    def latest_tag_from(self, version: str) -> Tag:
        if version in self.cache.latest_tags:
            logger.debug("Cache hit: latest tag for %s", version)
            # A cached answer still reports the outcome of its own resolution.
            self.state = self.cache.resolution_states[version]
            return self.cache.latest_tags[version]

        try:
            latest = self.fetch_latest_tag(Tag(version))
        except PrivateSourceAuthenticationFailure:
            self.state = ResolutionState.REGISTRY_AUTH_FAILED
            raise
        except PrivateSourceTimedOut:
            self.state = ResolutionState.REGISTRY_TIMED_OUT
            raise
        except (PrivateSourceBadResponse, DependencyFileNotResolvable):
            self.state = ResolutionState.REGISTRY_UNAVAILABLE
            raise
        self.cache.latest_tags[version] = latest
        self.cache.resolution_states[version] = self.state
        return latest

    def fetch_latest_tag(self, version_tag: Tag) -> Tag:
        if version_tag.is_digest:
            self.state = ResolutionState.FETCHING_TAGS
            latest_digest = self.session.latest_digest()
            if latest_digest:
                self.state = ResolutionState.RESOLVED
                return Tag(latest_digest)

        if not version_tag.comparable:
            self.state = ResolutionState.NO_UPDATE_FOUND
            return version_tag

        self.state = ResolutionState.FETCHING_TAGS
        registry_tags = self.session.tags()

        self.state = ResolutionState.ANALYZING_COMPONENTS
        common_components = identify_common_components(tag.name for tag in registry_tags)

        self.state = ResolutionState.FILTERING
        candidate_tags = self._filter_candidates(registry_tags, version_tag, common_components)

        if not self.cooldown.skipped:
            self.state = ResolutionState.COOLDOWN_CHECK
            candidate_tags = self.cooldown.apply(candidate_tags)

        if not candidate_tags:
            self.state = ResolutionState.NO_UPDATE_FOUND
            logger.info("No update candidates for %s:%s", self.dependency.name, version_tag.name)
            return version_tag

        self.state = ResolutionState.DIGEST_RECONCILIATION
        latest_tag = reconcile_precision(candidate_tags, candidate_tags[-1], version_tag, self.session.digest_of)

        self.state = ResolutionState.RESOLVED
        logger.info("Resolved %s:%s to %s", self.dependency.name, version_tag.name, latest_tag.name)
        return latest_tag

    def _filter_candidates(
        self, registry_tags: Sequence[Tag], version_tag: Tag, common_components: Sequence[str]
    ) -> List[Tag]:
        # Downgrades go first so the prerelease check only looks at newer tags.
        candidate_tags = comparable_tags(registry_tags, version_tag, common_components)
        candidate_tags = remove_version_downgrades(candidate_tags, version_tag)
        candidate_tags = remove_prereleases(candidate_tags, version_tag, self.session.is_prerelease)
        candidate_tags = filter_ignored(
            candidate_tags,
            version_tag,
            self.ignore_requirements,
            raise_on_ignored=self.raise_on_ignored,
            has_digest_requirements=bool(self.dependency.digest_requirements),
        )
        return sort_tags(candidate_tags, version_tag)
