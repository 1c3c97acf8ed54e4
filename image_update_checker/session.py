"""
Registry access for one update check.

Every registry call goes through here: it is retried, its failures are
translated into the errors callers handle, and its result is memoized in
a cache owned by the session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import (
    DependencyFileNotResolvable,
    PrivateSourceAuthenticationFailure,
    PrivateSourceBadResponse,
    PrivateSourceTimedOut,
    RegistryAuthenticationError,
    RegistryError,
    RegistryForbiddenError,
    RegistryMalformedResponseError,
    RegistryNotFoundError,
    RegistryTimeoutError,
)
from .interfaces import RegistryClient
from .models import PublicationRecord
from .retry import DEFAULT_MAX_ATTEMPTS, with_retries
from .tag import Tag
from .time_utils import parse_http_date


logger = logging.getLogger(__name__)

_AUTH_ERRORS = (RegistryAuthenticationError, RegistryForbiddenError)


@dataclass
class ResolutionCache:
    """Memoized registry answers, scoped to one update checker."""

    tags: Optional[List[Tag]] = None
    digests: Dict[str, Optional[str]] = field(default_factory=dict)
    publication_records: Dict[str, Optional[PublicationRecord]] = field(default_factory=dict)
    latest_tags: Dict[str, Tag] = field(default_factory=dict)
    resolution_states: Dict[str, str] = field(default_factory=dict)
    latest_pointer_resolved: bool = False
    latest_pointer: Optional[Tag] = None


class RegistrySession:
    """Retrying, caching view of one repository on one registry."""

    def __init__(
        self,
        client: RegistryClient,
        repository: str,
        hostname: Optional[str] = None,
        using_docker_hub: bool = False,
        cache: Optional[ResolutionCache] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self.client = client
        self.repository = repository
        self.hostname = hostname or getattr(client, "hostname", None)
        self.using_docker_hub = using_docker_hub
        self.cache = cache if cache is not None else ResolutionCache()
        self.max_attempts = max_attempts

    def tags(self) -> List[Tag]:
        if self.cache.tags is not None:
            return self.cache.tags

        try:
            outcome = with_retries(lambda: self.client.list_tags(self.repository), self.max_attempts)
        except _AUTH_ERRORS as e:
            raise PrivateSourceAuthenticationFailure(self.hostname) from e
        except RegistryMalformedResponseError as e:
            raise DependencyFileNotResolvable(
                f"Error while accessing docker image at {self.hostname}"
            ) from e
        except RegistryError as e:
            raise PrivateSourceBadResponse(self.hostname) from e

        if outcome.exhausted:
            error = outcome.error
            # Docker Hub is trusted to be up, so a timeout there is reported
            # as a bad response rather than an unreachable private source.
            if isinstance(error, RegistryTimeoutError) and not self.using_docker_hub:
                raise PrivateSourceTimedOut(self.hostname) from error
            raise PrivateSourceBadResponse(self.hostname) from error

        self.cache.tags = [Tag(name) for name in outcome.value or []]
        logger.info("Found %d tags for %s", len(self.cache.tags), self.repository)
        return self.cache.tags

    def tag_names(self) -> List[str]:
        return [tag.name for tag in self.tags()]

    def digest_of(self, tag_name: str) -> Optional[str]:
        if tag_name in self.cache.digests:
            logger.debug("Cache hit: digest %s", tag_name)
            return self.cache.digests[tag_name]

        digest = self._fetch_digest_of(tag_name)
        self.cache.digests[tag_name] = digest
        return digest

    def _fetch_digest_of(self, tag_name: str) -> Optional[str]:
        try:
            outcome = with_retries(
                lambda: self.client.manifest_digest(self.repository, tag_name), self.max_attempts
            )
        except _AUTH_ERRORS as e:
            raise PrivateSourceAuthenticationFailure(self.hostname) from e
        except RegistryMalformedResponseError:
            logger.info("Digest lookup for %s:%s returned an empty response", self.repository, tag_name)
            return None
        except RegistryError as e:
            raise PrivateSourceBadResponse(self.hostname) from e

        if outcome.exhausted:
            if isinstance(outcome.error, RegistryNotFoundError):
                return None
            raise PrivateSourceBadResponse(self.hostname) from outcome.error

        digest = outcome.value
        if digest and digest.startswith("sha256:"):
            digest = digest[len("sha256:"):]
        return digest or None

    def latest_digest(self) -> Optional[str]:
        if "latest" not in self.tag_names():
            return None
        return self.digest_of("latest")

    def latest_pointer_tag(self) -> Optional[Tag]:
        """The highest canonical tag sharing a digest with ``latest``."""
        if self.cache.latest_pointer_resolved:
            return self.cache.latest_pointer

        pointer = None
        latest_digest = self.latest_digest()
        if latest_digest:
            canonical = sorted(
                (tag for tag in self.tags() if tag.canonical),
                key=lambda tag: tag.comparable_version,
                reverse=True,
            )
            pointer = next((tag for tag in canonical if self.digest_of(tag.name) == latest_digest), None)

        self.cache.latest_pointer = pointer
        self.cache.latest_pointer_resolved = True
        return pointer

    def is_prerelease(self, tag: Tag) -> bool:
        """Lexical prerelease, or newer than what ``latest`` points at."""
        if tag.looks_like_prerelease:
            return True

        pointer = self.latest_pointer_tag()
        if pointer is None:
            return False

        if tag.comparable_version > pointer.comparable_version:
            logger.info(
                "The `latest` tag points to the same image as the `%s` image, so treating `%s` as a "
                "pre-release. The `latest` tag needs to point to `%s` for it to be considered.",
                pointer.name,
                tag.name,
                tag.name,
            )
            return True
        return False

    def publication_record(self, tag: Tag) -> Optional[PublicationRecord]:
        if tag.name in self.cache.publication_records:
            logger.debug("Cache hit: publication record %s", tag.name)
            return self.cache.publication_records[tag.name]

        record = self._fetch_publication_record(tag)
        self.cache.publication_records[tag.name] = record
        return record

    def _fetch_publication_record(self, tag: Tag) -> Optional[PublicationRecord]:
        try:
            digest_outcome = with_retries(
                lambda: self.client.image_digest(self.repository, tag.name), self.max_attempts
            )
            digest = digest_outcome.unwrap()
            if not digest:
                return None

            blob_outcome = with_retries(
                lambda: self.client.head_blob(self.repository, digest), self.max_attempts
            )
            headers = blob_outcome.unwrap()
        except _AUTH_ERRORS as e:
            raise PrivateSourceAuthenticationFailure(self.hostname) from e
        except RegistryError as e:
            logger.warning("Could not determine when %s was published: %s", tag.name, e)
            return None

        released_at = parse_http_date((headers or {}).get("Last-Modified"))
        return PublicationRecord(version=tag.name, released_at=released_at)
