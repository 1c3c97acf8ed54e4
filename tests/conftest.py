from collections import Counter
from email.utils import format_datetime

import pytest

from image_update_checker.errors import RegistryNotFoundError


class FakeRegistryClient:
    """In-memory registry.

    ``failures`` are raised by ``list_tags`` one per call before the tag
    list is returned. ``published`` maps tag names to release datetimes.
    """

    def __init__(self, tags, digests=None, published=None, failures=None, hostname="registry.hub.docker.com"):
        self.hostname = hostname
        self.tags = list(tags)
        self.digests = digests or {}
        self.published = published or {}
        self.failures = list(failures or [])
        self.calls = Counter()
        self.repositories = []

    def list_tags(self, repository):
        self.calls["list_tags"] += 1
        self.repositories.append(repository)
        if self.failures:
            raise self.failures.pop(0)
        return list(self.tags)

    def manifest_digest(self, repository, tag):
        self.calls["manifest_digest"] += 1
        digest = self.digests.get(tag)
        return f"sha256:{digest}" if digest else None

    def image_digest(self, repository, tag):
        self.calls["image_digest"] += 1
        return f"sha256:config-{tag}"

    def head_blob(self, repository, digest):
        self.calls["head_blob"] += 1
        tag = digest[len("sha256:config-"):]
        released_at = self.published.get(tag)
        if released_at is None:
            raise RegistryNotFoundError(f"blob {digest} not found", status_code=404)
        return {"Last-Modified": format_datetime(released_at, usegmt=True)}


@pytest.fixture
def registry_client():
    return FakeRegistryClient
