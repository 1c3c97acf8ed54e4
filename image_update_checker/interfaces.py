"""
Interfaces for registry access.
"""

from __future__ import annotations

from typing import List, Mapping, Optional, Protocol


class RegistryClient(Protocol):
    """Read-only access to an OCI / Docker v2 registry.

    Implementations raise :class:`~image_update_checker.errors.RegistryError`
    subclasses; the update checker classifies and retries them.
    """

    hostname: str

    def list_tags(self, repository: str) -> List[str]:
        ...

    def manifest_digest(self, repository: str, tag: str) -> Optional[str]:
        ...

    def image_digest(self, repository: str, tag: str) -> Optional[str]:
        ...

    def head_blob(self, repository: str, digest: str) -> Mapping[str, str]:
        ...
