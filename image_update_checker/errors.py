"""
Error hierarchy for registry access and update resolution.
"""

from __future__ import annotations

from typing import Optional


class ImageUpdateCheckerError(Exception):
    """Base exception for all image-update-checker errors."""


# Transport-level failures raised by registry clients.


class RegistryError(ImageUpdateCheckerError):
    """A registry request failed."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RegistryAuthenticationError(RegistryError):
    """The registry rejected our credentials (HTTP 401)."""


class RegistryForbiddenError(RegistryError):
    """The registry refused access to the repository (HTTP 403)."""


class RegistryNotFoundError(RegistryError):
    """The repository, manifest or blob does not exist (HTTP 404)."""


class RegistryTooManyRequestsError(RegistryError):
    """The registry is rate limiting us (HTTP 429)."""


class RegistryServerError(RegistryError):
    """The registry answered with a 5xx status."""


class RegistryTimeoutError(RegistryError):
    """Connecting to or reading from the registry timed out."""


class RegistryConnectionError(RegistryError):
    """The connection broke before a response was received."""


class RegistryMalformedResponseError(RegistryError):
    """The response body could not be decoded as JSON."""

    def __init__(self, message: str, body: str = "") -> None:
        super().__init__(message)
        self.body = body


# Domain errors surfaced to callers of the update checker.


class PrivateSourceAuthenticationFailure(ImageUpdateCheckerError):
    """Authentication against the registry failed."""

    def __init__(self, source: Optional[str]) -> None:
        super().__init__(
            f"The following source could not be reached as it requires "
            f"authentication (and any provided details were invalid or lacked "
            f"the required permissions): {source}"
        )
        self.source = source


class PrivateSourceTimedOut(ImageUpdateCheckerError):
    """A private registry did not answer in time."""

    def __init__(self, source: Optional[str]) -> None:
        super().__init__(f"The following source timed out: {source}")
        self.source = source


class PrivateSourceBadResponse(ImageUpdateCheckerError):
    """The registry kept answering with errors or unexpected responses."""

    def __init__(self, source: Optional[str]) -> None:
        super().__init__(f"Bad response error while accessing source: {source}")
        self.source = source


class DependencyFileNotResolvable(ImageUpdateCheckerError):
    """The registry answered with something that is not a tag listing."""


class AllVersionsIgnored(ImageUpdateCheckerError):
    """Every newer version was excluded by the ignore rules."""

    def __init__(self, message: str = "All updates for the dependency were ignored") -> None:
        super().__init__(message)
