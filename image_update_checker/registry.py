"""
Docker Registry HTTP API v2 client built on requests.
"""

from __future__ import annotations

import base64
import logging
import os
import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple
from urllib.parse import urljoin

import requests

from .errors import (
    RegistryAuthenticationError,
    RegistryConnectionError,
    RegistryError,
    RegistryForbiddenError,
    RegistryMalformedResponseError,
    RegistryNotFoundError,
    RegistryServerError,
    RegistryTimeoutError,
    RegistryTooManyRequestsError,
)


logger = logging.getLogger(__name__)

DOCKER_HUB_HOSTNAME = "registry.hub.docker.com"

DEFAULT_OPEN_TIMEOUT_IN_SECONDS = 2
DEFAULT_READ_TIMEOUT_IN_SECONDS = 60
OPEN_TIMEOUT_ENV = "IMAGE_UPDATE_CHECKER_OPEN_TIMEOUT_IN_SECONDS"
READ_TIMEOUT_ENV = "IMAGE_UPDATE_CHECKER_READ_TIMEOUT_IN_SECONDS"

MANIFEST_ACCEPT_HEADER = ", ".join([
    "application/vnd.docker.distribution.manifest.v2+json",
    "application/vnd.docker.distribution.manifest.list.v2+json",
    "application/vnd.oci.image.manifest.v1+json",
    "application/vnd.oci.image.index.v1+json",
])

_CHALLENGE_PARAM = re.compile(r'(\w+)="([^"]*)"')


def _int_from_env(environ: Mapping[str, str], key: str, default: int) -> int:
    value = environ.get(key)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %d", key, value, default)
        return default


@dataclass(frozen=True)
class RegistrySettings:
    """Network settings shared by every request a client makes."""

    open_timeout: int = DEFAULT_OPEN_TIMEOUT_IN_SECONDS
    read_timeout: int = DEFAULT_READ_TIMEOUT_IN_SECONDS
    proxy: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> RegistrySettings:
        environ = os.environ if environ is None else environ
        return cls(
            open_timeout=_int_from_env(environ, OPEN_TIMEOUT_ENV, DEFAULT_OPEN_TIMEOUT_IN_SECONDS),
            read_timeout=_int_from_env(environ, READ_TIMEOUT_ENV, DEFAULT_READ_TIMEOUT_IN_SECONDS),
            proxy=environ.get("HTTPS_PROXY"),
        )

    @property
    def timeout(self) -> Tuple[int, int]:
        return (self.open_timeout, self.read_timeout)


def parse_www_authenticate(header: Optional[str]) -> Optional[Tuple[str, Dict[str, str]]]:
    """Split a ``WWW-Authenticate`` challenge into its scheme and parameters.

    >>> parse_www_authenticate('Bearer realm="https://auth.example/token",service="example"')
    ('bearer', {'realm': 'https://auth.example/token', 'service': 'example'})
    """
    if not header:
        return None
    scheme, _, params = header.strip().partition(" ")
    return scheme.lower(), dict(_CHALLENGE_PARAM.findall(params))


def base_registry(credentials: Sequence[Mapping[str, str]]) -> str:
    """The registry unqualified image names resolve against."""
    for credential in credentials:
        if credential.get("type", "docker_registry") != "docker_registry":
            continue
        if credential.get("replaces-base") and credential.get("registry"):
            return credential["registry"]
    return DOCKER_HUB_HOSTNAME


def credentials_for_registry(
    credentials: Sequence[Mapping[str, str]], hostname: str
) -> Optional[Mapping[str, str]]:
    for credential in credentials:
        if credential.get("type", "docker_registry") != "docker_registry":
            continue
        if credential.get("registry") == hostname:
            return credential
    return None


class DockerRegistryClient:
    """Read-only client for a single registry host."""

    def __init__(
        self,
        hostname: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        settings: Optional[RegistrySettings] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.hostname = hostname
        self.base_url = hostname if hostname.startswith(("http://", "https://")) else f"https://{hostname}"
        self.username = username
        self.password = password
        self.settings = settings or RegistrySettings.from_env()
        self.session = session or requests.Session()
        if self.settings.proxy:
            self.session.proxies["https"] = self.settings.proxy
        self._authorization: Optional[str] = None

    def list_tags(self, repository: str) -> List[str]:
        url: Optional[str] = f"/v2/{repository}/tags/list"
        tags: List[str] = []
        while url:
            response = self._request("GET", url)
            tags.extend(self._json(response).get("tags") or [])
            next_link = response.links.get("next", {}).get("url")
            url = urljoin(self.base_url, next_link) if next_link else None
        logger.debug("Listed %d tags for %s", len(tags), repository)
        return tags

    def manifest_digest(self, repository: str, tag: str) -> Optional[str]:
        response = self._request(
            "HEAD",
            f"/v2/{repository}/manifests/{tag}",
            headers={"Accept": MANIFEST_ACCEPT_HEADER},
        )
        return response.headers.get("Docker-Content-Digest")

    def image_digest(self, repository: str, tag: str) -> Optional[str]:
        """The first content digest referenced by the tag's manifest."""
        response = self._request(
            "GET",
            f"/v2/{repository}/manifests/{tag}",
            headers={"Accept": MANIFEST_ACCEPT_HEADER},
        )
        manifest = self._json(response)
        manifests = manifest.get("manifests")
        if manifests:
            return manifests[0].get("digest")
        config = manifest.get("config") or {}
        return config.get("digest")

    def head_blob(self, repository: str, digest: str) -> Mapping[str, str]:
        response = self._request("HEAD", f"/v2/{repository}/blobs/{digest}", allow_redirects=True)
        return response.headers

    def _request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        allow_redirects: bool = False,
    ) -> requests.Response:
        url = urljoin(self.base_url, url)
        response = self._send(method, url, headers, allow_redirects)
        if response.status_code == 401 and self._authorize(response.headers.get("WWW-Authenticate")):
            response = self._send(method, url, headers, allow_redirects)
        self._raise_for_status(response, url)
        return response

    def _send(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]],
        allow_redirects: bool,
    ) -> requests.Response:
        request_headers = dict(headers or {})
        if self._authorization:
            request_headers["Authorization"] = self._authorization
        logger.debug("%s %s", method, url)
        try:
            return self.session.request(
                method,
                url,
                headers=request_headers,
                timeout=self.settings.timeout,
                allow_redirects=allow_redirects,
            )
        except requests.Timeout as e:
            raise RegistryTimeoutError(f"Timed out talking to {self.hostname}: {e}") from e
        except requests.ConnectionError as e:
            raise RegistryConnectionError(f"Connection to {self.hostname} failed: {e}") from e

    def _authorize(self, challenge: Optional[str]) -> bool:
        """Answer an auth challenge; False if there is nothing we can do."""
        parsed = parse_www_authenticate(challenge)
        if parsed is None:
            return False
        scheme, params = parsed

        if scheme == "basic":
            if not self.username:
                return False
            pair = f"{self.username}:{self.password or ''}".encode()
            self._authorization = f"Basic {base64.b64encode(pair).decode()}"
            return True

        if scheme != "bearer" or "realm" not in params:
            return False

        token_params = {key: params[key] for key in ("service", "scope") if key in params}
        auth = (self.username, self.password or "") if self.username else None
        try:
            response = self.session.get(
                params["realm"],
                params=token_params,
                auth=auth,
                timeout=self.settings.timeout,
            )
        except requests.Timeout as e:
            raise RegistryTimeoutError(f"Timed out fetching a token for {self.hostname}: {e}") from e
        except requests.ConnectionError as e:
            raise RegistryConnectionError(f"Token request for {self.hostname} failed: {e}") from e

        if response.status_code in (401, 403):
            raise RegistryAuthenticationError(
                f"Token request for {self.hostname} was rejected", status_code=response.status_code
            )
        self._raise_for_status(response, params["realm"])
        body = self._json(response)
        token = body.get("token") or body.get("access_token")
        if not token:
            return False
        self._authorization = f"Bearer {token}"
        return True

    @staticmethod
    def _json(response: requests.Response) -> Dict:
        try:
            data = response.json()
        except ValueError as e:
            raise RegistryMalformedResponseError(
                f"Unexpected response body from {response.url}: {e}", body=response.text[:200]
            ) from e
        if not isinstance(data, dict):
            raise RegistryMalformedResponseError(
                f"Unexpected response body from {response.url}", body=response.text[:200]
            )
        return data

    @staticmethod
    def _raise_for_status(response: requests.Response, url: str) -> None:
        status = response.status_code
        if status < 400:
            return
        message = f"{status} {response.reason} for {url}"
        if status == 401:
            raise RegistryAuthenticationError(message, status_code=status)
        if status == 403:
            raise RegistryForbiddenError(message, status_code=status)
        if status == 404:
            raise RegistryNotFoundError(message, status_code=status)
        if status == 429:
            raise RegistryTooManyRequestsError(message, status_code=status)
        if status >= 500:
            raise RegistryServerError(message, status_code=status)
        raise RegistryError(message, status_code=status)


def build_registry_client(
    hostname: str,
    credentials: Sequence[Mapping[str, str]] = (),
    settings: Optional[RegistrySettings] = None,
) -> DockerRegistryClient:
    credential = credentials_for_registry(credentials, hostname) or {}
    return DockerRegistryClient(
        hostname,
        username=credential.get("username"),
        password=credential.get("password"),
        settings=settings,
    )
