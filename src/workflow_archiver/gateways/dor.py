"""Version lookups against the DOR (Digital Object Repository) service."""

from __future__ import annotations

import logging
import re
from typing import Optional

import httpx

LOGGER = logging.getLogger(__name__)

DEFAULT_VERSION = "1"
CURRENT_VERSION_PATH = "objects/{druid}/versions/current"

_NOT_FOUND_PATTERN = re.compile(r"unable to find .* in (fedora|repository)", re.IGNORECASE)


class VersionResolutionError(RuntimeError):
    """Raised when the current version of an object cannot be determined."""

    def __init__(self, druid: str, message: str) -> None:
        super().__init__(f"Unable to resolve version for {druid}: {message}")
        self.druid = druid


def _is_not_found(response: httpx.Response) -> bool:
    if response.status_code == 404:
        return True
    if 400 <= response.status_code < 500:
        return bool(_NOT_FOUND_PATTERN.search(response.text or ""))
    return False


class DorVersionResolver:
    """Resolve the current version of an object from the DOR service.

    Parameters
    ----------
    base_url:
        Service root, e.g. ``https://dor.example.edu/v1``. Ignored when a
        ``client`` is supplied.
    client:
        Pre-configured ``httpx.Client`` (timeouts, auth, base URL). The
        resolver never closes a client it did not create.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        client: Optional[httpx.Client] = None,
    ) -> None:
        if client is None:
            if not base_url:
                raise ValueError("DorVersionResolver requires base_url or client")
            client = httpx.Client(base_url=base_url.rstrip("/") + "/")
            self._owns_client = True
        else:
            self._owns_client = False
        self._client = client

    def resolve(self, druid: str) -> str:
        """Return the object's current version, defaulting unknown objects to ``"1"``."""

        path = CURRENT_VERSION_PATH.format(druid=druid)
        try:
            response = self._client.get(path)
        except httpx.HTTPError as exc:
            raise VersionResolutionError(druid, f"request failed: {exc!r}") from exc

        if _is_not_found(response):
            LOGGER.warning(
                "DOR has no record of %s (HTTP %s); archiving with version %s",
                druid,
                response.status_code,
                DEFAULT_VERSION,
                extra={"event": "version.fallback", "druid": druid},
            )
            return DEFAULT_VERSION

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise VersionResolutionError(
                druid, f"HTTP {response.status_code}: {response.text.strip()}"
            ) from exc

        version = response.text.strip()
        if not version.isdigit():
            raise VersionResolutionError(druid, f"malformed version body {response.text!r}")
        return version

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "DorVersionResolver":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


__all__ = [
    "CURRENT_VERSION_PATH",
    "DEFAULT_VERSION",
    "DorVersionResolver",
    "VersionResolutionError",
]
