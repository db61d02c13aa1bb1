"""requests backed implementation of :class:`~serika_cli.core.protocols.VideoSource`.

This module is the **only** place in the codebase that imports
``requests``.  Transport and decoding failures are caught here and
re-raised as typed :class:`~serika_cli.exceptions.SerikaError`
subclasses — nothing raw escapes the infrastructure boundary.
"""

from __future__ import annotations

import logging
import os
from typing import Any

from serika_cli.exceptions import (
    ApiUnavailableError,
    CatalogFormatError,
    EnvironmentError,
    append_server_hint,
)

logger = logging.getLogger(__name__)

DEFAULT_API_URL: str = "https://serika.video/api"
API_URL_ENV: str = "SERIKA_API_URL"
REQUEST_TIMEOUT: float = 30.0


def resolve_api_url(override: str | None = None) -> str:
    """``--api-url`` beats ``$SERIKA_API_URL`` beats the public default."""
    url = override or os.environ.get(API_URL_ENV) or DEFAULT_API_URL
    return url.rstrip("/")


class SerikaApiClient:
    """Concrete :class:`VideoSource` talking to the Serika REST API.

    Usage::

        client = SerikaApiClient("https://serika.video/api")
        raw_videos = client.fetch_videos()
    """

    def __init__(self, base_url: str, *, timeout: float = REQUEST_TIMEOUT) -> None:
        self.base_url: str = base_url.rstrip("/")
        self.timeout: float = timeout

    def fetch_videos(self) -> list[dict[str, Any]]:
        """``GET {base_url}/videos`` and return its ``videos`` array.

        Raises
        ------
        ApiUnavailableError
            On connection errors, timeouts and HTTP error statuses.
        CatalogFormatError
            When the body is not JSON or lacks a ``videos`` list.
        """
        try:
            import requests
        except ModuleNotFoundError as exc:
            raise EnvironmentError(
                "requests is not installed. Install with: pip install requests",
            ) from exc

        url = f"{self.base_url}/videos"
        logger.debug("GET %s", url)
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.ConnectionError as exc:
            raise ApiUnavailableError(
                f"Could not connect to {self.base_url}",
                hint=append_server_hint(None, self.base_url),
            ) from exc
        except requests.exceptions.Timeout as exc:
            raise ApiUnavailableError(
                f"Timed out after {self.timeout:g}s waiting for {url}",
                hint=append_server_hint(None, self.base_url),
            ) from exc
        except requests.exceptions.HTTPError as exc:
            raise ApiUnavailableError(
                f"Failed to fetch videos: {exc}",
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise ApiUnavailableError(f"Failed to fetch videos: {exc}") from exc

        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise CatalogFormatError(
                "The server did not answer with JSON.",
                hint="Check that the API URL points at the Serika API root.",
            ) from exc

        videos = payload.get("videos") if isinstance(payload, dict) else None
        if not isinstance(videos, list):
            raise CatalogFormatError(
                "Unexpected response: no 'videos' list in the payload.",
            )
        return videos
