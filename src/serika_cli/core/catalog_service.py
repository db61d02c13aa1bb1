"""Core catalog service — fetches the video listing and filters it.

Depends on a :class:`~serika_cli.core.protocols.VideoSource` injected
at construction time (dependency inversion), keeping the core free of
any HTTP imports.

Guarantees
----------
* Pure orchestration — no I/O of its own, no ``print()``.
* Only :class:`~serika_cli.exceptions.SerikaError` subclasses escape.
* Parsing is tolerant: malformed entries are skipped, not fatal.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from serika_cli.core.models import Video
from serika_cli.core.protocols import VideoSource
from serika_cli.exceptions import ApiUnavailableError, SerikaError

logger = logging.getLogger(__name__)


class CatalogService:
    """Stateless service turning the raw listing into :class:`Video` models.

    Parameters
    ----------
    source:
        Any object satisfying the :class:`VideoSource` protocol.
    """

    def __init__(self, source: VideoSource) -> None:
        self._source: VideoSource = source

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def list_videos(self) -> list[Video]:
        """Fetch and parse every video of the listing.

        Raises
        ------
        ApiUnavailableError
            If the backend cannot be reached.
        CatalogFormatError
            If the backend answers with an unexpected payload.
        """
        raw = self._fetch()
        videos = [
            video
            for video in (self._parse_video(entry) for entry in raw)
            if video is not None
        ]
        skipped = len(raw) - len(videos)
        if skipped:
            logger.warning("Skipped %d malformed catalog entries", skipped)
        return videos

    def search(self, query: str) -> list[Video]:
        """Fetch the listing and keep entries matching *query*."""
        return filter_videos(self.list_videos(), query)

    # ------------------------------------------------------------------
    # Provider delegation (safe boundary)
    # ------------------------------------------------------------------

    def _fetch(self) -> list[dict[str, Any]]:
        try:
            return self._source.fetch_videos()
        except SerikaError:
            raise
        except Exception as exc:
            raise ApiUnavailableError(
                f"Unexpected catalog error: {exc}",
            ) from exc

    # ------------------------------------------------------------------
    # Raw-dict → domain-model parser (pure)
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_video(raw: object) -> Video | None:
        if not isinstance(raw, dict):
            return None
        title = raw.get("title")
        if not isinstance(title, str):
            return None

        user = raw.get("userId")
        username = user.get("username") if isinstance(user, dict) else None

        return Video(
            id=str(raw.get("_id") or raw.get("id") or ""),
            title=title,
            is_live=bool(raw.get("isLive", False)),
            video_url=_optional_str(raw.get("videoUrl")),
            dash_url=_optional_str(raw.get("dashUrl")),
            audio_url=_optional_str(raw.get("audioUrl")),
            username=_optional_str(username),
        )


def filter_videos(videos: Sequence[Video], query: str) -> list[Video]:
    """Case-insensitive substring match on title or uploader name.

    An empty (or whitespace-only) query matches everything.
    """
    needle = query.strip().lower()
    if not needle:
        return list(videos)
    return [
        video
        for video in videos
        if needle in video.title.lower() or needle in (video.username or "").lower()
    ]


def _optional_str(value: object) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None
