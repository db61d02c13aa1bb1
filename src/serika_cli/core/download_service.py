"""Core download service — orchestrates saving a video to disk.

Two backends are injected at construction time:

* a :class:`~serika_cli.core.protocols.DownloadProvider` for videos
  served from a single URL (progressive file or streaming manifest);
* a :class:`~serika_cli.core.protocols.MergeProvider` for uploads with
  a separate audio track, which ffmpeg muxes into one mp4.

This service is responsible for:

* Building the target filename and the ffmpeg argument list.
* Choosing the backend.
* Ensuring only :class:`~serika_cli.exceptions.SerikaError` subclasses
  escape.

Guarantees
----------
* No ``print()``, no network access of its own.
* Partial output is removed when a backend fails.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from serika_cli.core.models import Settings, Video
from serika_cli.core.protocols import DownloadProvider, MergeProvider, ProgressCallback
from serika_cli.exceptions import DownloadFailedError, SerikaError

logger = logging.getLogger(__name__)

# quality -> ffmpeg encoding arguments
QUALITY_ARGS: dict[str, tuple[str, ...]] = {
    "original": ("-c", "copy"),
    "high": ("-c:v", "libx264", "-crf", "18", "-c:a", "aac", "-b:a", "192k"),
    "medium": ("-c:v", "libx264", "-crf", "23", "-c:a", "aac", "-b:a", "128k"),
    "low": ("-c:v", "libx264", "-crf", "28", "-c:a", "aac", "-b:a", "96k"),
}

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-z0-9]", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class DownloadPlan:
    """Everything needed to run one download."""

    video_url: str
    audio_url: str | None
    destination: Path
    merge_args: tuple[str, ...] | None
    """ffmpeg arguments when muxing separate tracks, else ``None``."""

    @property
    def merges_audio(self) -> bool:
        return self.merge_args is not None


class DownloadService:
    """Stateless service that drives the download pipeline.

    Parameters
    ----------
    provider:
        Backend for single-URL downloads.
    merger:
        Backend for muxing separate video and audio tracks.
    """

    def __init__(self, provider: DownloadProvider, merger: MergeProvider) -> None:
        self._provider: DownloadProvider = provider
        self._merger: MergeProvider = merger

    # ------------------------------------------------------------------
    # Pure helpers
    # ------------------------------------------------------------------

    @staticmethod
    def build_filename(title: str) -> str:
        """``"My Video!"`` → ``"my_video_.mp4"``."""
        return f"{_UNSAFE_FILENAME_CHARS.sub('_', title).lower()}.mp4"

    @staticmethod
    def resolve_directory(download_dir: str) -> Path:
        """Expand a leading ``~`` to the home directory."""
        return Path(download_dir).expanduser()

    @staticmethod
    def build_merge_args(
        video_url: str,
        audio_url: str,
        quality: str,
        destination: Path,
    ) -> tuple[str, ...]:
        """ffmpeg arguments muxing *video_url* and *audio_url* into *destination*.

        Unknown qualities add no encoding options (ffmpeg defaults).
        """
        return (
            "-i", video_url,
            "-i", audio_url,
            *QUALITY_ARGS.get(quality, ()),
            "-y", str(destination),
        )

    def plan(self, video: Video, settings: Settings) -> DownloadPlan:
        """Decide where and how *video* is saved.

        Raises
        ------
        DownloadFailedError
            For live streams and entries without any media URL.
        """
        if video.is_live:
            raise DownloadFailedError("Cannot download live videos.")
        video_url = video.playable_url
        if video_url is None:
            raise DownloadFailedError(
                f"No video URL found for {video.title!r}.",
            )

        destination = self.resolve_directory(settings.download_dir) / self.build_filename(
            video.title,
        )
        audio_url = video.audio_url
        merge_args: tuple[str, ...] | None = None
        if audio_url and audio_url != video_url and settings.auto_merge_audio:
            merge_args = self.build_merge_args(
                video_url, audio_url, settings.download_quality, destination,
            )
        return DownloadPlan(
            video_url=video_url,
            audio_url=audio_url,
            destination=destination,
            merge_args=merge_args,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def download(
        self,
        video: Video,
        settings: Settings,
        *,
        progress_callback: ProgressCallback | None = None,
    ) -> Path:
        """Download *video* and return the path of the saved file.

        Raises
        ------
        DownloadFailedError
            When the download fails for any reason.
        FfmpegNotFoundError
            When merging is required but ffmpeg is missing.
        """
        plan = self.plan(video, settings)
        try:
            plan.destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DownloadFailedError(
                f"Cannot create download directory: {exc}",
                hint="Change the download directory in Settings.",
            ) from exc

        try:
            if plan.merge_args is not None:
                logger.debug("Merging %s + %s", plan.video_url, plan.audio_url)
                self._merger.merge(
                    plan.merge_args,
                    plan.destination,
                    progress_callback=progress_callback,
                )
            else:
                logger.debug("Downloading %s", plan.video_url)
                self._provider.download(
                    plan.video_url,
                    plan.destination,
                    progress_callback=progress_callback,
                )
        except SerikaError:
            _remove_partial(plan.destination)
            raise
        except Exception as exc:
            _remove_partial(plan.destination)
            raise DownloadFailedError(
                f"Unexpected download error: {exc}",
            ) from exc
        return plan.destination


def _remove_partial(path: Path) -> None:
    # yt-dlp writes to "<name>.part" until the download completes.
    for candidate in (path, path.with_name(path.name + ".part")):
        try:
            candidate.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove partial file %s: %s", candidate, exc)
