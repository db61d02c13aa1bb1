"""yt-dlp backed implementation of :class:`~serika_cli.core.protocols.DownloadProvider`.

This module is the **only** place in the codebase that invokes the
yt-dlp download machinery.  yt-dlp's generic extractor handles both
progressive mp4 URLs and DASH manifests, and reports progress through
its ``progress_hooks``.  All yt-dlp exceptions are caught here and
re-raised as :class:`~serika_cli.exceptions.DownloadFailedError`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from serika_cli.core.protocols import ProgressCallback
from serika_cli.exceptions import DownloadFailedError, EnvironmentError


class YtDlpDownloadProvider:
    """Concrete :class:`DownloadProvider` backed by the yt-dlp Python API.

    This class satisfies the :class:`~serika_cli.core.protocols.DownloadProvider`
    protocol structurally — no explicit inheritance required.
    """

    @staticmethod
    def _build_opts(
        destination: Path,
        *,
        progress_callback: ProgressCallback | None = None,
    ) -> dict[str, Any]:
        """Return yt-dlp options writing exactly to *destination*.

        The destination name is already sanitised to ``[a-z0-9_]`` so it
        contains no output-template fields.
        """
        hooks: list[ProgressCallback] = []
        if progress_callback is not None:
            hooks.append(progress_callback)

        return {
            "outtmpl": str(destination),
            "quiet": True,
            "no_warnings": True,
            "no_color": True,
            "noprogress": True,
            "progress_hooks": hooks,
            # Manifests with split tracks get muxed when ffmpeg exists.
            "merge_output_format": "mp4",
            "overwrites": True,
        }

    # ------------------------------------------------------------------
    # Protocol method
    # ------------------------------------------------------------------

    def download(
        self,
        url: str,
        destination: Path,
        *,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        """Download *url* into *destination*.

        Raises
        ------
        DownloadFailedError
            For any yt-dlp error during the download.
        """
        opts = self._build_opts(destination, progress_callback=progress_callback)

        try:
            import yt_dlp
            import yt_dlp.utils
        except ModuleNotFoundError as exc:
            raise EnvironmentError(
                "yt-dlp is not installed. Install with: pip install yt-dlp",
            ) from exc

        try:
            with yt_dlp.YoutubeDL(opts) as ydl:
                ydl.download([url])
        except yt_dlp.utils.DownloadError as exc:
            raise DownloadFailedError(
                str(exc),
                hint="Check your network connection or try again later.",
            ) from exc
        except Exception as exc:
            raise DownloadFailedError(
                f"Unexpected yt-dlp download error: {exc}",
            ) from exc
