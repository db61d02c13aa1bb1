"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — preserving the dependency inversion principle.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, Protocol


ProgressCallback = Callable[[dict[str, Any]], None]


class VideoSource(Protocol):
    """Contract for the video listing backend."""

    def fetch_videos(self) -> list[dict[str, Any]]:
        """Return the raw ``videos`` array of the ``/videos`` endpoint.

        Implementations must map all transport exceptions to
        :class:`~serika_cli.exceptions.SerikaError` subclasses.

        Raises
        ------
        ApiUnavailableError
            When the server cannot be reached or answers with an error.
        CatalogFormatError
            When the payload is not the expected JSON shape.
        """
        ...  # pragma: no cover


class DownloadProvider(Protocol):
    """Contract for single-URL download backends (e.g. yt-dlp)."""

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
            When the download fails for any reason.
        """
        ...  # pragma: no cover


class MergeProvider(Protocol):
    """Contract for backends that mux a separate video and audio track."""

    def merge(
        self,
        args: Sequence[str],
        destination: Path,
        *,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        """Run the merge described by ffmpeg *args* writing *destination*.

        Raises
        ------
        FfmpegNotFoundError
            When ffmpeg is not installed.
        DownloadFailedError
            When the merge exits unsuccessfully.
        """
        ...  # pragma: no cover


class MediaProcess(Protocol):
    """The subset of :class:`asyncio.subprocess.Process` playback relies on."""

    stdout: asyncio.StreamReader | None

    @property
    def returncode(self) -> int | None: ...  # pragma: no cover

    def terminate(self) -> None: ...  # pragma: no cover

    def kill(self) -> None: ...  # pragma: no cover

    async def wait(self) -> int: ...  # pragma: no cover


class MediaLauncher(Protocol):
    """Starts the decoder and audio-player subprocesses for one session."""

    async def start_decoder(
        self, url: str, width: int, height: int, fps: int,
    ) -> MediaProcess:
        """Spawn a decoder that writes raw RGB24 frames to its stdout.

        Raises
        ------
        FfmpegNotFoundError
            When the decoder executable is missing.
        """
        ...  # pragma: no cover

    async def start_audio(self, url: str) -> MediaProcess:
        """Spawn a display-less audio player for *url*.

        Raises
        ------
        FfmpegNotFoundError
            When the player executable is missing.
        """
        ...  # pragma: no cover


class KeyListener(Protocol):
    """Delivers raw keystrokes without waiting for a line terminator."""

    def start(self, on_key: Callable[[bytes], None]) -> bool:
        """Begin listening; return ``False`` when input is not interactive."""
        ...  # pragma: no cover

    def stop(self) -> None:
        """Stop listening and restore the previous input mode (idempotent)."""
        ...  # pragma: no cover


class TextSink(Protocol):
    """Anything with ``write``/``flush``, normally ``sys.stdout``."""

    def write(self, text: str, /) -> int: ...  # pragma: no cover

    def flush(self) -> None: ...  # pragma: no cover
