"""ffmpeg backed implementation of :class:`~serika_cli.core.protocols.MergeProvider`.

Runs ffmpeg to mux a separate video and audio URL into one file.
ffmpeg reports progress on stderr as ``time=HH:MM:SS.xx``; those
lines are translated into progress-hook dicts shaped like yt-dlp's so
the same progress display can consume both backends::

    {"status": "downloading", "filename": "...", "processed_seconds": 125}
    {"status": "finished", "filename": "..."}
"""

from __future__ import annotations

import logging
import re
import subprocess
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Any

from serika_cli.core.protocols import ProgressCallback
from serika_cli.exceptions import DownloadFailedError
from serika_cli.infra.ffmpeg_detector import FFMPEG, not_found_error

logger = logging.getLogger(__name__)

_TIME_PATTERN = re.compile(r"time=(\d+):(\d+):(\d+)")
_LINE_BREAK = re.compile(rb"[\r\n]")
READ_SIZE: int = 4096
PROGRESS_STEP_SECONDS: int = 5
"""Only report when processed media time advanced by more than this."""


def parse_progress_seconds(line: str) -> int | None:
    """Extract processed media seconds from an ffmpeg stderr line."""
    match = _TIME_PATTERN.search(line)
    if match is None:
        return None
    hours, minutes, seconds = (int(part) for part in match.groups())
    return hours * 3600 + minutes * 60 + seconds


def _stderr_lines(stream: Any) -> Iterator[str]:
    """Yield stderr lines as they arrive.

    ffmpeg ends its stats lines with ``\\r`` and only writes ``\\n`` at
    exit, so the pipe is read in raw chunks rather than by line.
    """
    pending = b""
    for chunk in iter(lambda: stream.read1(READ_SIZE), b""):
        *complete, pending = _LINE_BREAK.split(pending + chunk)
        for part in complete:
            if part:
                yield part.decode("utf-8", errors="replace")
    if pending:
        yield pending.decode("utf-8", errors="replace")


class FfmpegMergeProvider:
    """Concrete :class:`MergeProvider` driving the ffmpeg executable."""

    def __init__(self, ffmpeg: str = FFMPEG) -> None:
        self.ffmpeg: str = ffmpeg

    def merge(
        self,
        args: Sequence[str],
        destination: Path,
        *,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        """Run ``ffmpeg *args`` and wait for it.

        Raises
        ------
        FfmpegNotFoundError
            When ffmpeg is not installed.
        DownloadFailedError
            When ffmpeg cannot be started or exits non-zero.
        """
        command = [self.ffmpeg, *args]
        logger.debug("Running %s", " ".join(command))
        try:
            process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise not_found_error(
                self.ffmpeg, purpose="to download videos with audio",
            ) from exc
        except OSError as exc:
            raise DownloadFailedError(f"Could not start {self.ffmpeg}: {exc}") from exc

        filename = destination.name
        last_reported = 0
        tail: list[str] = []
        assert process.stderr is not None
        with process.stderr:
            for line in _stderr_lines(process.stderr):
                tail = (tail + [line])[-5:]
                seconds = parse_progress_seconds(line)
                if seconds is None or progress_callback is None:
                    continue
                if seconds > last_reported + PROGRESS_STEP_SECONDS:
                    last_reported = seconds
                    progress_callback({
                        "status": "downloading",
                        "filename": filename,
                        "processed_seconds": seconds,
                    })
        returncode = process.wait()

        if returncode != 0:
            raise DownloadFailedError(
                f"ffmpeg exited with code {returncode}",
                hint="\n".join(tail) if tail else None,
            )
        if progress_callback is not None:
            progress_callback({"status": "finished", "filename": filename})
