"""Infrastructure: launching ffmpeg and ffplay.

Implements :class:`~serika_cli.core.protocols.MediaLauncher` on top of
:mod:`asyncio` subprocesses for ASCII playback, and the blocking
"normal" playback through an ffplay window.

Every ``OSError`` raised while spawning is mapped to a
:class:`~serika_cli.exceptions.SerikaError` subclass here.
"""

from __future__ import annotations

import asyncio
import logging
import subprocess
import webbrowser

from serika_cli.exceptions import PlaybackError
from serika_cli.infra.ffmpeg_detector import FFMPEG, FFPLAY, is_windows, not_found_error

logger = logging.getLogger(__name__)

ASCII_FPS: int = 15
ASCII_FPS_WINDOWS: int = 12


def ascii_fps() -> int:
    """Decoder frame rate; Windows consoles get a lighter load."""
    return ASCII_FPS_WINDOWS if is_windows() else ASCII_FPS


def decoder_args(url: str, width: int, height: int, fps: int) -> list[str]:
    """ffmpeg arguments emitting raw RGB24 frames of *width* x *height* on stdout.

    ``-re`` makes ffmpeg read at the native rate, which paces the whole
    pipeline in real time.
    """
    return [
        "-re",
        "-i", url,
        "-vf", f"scale={width}:{height},fps={fps}",
        "-f", "image2pipe",
        "-vcodec", "rawvideo",
        "-pix_fmt", "rgb24",
        "-",
    ]


def audio_args(url: str) -> list[str]:
    """ffplay arguments playing only the audio track of *url*."""
    return ["-nodisp", "-autoexit", "-hide_banner", url]


def player_args(url: str) -> list[str]:
    """ffplay arguments for regular windowed playback."""
    return ["-autoexit", "-hide_banner", url]


class AsyncioMediaLauncher:
    """Concrete :class:`MediaLauncher` spawning ffmpeg / ffplay.

    Neither child reads from the terminal, so raw-mode key handling in
    the parent is not disturbed.
    """

    def __init__(self, ffmpeg: str = FFMPEG, ffplay: str = FFPLAY) -> None:
        self.ffmpeg: str = ffmpeg
        self.ffplay: str = ffplay

    async def start_decoder(
        self, url: str, width: int, height: int, fps: int,
    ) -> asyncio.subprocess.Process:
        """Spawn the ffmpeg decoder with stdout piped.

        Raises
        ------
        FfmpegNotFoundError
            When ffmpeg is not installed.
        PlaybackError
            For any other spawn failure.
        """
        args = decoder_args(url, width, height, fps)
        logger.debug("Starting decoder: %s %s", self.ffmpeg, " ".join(args))
        try:
            return await asyncio.create_subprocess_exec(
                self.ffmpeg,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except FileNotFoundError as exc:
            raise not_found_error(self.ffmpeg, purpose="to use ASCII mode") from exc
        except OSError as exc:
            raise PlaybackError(f"Could not start {self.ffmpeg}: {exc}") from exc

    async def start_audio(self, url: str) -> asyncio.subprocess.Process:
        """Spawn a display-less ffplay for the audio track.

        Raises
        ------
        FfmpegNotFoundError
            When ffplay is not installed.
        PlaybackError
            For any other spawn failure.
        """
        args = audio_args(url)
        logger.debug("Starting audio player: %s %s", self.ffplay, " ".join(args))
        try:
            return await asyncio.create_subprocess_exec(
                self.ffplay,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except FileNotFoundError as exc:
            raise not_found_error(self.ffplay) from exc
        except OSError as exc:
            raise PlaybackError(f"Could not start {self.ffplay}: {exc}") from exc


def play_in_window(url: str, ffplay: str = FFPLAY) -> bool:
    """Play *url* in an ffplay window and block until it closes.

    On Windows a missing ffplay falls back to the default browser.

    Returns
    -------
    bool
        ``True`` when the browser fallback was used.

    Raises
    ------
    FfmpegNotFoundError
        When ffplay is missing on a platform without the fallback.
    PlaybackError
        For any other spawn failure.
    """
    try:
        subprocess.run([ffplay, *player_args(url)], check=False)
    except FileNotFoundError as exc:
        if is_windows():
            logger.info("ffplay not found; opening %s in the browser", url)
            webbrowser.open(url)
            return True
        raise not_found_error(ffplay, purpose="to play videos") from exc
    except OSError as exc:
        raise PlaybackError(f"Error playing video: {exc}") from exc
    return False
