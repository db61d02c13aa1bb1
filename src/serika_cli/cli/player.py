"""Playback entry points used by the menu loop.

Normal mode hands the URL to an ffplay window.  ASCII mode runs a
:class:`~serika_cli.core.playback_session.PlaybackSession` on a fresh
event loop and reports how it ended; it never raises for decoder
problems, so the menu loop stays alive.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import TextIO

from serika_cli.cli.console import console
from serika_cli.core.models import PlaybackEnd, PlaybackResult, Settings
from serika_cli.core.playback_session import PlaybackSession
from serika_cli.infra.media_processes import AsyncioMediaLauncher, ascii_fps, play_in_window
from serika_cli.infra.terminal import RawKeyListener, supports_ansi

logger = logging.getLogger(__name__)


def play_video(url: str, settings: Settings, *, out: TextIO | None = None) -> None:
    """Play *url* the way *settings* ask for.

    Raises
    ------
    FfmpegNotFoundError
        When ffplay is missing for normal playback.
    InvalidSettingError
        When the configured ASCII width is unusable.
    """
    if settings.ascii_mode:
        if supports_ansi():
            play_ascii(url, settings, out=out)
            return
        console.print("[yellow]ASCII mode requires Windows Terminal or a compatible terminal.[/yellow]")
        console.print("[yellow]Playing in normal mode instead...[/yellow]")

    console.print(f"[green]Playing video: {url}[/green]")
    console.print("[dim]Press q to quit playback[/dim]")
    if play_in_window(url):
        console.print("[yellow]ffplay not found. Opened video in browser.[/yellow]")


def play_ascii(url: str, settings: Settings, *, out: TextIO | None = None) -> PlaybackResult:
    """Render *url* as colored ASCII art until it ends or ``q`` is pressed."""
    session = PlaybackSession(
        url,
        settings.render_config(),
        AsyncioMediaLauncher(),
        RawKeyListener(),
        out if out is not None else sys.stdout,
        fps=ascii_fps(),
        overflow=settings.overflow_policy,
    )
    result = asyncio.run(session.run())
    logger.debug(
        "Playback ended (%s): %d frames rendered, %d dropped",
        result.end.value,
        result.frames_rendered,
        result.frames_dropped,
    )

    if result.end in (PlaybackEnd.LAUNCH_FAILED, PlaybackEnd.RENDER_FAILED):
        console.error(f"[red]{result.message}[/red]")
        if result.hint:
            console.error(f"[yellow]{result.hint}[/yellow]")
    return result
