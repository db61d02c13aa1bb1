"""ASCII playback session — decoder, audio player, renderer and cancel key.

A :class:`PlaybackSession` runs entirely on one asyncio event loop:

* a reader task forwards chunks of the decoder's stdout into an event
  channel, followed by an ``exited`` event once the decoder is gone;
* the key listener pushes a ``cancel`` event when ``q``/``Q`` or
  Ctrl+C arrives;
* a single consumer loop takes events in order, feeds chunks to the
  :class:`FrameAssembler` and hands whole frames to the
  :class:`PlaybackScheduler`.

Lifecycle::

    IDLE ──run()──▶ PLAYING ──cancel / decoder exit / launch or render error──▶ CLEANING ──▶ RESOLVED

Teardown runs exactly once, whatever triggered it, and never raises:
the caller always gets a :class:`PlaybackResult` back and keeps its
menu loop alive.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from enum import Enum

from serika_cli.core.frame_assembler import FrameAssembler
from serika_cli.core.frame_queue import DEFAULT_CAPACITY, FrameQueue
from serika_cli.core.frame_renderer import FrameRenderer
from serika_cli.core.models import (
    OverflowPolicy,
    PlaybackEnd,
    PlaybackResult,
    PlaybackState,
    RenderConfig,
)
from serika_cli.core.playback_scheduler import PlaybackScheduler
from serika_cli.core.protocols import KeyListener, MediaLauncher, MediaProcess, TextSink
from serika_cli.exceptions import PlaybackError, SerikaError

logger = logging.getLogger(__name__)

INTERRUPT_BYTE: int = 0x03
READ_SIZE: int = 64 * 1024
GRACE_DELAY: float = 0.1
"""Seconds to let the terminal settle after a cancel before prompting again."""
TERMINATE_TIMEOUT: float = 2.0


def is_cancel_key(data: bytes) -> bool:
    """Return ``True`` for Ctrl+C or ``q`` in either case."""
    return any(byte in (INTERRUPT_BYTE, ord("q"), ord("Q")) for byte in data)


class _EventKind(Enum):
    CHUNK = "chunk"
    EXITED = "exited"
    CANCEL = "cancel"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class _Event:
    kind: _EventKind
    data: bytes = b""
    returncode: int | None = None


class PlaybackSession:
    """One ASCII playback of *url*; single use.

    Parameters
    ----------
    url:
        Media URL handed to both the decoder and the audio player.
    config:
        Render geometry and glyph ramp.
    launcher:
        Starts the decoder and audio subprocesses.
    keys:
        Raw keystroke source used for the cancel key.
    out:
        Terminal to paint on.
    fps:
        Frame rate requested from the decoder.
    """

    def __init__(
        self,
        url: str,
        config: RenderConfig,
        launcher: MediaLauncher,
        keys: KeyListener,
        out: TextSink,
        *,
        fps: int = 15,
        queue_capacity: int = DEFAULT_CAPACITY,
        overflow: OverflowPolicy = OverflowPolicy.DROP_OLDEST,
        grace_delay: float = GRACE_DELAY,
    ) -> None:
        self._url: str = url
        self._config: RenderConfig = config
        self._launcher: MediaLauncher = launcher
        self._keys: KeyListener = keys
        self._fps: int = fps
        self._grace_delay: float = grace_delay

        self._assembler = FrameAssembler(config.frame_size)
        self._renderer = FrameRenderer(config, out)
        self._queue = FrameQueue(queue_capacity, overflow)
        self._scheduler = PlaybackScheduler(
            self._queue, self._renderer.paint, on_error=self._on_render_error,
        )

        self._state: PlaybackState = PlaybackState.IDLE
        self._decoder: MediaProcess | None = None
        self._audio: MediaProcess | None = None
        self._events: asyncio.Queue[_Event] | None = None
        self._cancel_requested: bool = False
        self._cleaned_up: bool = False
        self._render_error: Exception | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def scheduler(self) -> PlaybackScheduler:
        return self._scheduler

    async def run(self) -> PlaybackResult:
        """Play until the decoder exits or the user cancels.

        Raises
        ------
        PlaybackError
            If the session has already been run.
        """
        if self._state is not PlaybackState.IDLE:
            raise PlaybackError("A playback session can only be run once.")
        self._state = PlaybackState.PLAYING
        self._events = asyncio.Queue()

        try:
            self._audio = await self._launcher.start_audio(self._url)
        except SerikaError as exc:
            logger.warning("Audio playback unavailable: %s", exc)

        try:
            self._decoder = await self._launcher.start_decoder(
                self._url, self._config.width, self._config.height, self._fps,
            )
        except SerikaError as exc:
            logger.debug("Decoder failed to start", exc_info=True)
            await self._teardown()
            self._state = PlaybackState.RESOLVED
            return self._result(PlaybackEnd.LAUNCH_FAILED, str(exc), exc.hint)

        reader: asyncio.Task[None] | None = None
        end = PlaybackEnd.FINISHED
        try:
            self._start_keys()
            reader = asyncio.create_task(self._pump(self._decoder, self._events))
            end = await self._consume(self._events)
        finally:
            if reader is not None:
                reader.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await reader
            await self._teardown()

        if end is PlaybackEnd.CANCELLED:
            await asyncio.sleep(self._grace_delay)
        self._state = PlaybackState.RESOLVED
        if end is PlaybackEnd.RENDER_FAILED:
            return self._result(end, f"Playback stopped: {self._render_error}")
        return self._result(end)

    def request_cancel(self) -> None:
        """Stop rendering now and ask the consumer loop to tear down."""
        if self._state is not PlaybackState.PLAYING or self._cancel_requested:
            return
        self._cancel_requested = True
        self._scheduler.stop()
        if self._events is not None:
            self._events.put_nowait(_Event(_EventKind.CANCEL))

    # ------------------------------------------------------------------
    # Event sources
    # ------------------------------------------------------------------

    def _start_keys(self) -> None:
        try:
            interactive = self._keys.start(self._on_key)
        except (SerikaError, OSError) as exc:
            logger.warning("Cancel key unavailable: %s", exc)
            return
        if not interactive:
            logger.debug("stdin is not a TTY; cancel key disabled")

    def _on_key(self, data: bytes) -> None:
        if is_cancel_key(data):
            logger.debug("Cancel key received")
            self.request_cancel()

    def _on_render_error(self, exc: Exception) -> None:
        if self._state is not PlaybackState.PLAYING or self._render_error is not None:
            return
        self._render_error = exc
        if self._events is not None:
            self._events.put_nowait(_Event(_EventKind.FAILED))

    async def _pump(self, decoder: MediaProcess, events: asyncio.Queue[_Event]) -> None:
        """Forward decoder output, one chunk in flight at a time."""
        stdout = decoder.stdout
        if stdout is not None:
            while True:
                chunk = await stdout.read(READ_SIZE)
                if not chunk:
                    break
                await events.put(_Event(_EventKind.CHUNK, data=chunk))
                # Wait for the consumer so a blocked queue throttles the pipe.
                await events.join()
        returncode = await decoder.wait()
        await events.put(_Event(_EventKind.EXITED, returncode=returncode))

    # ------------------------------------------------------------------
    # Consumer
    # ------------------------------------------------------------------

    async def _consume(self, events: asyncio.Queue[_Event]) -> PlaybackEnd:
        while True:
            event = await events.get()
            try:
                if event.kind is _EventKind.CANCEL:
                    return PlaybackEnd.CANCELLED
                if event.kind is _EventKind.FAILED:
                    return PlaybackEnd.RENDER_FAILED
                if event.kind is _EventKind.EXITED:
                    logger.debug("Decoder exited with code %s", event.returncode)
                    return PlaybackEnd.FINISHED
                frames = self._assembler.feed(event.data)
                if frames:
                    await self._scheduler.submit(frames)
            finally:
                events.task_done()

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    async def _teardown(self) -> None:
        if self._cleaned_up:
            return
        self._cleaned_up = True
        self._state = PlaybackState.CLEANING

        self._scheduler.stop()
        self._keys.stop()
        await self._terminate(self._decoder)
        await self._terminate(self._audio)
        try:
            self._renderer.restore()
        except (OSError, ValueError) as exc:
            logger.warning("Could not restore the terminal: %s", exc)

        lost = self._assembler.discard()
        if lost:
            logger.debug("Discarded %d bytes of incomplete frame data", lost)

    @staticmethod
    async def _terminate(process: MediaProcess | None) -> None:
        if process is None or process.returncode is not None:
            return
        with contextlib.suppress(ProcessLookupError):
            process.terminate()
        try:
            await asyncio.wait_for(process.wait(), timeout=TERMINATE_TIMEOUT)
        except asyncio.TimeoutError:
            logger.warning("Subprocess ignored SIGTERM; killing it")
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()

    def _result(
        self,
        end: PlaybackEnd,
        message: str | None = None,
        hint: str | None = None,
    ) -> PlaybackResult:
        return PlaybackResult(
            end=end,
            frames_rendered=self._scheduler.rendered,
            frames_dropped=self._queue.dropped,
            message=message,
            hint=hint,
        )
