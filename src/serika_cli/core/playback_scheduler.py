"""Single-flight pacing of frame rendering on the event loop.

Rendering one frame is synchronous CPU work.  To keep key presses and
pipe reads flowing, the scheduler paints exactly one frame per event
loop callback and re-arms itself with ``loop.call_soon`` while frames
remain, instead of draining the queue in one go.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable

from serika_cli.core.frame_queue import FrameQueue
from serika_cli.core.models import FrameBuffer

logger = logging.getLogger(__name__)


class PlaybackScheduler:
    """Owns the frame queue and drives *paint* one frame at a time.

    Parameters
    ----------
    queue:
        The bounded queue holding frames awaiting render.
    paint:
        Callable rendering a single frame to the terminal.
    on_error:
        Called once with the exception when *paint* fails.  Rendering
        has already stopped by then.
    """

    def __init__(
        self,
        queue: FrameQueue,
        paint: Callable[[FrameBuffer], None],
        *,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        self._queue: FrameQueue = queue
        self._paint: Callable[[FrameBuffer], None] = paint
        self._on_error: Callable[[Exception], None] | None = on_error
        self._in_flight: bool = False
        self._stopped: bool = False
        self._handle: asyncio.Handle | None = None
        self.rendered: int = 0

    @property
    def queue(self) -> FrameQueue:
        return self._queue

    @property
    def in_flight(self) -> bool:
        """Whether a render step is scheduled or running."""
        return self._in_flight

    @property
    def stopped(self) -> bool:
        return self._stopped

    async def submit(self, frames: Iterable[FrameBuffer]) -> None:
        """Queue freshly assembled frames and make sure rendering is running."""
        for frame in frames:
            if self._stopped:
                return
            # Under the block policy, put() waits for render steps to free space.
            self._kick()
            await self._queue.put(frame)
        self._kick()

    def stop(self) -> None:
        """Cancel pending render steps; no frame is painted after this returns."""
        self._stopped = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._in_flight = False
        self._queue.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _kick(self) -> None:
        if self._in_flight or self._stopped or not self._queue:
            return
        self._in_flight = True
        self._handle = asyncio.get_running_loop().call_soon(self._step)

    def _step(self) -> None:
        self._handle = None
        if self._stopped or not self._queue:
            self._in_flight = False
            return

        frame = self._queue.pop()
        try:
            self._paint(frame)
        except OSError as exc:
            # The terminal went away (closed pty, broken pipe).
            logger.warning("Stopping render loop: %s", exc)
            self._fail(exc)
            return
        except Exception as exc:
            logger.error("Could not render frame: %s", exc, exc_info=True)
            self._fail(exc)
            return
        self.rendered += 1

        if self._queue and not self._stopped:
            self._handle = asyncio.get_running_loop().call_soon(self._step)
        else:
            self._in_flight = False

    def _fail(self, exc: Exception) -> None:
        self.stop()
        if self._on_error is not None:
            self._on_error(exc)
