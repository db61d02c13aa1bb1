"""Bounded frame queue with a configurable overflow policy.

The decoder is paced by its real-time read flag, but the terminal may
fall behind.  Frames waiting to be painted are therefore held in a
small FIFO whose behaviour on overflow is chosen by
:class:`~serika_cli.core.models.OverflowPolicy`:

``drop-oldest``
    Evict the oldest waiting frame (favours recency, keeps the picture
    close to the audio).
``drop-newest``
    Refuse the incoming frame (favours completeness of what is queued).
``block``
    Make the producer wait until a frame has been painted
    (backpressure onto the decoder pipe).

The queue is only touched from the event-loop thread, so it needs no
locking.
"""

from __future__ import annotations

import asyncio
from collections import deque

from serika_cli.core.models import FrameBuffer, OverflowPolicy

DEFAULT_CAPACITY: int = 30


class FrameQueue:
    """FIFO of frames awaiting render, bounded to *capacity* entries."""

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        policy: OverflowPolicy = OverflowPolicy.DROP_OLDEST,
    ) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity: int = capacity
        self._policy: OverflowPolicy = policy
        self._frames: deque[FrameBuffer] = deque()
        self._space: asyncio.Event = asyncio.Event()
        self._space.set()
        self._closed: bool = False
        self.dropped: int = 0

    def __len__(self) -> int:
        return len(self._frames)

    def __bool__(self) -> bool:
        return bool(self._frames)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def policy(self) -> OverflowPolicy:
        return self._policy

    @property
    def full(self) -> bool:
        return len(self._frames) >= self._capacity

    @property
    def closed(self) -> bool:
        return self._closed

    def snapshot(self) -> tuple[FrameBuffer, ...]:
        """Current contents, oldest first."""
        return tuple(self._frames)

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def offer(self, frame: FrameBuffer) -> FrameBuffer | None:
        """Enqueue without waiting; return the frame that was dropped, if any.

        Raises
        ------
        asyncio.QueueFull
            Under the ``block`` policy when the queue is full.
        """
        if self._closed:
            self.dropped += 1
            return frame
        if not self.full:
            self._frames.append(frame)
            return None

        if self._policy is OverflowPolicy.DROP_OLDEST:
            evicted = self._frames.popleft()
            self._frames.append(frame)
            self.dropped += 1
            return evicted
        if self._policy is OverflowPolicy.DROP_NEWEST:
            self.dropped += 1
            return frame
        raise asyncio.QueueFull

    async def put(self, frame: FrameBuffer) -> None:
        """Enqueue *frame*, waiting for space only under the ``block`` policy."""
        while self._policy is OverflowPolicy.BLOCK and self.full and not self._closed:
            self._space.clear()
            await self._space.wait()
        self.offer(frame)

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    def pop(self) -> FrameBuffer:
        """Remove and return the oldest frame.

        Raises
        ------
        IndexError
            When the queue is empty.
        """
        frame = self._frames.popleft()
        self._space.set()
        return frame

    def close(self) -> None:
        """Discard queued frames, refuse new ones and release a blocked producer."""
        self._closed = True
        self._frames.clear()
        self._space.set()
