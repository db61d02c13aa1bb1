"""Tests for the bounded frame queue (core/frame_queue.py).

Coverage:
* Capacity 30 with drop-oldest: the 31st frame evicts the oldest.
* drop-newest refuses the incoming frame.
* block makes the producer wait until a frame is popped.
* close() discards, refuses and releases a blocked producer.
"""

from __future__ import annotations

import asyncio

import pytest

from serika_cli.core.frame_queue import DEFAULT_CAPACITY, FrameQueue
from serika_cli.core.models import OverflowPolicy


def _frames(count: int) -> list[bytes]:
    return [f"frame-{i}".encode() for i in range(count)]


class TestDropOldest:
    def test_default_capacity_is_30(self) -> None:
        assert DEFAULT_CAPACITY == 30
        assert FrameQueue().capacity == 30

    def test_31st_frame_evicts_oldest(self) -> None:
        queue = FrameQueue()
        frames = _frames(31)
        evicted = [queue.offer(frame) for frame in frames]

        assert evicted[:30] == [None] * 30
        assert evicted[30] == frames[0]
        assert len(queue) == 30
        assert queue.snapshot() == tuple(frames[1:])
        assert queue.dropped == 1

    def test_fifo_order(self) -> None:
        queue = FrameQueue(capacity=3)
        for frame in _frames(5):
            queue.offer(frame)
        assert [queue.pop() for _ in range(3)] == [b"frame-2", b"frame-3", b"frame-4"]

    def test_pop_empty_raises(self) -> None:
        with pytest.raises(IndexError):
            FrameQueue().pop()


class TestDropNewest:
    def test_full_queue_refuses_incoming(self) -> None:
        queue = FrameQueue(capacity=2, policy=OverflowPolicy.DROP_NEWEST)
        frames = _frames(3)
        queue.offer(frames[0])
        queue.offer(frames[1])

        assert queue.offer(frames[2]) == frames[2]
        assert queue.snapshot() == (frames[0], frames[1])
        assert queue.dropped == 1


class TestBlock:
    def test_offer_on_full_queue_raises(self) -> None:
        queue = FrameQueue(capacity=1, policy=OverflowPolicy.BLOCK)
        queue.offer(b"a")
        with pytest.raises(asyncio.QueueFull):
            queue.offer(b"b")

    def test_put_waits_for_pop(self) -> None:
        async def scenario() -> tuple[bool, bool, tuple[bytes, ...]]:
            queue = FrameQueue(capacity=1, policy=OverflowPolicy.BLOCK)
            await queue.put(b"a")
            producer = asyncio.create_task(queue.put(b"b"))
            await asyncio.sleep(0)
            blocked = not producer.done()
            queue.pop()
            await asyncio.wait_for(producer, timeout=1)
            return blocked, producer.done(), queue.snapshot()

        blocked, done, contents = asyncio.run(scenario())
        assert blocked
        assert done
        assert contents == (b"b",)

    def test_close_releases_blocked_producer(self) -> None:
        async def scenario() -> FrameQueue:
            queue = FrameQueue(capacity=1, policy=OverflowPolicy.BLOCK)
            await queue.put(b"a")
            producer = asyncio.create_task(queue.put(b"b"))
            await asyncio.sleep(0)
            queue.close()
            await asyncio.wait_for(producer, timeout=1)
            return queue

        queue = asyncio.run(scenario())
        assert queue.closed
        assert len(queue) == 0
        assert queue.dropped == 1


class TestClose:
    def test_close_discards_and_refuses(self) -> None:
        queue = FrameQueue(capacity=4)
        queue.offer(b"a")
        queue.close()

        assert not queue
        assert queue.offer(b"b") == b"b"
        assert len(queue) == 0

    def test_invalid_capacity(self) -> None:
        with pytest.raises(ValueError):
            FrameQueue(capacity=0)
