"""Reframing of the decoder's raw byte stream into whole frames.

The decoder writes an uninterrupted RGB24 stream to a pipe, and the
pipe hands it over in chunks of arbitrary size.  This module cuts that
stream back into fixed-size frames.  Bytes that do not yet make up a
whole frame stay pending and are never emitted as a partial frame.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from serika_cli.core.models import FrameBuffer


class FrameAssembler:
    """Accumulate chunks and slice off frames of exactly *frame_size* bytes.

    One instance belongs to one playback session; it is not restartable.
    """

    def __init__(self, frame_size: int) -> None:
        if frame_size <= 0:
            raise ValueError(f"frame_size must be positive, got {frame_size}")
        self._frame_size: int = frame_size
        self._pending: bytearray = bytearray()

    @property
    def frame_size(self) -> int:
        return self._frame_size

    @property
    def pending(self) -> int:
        """Number of buffered bytes that do not yet form a frame."""
        return len(self._pending)

    def feed(self, chunk: bytes) -> list[FrameBuffer]:
        """Append *chunk* and return every frame it completes, in order."""
        self._pending += chunk
        frames: list[FrameBuffer] = []
        size = self._frame_size
        while len(self._pending) >= size:
            frames.append(bytes(self._pending[:size]))
            del self._pending[:size]
        return frames

    def discard(self) -> int:
        """Drop the incomplete remainder; return how many bytes were lost."""
        lost = len(self._pending)
        self._pending.clear()
        return lost


def assemble_frames(
    chunks: Iterable[bytes], frame_size: int,
) -> Iterator[FrameBuffer]:
    """Lazily turn an iterable of byte chunks into whole frames.

    A trailing partial frame is silently dropped when *chunks* ends.
    """
    assembler = FrameAssembler(frame_size)
    for chunk in chunks:
        yield from assembler.feed(chunk)
