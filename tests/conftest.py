"""Shared pytest fixtures and fakes for the serika-cli test suite.

Guidelines
----------
* No internet access in any test.
* No real subprocesses: ffmpeg / ffplay are replaced by fakes or mocks.
* Core tests must be pure — no side effects.
* Async code is driven with ``asyncio.run`` from plain test functions.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from serika_cli.core.models import RenderConfig, Video


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def make_video(**overrides: Any) -> Video:
    defaults: dict[str, Any] = {
        "id": "v1",
        "title": "Test Video",
        "is_live": False,
        "video_url": "https://cdn.serika.video/v1.mp4",
        "dash_url": None,
        "audio_url": None,
        "username": "alice",
    }
    defaults.update(overrides)
    return Video(**defaults)


def solid_frame(config: RenderConfig, r: int, g: int, b: int) -> bytes:
    return bytes((r, g, b)) * (config.width * config.height)


@pytest.fixture
def small_config() -> RenderConfig:
    """8 columns → 2 rows → 48-byte frames."""
    return RenderConfig.for_width(8, " .:-=+*#%@")


# ---------------------------------------------------------------------------
# Fakes for the playback session (must be built inside a running loop)
# ---------------------------------------------------------------------------

class FakeProcess:
    """Stand-in for :class:`asyncio.subprocess.Process`.

    Parameters
    ----------
    chunks:
        Data made available on stdout; ``None`` means no stdout pipe.
    exits:
        When ``True`` the process has already exited (code 0) and its
        stdout ends after *chunks*; otherwise it runs until terminated.
    """

    def __init__(self, chunks: list[bytes] | None = None, *, exits: bool = False) -> None:
        self.stdout: asyncio.StreamReader | None = None
        if chunks is not None:
            self.stdout = asyncio.StreamReader()
            for chunk in chunks:
                self.stdout.feed_data(chunk)
        self._returncode: int | None = None
        self._exited = asyncio.Event()
        self.terminate_calls = 0
        self.kill_calls = 0
        if exits:
            self._finish(0)

    @property
    def returncode(self) -> int | None:
        return self._returncode

    def _finish(self, code: int) -> None:
        self._returncode = code
        if self.stdout is not None and not self.stdout.at_eof():
            self.stdout.feed_eof()
        self._exited.set()

    def terminate(self) -> None:
        self.terminate_calls += 1
        self._finish(-15)

    def kill(self) -> None:
        self.kill_calls += 1
        self._finish(-9)

    async def wait(self) -> int:
        await self._exited.wait()
        assert self._returncode is not None
        return self._returncode


class FakeLauncher:
    """Records launches and hands out pre-built :class:`FakeProcess` objects."""

    def __init__(
        self,
        decoder: FakeProcess | None = None,
        audio: FakeProcess | None = None,
        *,
        decoder_error: Exception | None = None,
        audio_error: Exception | None = None,
    ) -> None:
        self.decoder = decoder
        self.audio = audio
        self.decoder_error = decoder_error
        self.audio_error = audio_error
        self.decoder_calls: list[tuple[str, int, int, int]] = []
        self.audio_calls: list[str] = []

    async def start_decoder(self, url: str, width: int, height: int, fps: int) -> FakeProcess:
        self.decoder_calls.append((url, width, height, fps))
        if self.decoder_error is not None:
            raise self.decoder_error
        assert self.decoder is not None
        return self.decoder

    async def start_audio(self, url: str) -> FakeProcess:
        self.audio_calls.append(url)
        if self.audio_error is not None:
            raise self.audio_error
        assert self.audio is not None
        return self.audio


class FakeKeys:
    """Key listener whose keystrokes are injected with :meth:`press`."""

    def __init__(self, interactive: bool = True) -> None:
        self.interactive = interactive
        self.on_key: Callable[[bytes], None] | None = None
        self.start_calls = 0
        self.stop_calls = 0

    def start(self, on_key: Callable[[bytes], None]) -> bool:
        self.start_calls += 1
        self.on_key = on_key
        return self.interactive

    def stop(self) -> None:
        self.stop_calls += 1

    def press(self, data: bytes) -> None:
        assert self.on_key is not None
        self.on_key(data)
