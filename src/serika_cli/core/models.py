"""Domain models for serika-cli.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access and light validation.  They carry zero
I/O, zero dependencies on external packages, and must remain pure
across the entire lifecycle.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from serika_cli.exceptions import InvalidSettingError

FrameBuffer = bytes
"""One frame of raw RGB24 pixels, ``width * height * 3`` bytes, row-major."""


# ---------------------------------------------------------------------------
# Named glyph ramps and download presets
# ---------------------------------------------------------------------------

CHARSETS: dict[str, str] = {
    "standard": " .:-=+*#%@",
    "simple": " .:+@",
    "blocks": " ░▒▓█",
    # Two identical glyphs: every pixel is a full block.
    "solid": "██",
}
"""Glyph ramps ordered from darkest to brightest."""

DEFAULT_CHARSET: str = "standard"

DOWNLOAD_QUALITIES: tuple[str, ...] = ("original", "high", "medium", "low")


class OverflowPolicy(str, Enum):
    """What the frame queue does when a frame arrives while it is full."""

    DROP_OLDEST = "drop-oldest"
    DROP_NEWEST = "drop-newest"
    BLOCK = "block"


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Video:
    """A single entry of the Serika ``/videos`` listing."""

    id: str
    """Server-side identifier (empty when the API omits it)."""

    title: str
    """Human-readable video title."""

    is_live: bool
    """Whether the entry is an ongoing live stream."""

    video_url: str | None
    """Direct media URL (progressive mp4), if any."""

    dash_url: str | None
    """Streaming-manifest URL, if any."""

    audio_url: str | None
    """Separate audio track URL for adaptive uploads, if any."""

    username: str | None
    """Uploader name, or ``None`` when the API omits it."""

    @property
    def playable_url(self) -> str | None:
        """Prefer the direct media URL, else the streaming manifest."""
        return self.video_url or self.dash_url

    @property
    def display_author(self) -> str:
        return self.username or "Unknown"


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def derive_height(width: int) -> int:
    """Terminal rows for *width* columns of 16:9 video.

    ``floor(width * 9/16 * 0.55)`` evaluated exactly in integers; the
    0.55 factor compensates for character cells being taller than wide.
    """
    return width * 495 // 1600


@dataclass(frozen=True, slots=True)
class RenderConfig:
    """Geometry and glyph ramp used to turn frames into text."""

    width: int
    height: int
    glyph_ramp: str

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise InvalidSettingError(
                f"Invalid ASCII frame size {self.width}x{self.height}.",
                hint="ASCII width must be at least 4 columns.",
            )
        if len(self.glyph_ramp) < 2:
            raise InvalidSettingError(
                "A glyph ramp needs at least two characters.",
            )

    @classmethod
    def for_width(cls, width: int, glyph_ramp: str) -> RenderConfig:
        """Build a config whose height is derived from *width*."""
        return cls(width=width, height=derive_height(width), glyph_ramp=glyph_ramp)

    @property
    def frame_size(self) -> int:
        """Bytes per frame: three bytes per pixel."""
        return self.width * self.height * 3


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Settings:
    """User settings persisted by the settings store.

    Loaded once and passed explicitly to whoever needs it; nothing in
    the core reads ambient global state.
    """

    ascii_mode: bool = False
    ascii_width: int = 80
    ascii_charset: str = DEFAULT_CHARSET
    ascii_overflow: str = OverflowPolicy.DROP_OLDEST.value
    download_dir: str = "."
    download_quality: str = "original"
    auto_merge_audio: bool = True

    @property
    def glyph_ramp(self) -> str:
        """Resolve the charset name, falling back to the standard ramp."""
        return CHARSETS.get(self.ascii_charset, CHARSETS[DEFAULT_CHARSET])

    @property
    def overflow_policy(self) -> OverflowPolicy:
        try:
            return OverflowPolicy(self.ascii_overflow)
        except ValueError:
            return OverflowPolicy.DROP_OLDEST

    def render_config(self) -> RenderConfig:
        """Render geometry for ASCII playback.

        Raises
        ------
        InvalidSettingError
            When ``ascii_width`` is too small to yield a single row.
        """
        return RenderConfig.for_width(self.ascii_width, self.glyph_ramp)


# ---------------------------------------------------------------------------
# Playback outcome
# ---------------------------------------------------------------------------

class PlaybackState(str, Enum):
    """Lifecycle of one ASCII playback session."""

    IDLE = "idle"
    PLAYING = "playing"
    CLEANING = "cleaning"
    RESOLVED = "resolved"


class PlaybackEnd(str, Enum):
    """Why a playback session ended."""

    FINISHED = "finished"
    CANCELLED = "cancelled"
    LAUNCH_FAILED = "launch_failed"
    RENDER_FAILED = "render_failed"


@dataclass(frozen=True, slots=True)
class PlaybackResult:
    """Summary returned once a playback session has resolved."""

    end: PlaybackEnd
    frames_rendered: int
    frames_dropped: int
    message: str | None = None
    """User-facing explanation, set when the decoder could not start or
    painting a frame failed."""

    hint: str | None = None
