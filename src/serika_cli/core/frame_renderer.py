"""Colored ASCII rendering of RGB24 frames.

This is the hot path of ASCII playback: every pixel becomes a 24-bit
foreground escape followed by one glyph.  The output is built from raw
escape strings rather than a styling library because the per-pixel
volume at 15 fps makes anything heavier visibly stutter.

Escape sequences are emitted bit-exact:

* ``ESC[H``            cursor home, first thing in every frame
* ``ESC[38;2;R;G;Bm``  foreground color per pixel
* ``ESC[0m``           reset, last thing in every frame
* ``ESC[?25l`` / ``ESC[?25h``  hide / show cursor around a session
"""

from __future__ import annotations

from serika_cli.core.models import FrameBuffer, RenderConfig
from serika_cli.core.protocols import TextSink

CURSOR_HOME: str = "\x1b[H"
CURSOR_HIDE: str = "\x1b[?25l"
CURSOR_SHOW: str = "\x1b[?25h"
COLOR_RESET: str = "\x1b[0m"
CLEAR_SCREEN: str = "\x1b[2J\x1b[3J\x1b[H"


def glyph_index(brightness_sum: int, ramp_length: int) -> int:
    """Ramp index for a pixel whose R+G+B equals *brightness_sum*.

    Equivalent to ``floor(mean(R, G, B) / 255 * (ramp_length - 1))`` but
    computed in integers, so pure white lands exactly on the last glyph.
    """
    return brightness_sum * (ramp_length - 1) // 765


def build_glyph_table(glyph_ramp: str) -> list[str]:
    """Precompute the glyph for every possible R+G+B sum (0..765)."""
    last = len(glyph_ramp)
    return [glyph_ramp[glyph_index(total, last)] for total in range(766)]


def render_frame(
    frame: FrameBuffer,
    config: RenderConfig,
    glyphs: list[str] | None = None,
) -> str:
    """Render one frame into a single terminal-ready text blob.

    Parameters
    ----------
    frame:
        Exactly ``config.frame_size`` bytes of RGB24 data.
    config:
        Geometry and glyph ramp.
    glyphs:
        Optional table from :func:`build_glyph_table`, to avoid
        rebuilding it for every frame.
    """
    if len(frame) != config.frame_size:
        raise ValueError(
            f"frame has {len(frame)} bytes, expected {config.frame_size}",
        )
    table = glyphs if glyphs is not None else build_glyph_table(config.glyph_ramp)
    width = config.width
    row_bytes = width * 3

    parts: list[str] = [CURSOR_HOME]
    append = parts.append
    for y in range(config.height):
        row_start = y * row_bytes
        for offset in range(row_start, row_start + row_bytes, 3):
            r = frame[offset]
            g = frame[offset + 1]
            b = frame[offset + 2]
            append(f"\x1b[38;2;{r};{g};{b}m{table[r + g + b]}")
        append("\n")
    append(COLOR_RESET)
    return "".join(parts)


class FrameRenderer:
    """Paint frames of one playback session onto a terminal.

    The first :meth:`paint` call of a session also clears the screen and
    hides the cursor; later calls only home the cursor and overdraw.
    """

    def __init__(self, config: RenderConfig, out: TextSink) -> None:
        self._config: RenderConfig = config
        self._out: TextSink = out
        self._glyphs: list[str] = build_glyph_table(config.glyph_ramp)
        self._started: bool = False
        self.frames_painted: int = 0

    @property
    def started(self) -> bool:
        """Whether the session setup (clear + hide cursor) has been written."""
        return self._started

    def paint(self, frame: FrameBuffer) -> None:
        if not self._started:
            self._out.write(CLEAR_SCREEN + CURSOR_HIDE)
            self._started = True
        self._out.write(render_frame(frame, self._config, self._glyphs))
        self._out.flush()
        self.frames_painted += 1

    def restore(self) -> None:
        """Show the cursor again and clear whatever was painted."""
        self._out.write(COLOR_RESET + CURSOR_SHOW + CLEAR_SCREEN)
        self._out.flush()
