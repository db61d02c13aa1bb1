"""Infrastructure: raw keyboard input and terminal capability checks.

:class:`RawKeyListener` implements
:class:`~serika_cli.core.protocols.KeyListener` by switching stdin to
raw mode (or, on Windows, polling the console) from the running
event loop, so a single keystroke is seen immediately without waiting
for Enter.  Ctrl+C arrives as a plain ``0x03`` byte on every platform.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
from collections.abc import Callable
from typing import Any, TextIO

from serika_cli.exceptions import PlaybackError

logger = logging.getLogger(__name__)

READ_SIZE: int = 32
KEY_POLL_INTERVAL: float = 0.05
CTRL_C: bytes = b"\x03"


def supports_ansi(environ: dict[str, str] | None = None) -> bool:
    """Whether the terminal understands 24-bit ANSI escapes.

    Only legacy Windows consoles are rejected: Windows Terminal sets
    ``WT_SESSION`` and most third-party terminals set ``TERM_PROGRAM``.
    """
    if sys.platform != "win32":
        return True
    env = os.environ if environ is None else environ
    return bool(env.get("WT_SESSION") or env.get("TERM_PROGRAM"))


def raw_input_mode(mode: list[Any]) -> list[Any]:
    """Derive raw *input* settings from a ``termios.tcgetattr`` result.

    Unlike :func:`tty.setraw`, output processing is left alone so that
    ``\\n`` in rendered frames still returns the carriage.
    """
    import termios

    iflag, oflag, cflag, lflag, ispeed, ospeed, cc = mode
    iflag &= ~(termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON)
    lflag &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
    cc = list(cc)
    cc[termios.VMIN] = 1
    cc[termios.VTIME] = 0
    return [iflag, oflag, cflag, lflag, ispeed, ospeed, cc]


def _use_console_polling() -> bool:
    """Windows consoles have no ``termios``; keys are polled via ``msvcrt``."""
    return sys.platform == "win32"


class RawKeyListener:
    """Deliver raw keystrokes from *stream* to a callback.

    On POSIX the stream is switched to raw input and its descriptor is
    watched with ``loop.add_reader``.  On Windows the console is polled
    with ``msvcrt`` every :data:`KEY_POLL_INTERVAL` seconds and Ctrl+C
    is caught with a ``SIGINT`` handler, because the console still
    turns it into a signal.

    ``start`` is a no-op returning ``False`` when *stream* is not a TTY.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream: TextIO = stream if stream is not None else sys.stdin
        self._fd: int | None = None
        self._saved_mode: Any = None
        self._watching: bool = False
        self._polling: bool = False
        self._poll_handle: asyncio.TimerHandle | None = None
        self._saved_sigint: Any = None
        self._sigint_installed: bool = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._on_key: Callable[[bytes], None] | None = None

    @property
    def active(self) -> bool:
        return self._fd is not None or self._polling

    def start(self, on_key: Callable[[bytes], None]) -> bool:
        """Begin delivering keystrokes to *on_key*.

        Raises
        ------
        PlaybackError
            If the terminal could not be switched to raw input.  The
            terminal is left in its original mode.
        """
        if self.active:
            return True
        try:
            if not self._stream.isatty():
                return False
            fd = self._stream.fileno()
        except (AttributeError, OSError, ValueError):
            return False

        self._on_key = on_key
        self._loop = asyncio.get_running_loop()
        if _use_console_polling():
            self._start_console_polling()
            return True
        try:
            import termios
        except ModuleNotFoundError:
            self._loop = None
            self._on_key = None
            return False
        self._start_raw_mode(termios, fd)
        return True

    def stop(self) -> None:
        if self._polling:
            self._stop_console_polling()
        if self._fd is not None:
            self._stop_raw_mode()
        self._loop = None
        self._on_key = None

    # ------------------------------------------------------------------
    # POSIX: raw mode + add_reader
    # ------------------------------------------------------------------

    def _start_raw_mode(self, termios: Any, fd: int) -> None:
        assert self._loop is not None
        try:
            self._saved_mode = termios.tcgetattr(fd)
            self._fd = fd
            termios.tcsetattr(fd, termios.TCSAFLUSH, raw_input_mode(self._saved_mode))
            self._loop.add_reader(fd, self._read)
            self._watching = True
        except (termios.error, OSError, NotImplementedError) as exc:
            self.stop()
            raise PlaybackError(
                f"Could not switch the terminal to raw input: {exc}",
            ) from exc

    def _stop_raw_mode(self) -> None:
        assert self._fd is not None
        fd = self._fd
        self._fd = None
        if self._watching and self._loop is not None:
            self._loop.remove_reader(fd)
        self._watching = False
        import termios

        try:
            termios.tcsetattr(fd, termios.TCSADRAIN, self._saved_mode)
        except termios.error as exc:
            logger.warning("Could not restore terminal mode: %s", exc)
        self._saved_mode = None

    def _read(self) -> None:
        if self._fd is None:
            return
        try:
            data = os.read(self._fd, READ_SIZE)
        except OSError as exc:
            logger.debug("stdin read failed: %s", exc)
            return
        if data:
            self._deliver(data)

    # ------------------------------------------------------------------
    # Windows: msvcrt polling + SIGINT
    # ------------------------------------------------------------------

    def _start_console_polling(self) -> None:
        self._polling = True
        self._schedule_poll()
        try:
            self._saved_sigint = signal.getsignal(signal.SIGINT)
            signal.signal(signal.SIGINT, self._on_sigint)
        except ValueError:
            # Not the main thread; Ctrl+C keeps its default behaviour.
            logger.debug("Cannot install SIGINT handler outside the main thread")
        else:
            self._sigint_installed = True

    def _stop_console_polling(self) -> None:
        self._polling = False
        if self._poll_handle is not None:
            self._poll_handle.cancel()
            self._poll_handle = None
        if self._sigint_installed:
            previous = self._saved_sigint if self._saved_sigint is not None else signal.SIG_DFL
            signal.signal(signal.SIGINT, previous)
            self._sigint_installed = False
        self._saved_sigint = None

    def _schedule_poll(self) -> None:
        assert self._loop is not None
        self._poll_handle = self._loop.call_later(KEY_POLL_INTERVAL, self._poll)

    def _poll(self) -> None:
        import msvcrt

        self._poll_handle = None
        if not self._polling:
            return
        chars: list[str] = []
        while msvcrt.kbhit():
            chars.append(msvcrt.getwch())
        if chars:
            self._deliver("".join(chars).encode("utf-8", errors="replace"))
        if self._polling:
            self._schedule_poll()

    def _on_sigint(self, _signum: int, _frame: Any) -> None:
        if self._loop is not None:
            self._loop.call_soon_threadsafe(self._deliver, CTRL_C)

    def _deliver(self, data: bytes) -> None:
        if self._on_key is not None:
            self._on_key(data)
