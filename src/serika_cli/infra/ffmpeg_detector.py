"""Infrastructure: ffmpeg / ffplay detection and platform guidance.

Locates the multimedia executables on the system PATH and provides
platform-specific installation guidance when they are missing.

Rules
-----
* Detection via :func:`shutil.which` only — no subprocess.
* No permanent PATH modification.
* No automatic installation.
* No ``print()`` — callers handle user-facing output.
"""

from __future__ import annotations

import platform
import shutil
from dataclasses import dataclass
from pathlib import Path

from serika_cli.exceptions import FfmpegNotFoundError

FFMPEG: str = "ffmpeg"
FFPLAY: str = "ffplay"


# ---------------------------------------------------------------------------
# Detection result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ToolStatus:
    """Result of an executable detection probe.

    Attributes
    ----------
    name : str
        Executable looked up (``ffmpeg`` or ``ffplay``).
    found : bool
        Whether the executable was located on PATH.
    path : Path | None
        Absolute path to the binary, or ``None``.
    version_hint : str
        Human-readable status string (e.g. ``"found at …"`` or ``"not found"``).
    install_commands : tuple[str, ...]
        Suggested shell commands for installing ffmpeg (which ships
        ffplay) on the current platform.  Empty when the tool is present.
    """

    name: str
    found: bool
    path: Path | None
    version_hint: str
    install_commands: tuple[str, ...]


# ---------------------------------------------------------------------------
# Detection logic
# ---------------------------------------------------------------------------

def detect_tool(name: str) -> ToolStatus:
    """Probe the system for executable *name*.

    Returns a :class:`ToolStatus` regardless of whether the tool is
    present — the caller decides whether to abort or merely warn.
    ``shutil.which`` resolves the ``.exe`` suffix on Windows.
    """
    result = shutil.which(name)

    if result is not None:
        resolved = Path(result).resolve()
        return ToolStatus(
            name=name,
            found=True,
            path=resolved,
            version_hint=f"found at {resolved}",
            install_commands=(),
        )

    return ToolStatus(
        name=name,
        found=False,
        path=None,
        version_hint="not found",
        install_commands=_platform_install_commands(),
    )


def detect_ffmpeg() -> ToolStatus:
    return detect_tool(FFMPEG)


def detect_ffplay() -> ToolStatus:
    return detect_tool(FFPLAY)


def require_tool(name: str, *, purpose: str | None = None) -> Path:
    """Locate *name* or raise :class:`FfmpegNotFoundError`.

    Parameters
    ----------
    name:
        Executable to look up.
    purpose:
        Optional phrase appended to the message, e.g.
        ``"to use ASCII mode"``.
    """
    status = detect_tool(name)
    if not status.found or status.path is None:
        raise not_found_error(name, purpose=purpose)
    return status.path


def not_found_error(name: str, *, purpose: str | None = None) -> FfmpegNotFoundError:
    """Build the error raised when *name* cannot be executed."""
    if purpose:
        message = f"{name} not found. Please install ffmpeg {purpose}."
    else:
        message = f"{name} is not installed or not on PATH."
    hint_lines = ["Install ffmpeg using one of:"]
    hint_lines.extend(f"  {cmd}" for cmd in _platform_install_commands())
    return FfmpegNotFoundError(message, hint="\n".join(hint_lines))


# ---------------------------------------------------------------------------
# Platform-specific install guidance
# ---------------------------------------------------------------------------

def is_windows() -> bool:
    return platform.system().lower() == "windows"


def _platform_install_commands() -> tuple[str, ...]:
    """Return install commands appropriate for the current OS."""
    system = platform.system().lower()
    if system == "windows":
        return (
            "winget install ffmpeg",
            "choco install ffmpeg",
        )
    if system == "linux":
        return (
            "sudo apt install ffmpeg",
            "sudo dnf install ffmpeg",
            "sudo pacman -S ffmpeg",
        )
    if system == "darwin":
        return ("brew install ffmpeg",)
    # Generic guidance.
    return ("Please install ffmpeg from https://ffmpeg.org/download.html",)
