"""``serika doctor`` — environment diagnostics command.

Gathers system information and renders a Rich table summarising
whether the runtime environment satisfies serika-cli's requirements.

This module lives in the CLI layer — it may import from ``infra``
and ``core``, and it renders via Rich.  No business logic resides
here; it purely collects and displays diagnostic data.
"""

from __future__ import annotations

import platform
import sys

from serika_cli.cli import exit_codes
from serika_cli.cli.console import console
from serika_cli.infra.ffmpeg_detector import ToolStatus, detect_ffmpeg, detect_ffplay
from serika_cli.infra.terminal import supports_ansi
from serika_cli.version import __version__


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    status = "[green]OK[/green]" if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", version, status


def _ytdlp_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the yt-dlp version row."""
    try:
        from yt_dlp.version import __version__ as ydl_ver

        return "yt-dlp", ydl_ver, "[green]OK[/green]"
    except ImportError:
        pass

    # Fallback: yt-dlp installed but version submodule unavailable.
    try:
        import yt_dlp  # noqa: F401

        return "yt-dlp", "unknown", "[green]OK[/green]"
    except ImportError:
        return "yt-dlp", "NOT INSTALLED", "[red]FAIL[/red]"


def _requests_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the requests row."""
    try:
        import requests
    except ImportError:
        return "requests", "NOT INSTALLED", "[red]FAIL[/red]"
    return "requests", getattr(requests, "__version__", "unknown"), "[green]OK[/green]"


def _tool_row(status_obj: ToolStatus) -> tuple[str, str, str]:
    if status_obj.found:
        path_str = str(status_obj.path) if status_obj.path else "found"
        return status_obj.name, path_str, "[green]OK[/green]"
    return status_obj.name, "not found", "[yellow]WARN[/yellow]"


def _ffmpeg_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the ffmpeg row."""
    return _tool_row(detect_ffmpeg())


def _ffplay_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the ffplay row."""
    return _tool_row(detect_ffplay())


def _terminal_check() -> tuple[str, str, str]:
    """Return (label, value, status) for 24-bit color support."""
    if supports_ansi():
        return "Terminal", "ANSI true color", "[green]OK[/green]"
    return "Terminal", "no ANSI support (ASCII mode disabled)", "[yellow]WARN[/yellow]"


def _os_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the OS row."""
    system_raw = platform.system()
    system_display = {
        "Windows": "Windows",
        "Linux": "Linux",
        "Darwin": "macOS",
    }.get(system_raw, system_raw)
    release = platform.release()
    machine = platform.machine()
    value = f"{system_display} {release} ({machine})"
    return "OS", value, "[green]OK[/green]"


def _serika_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the serika-cli version row."""
    return "serika-cli", __version__, "[green]OK[/green]"


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    if "FAIL" in status:
        return "FAIL"
    if "WARN" in status:
        return "WARN"
    if "OK" in status:
        return "OK"
    return status


def _print_plain_doctor_table(checks: list[tuple[str, str, str]]) -> None:
    """Render doctor output without Rich."""
    print("\nserika doctor", file=sys.stderr)
    print("=" * 56, file=sys.stderr)
    print(f"{'Component':<12} {'Value':<32} {'Status':<8}", file=sys.stderr)
    print("-" * 56, file=sys.stderr)
    for label, value, status in checks:
        plain_status = _status_plain(status)
        print(f"{label:<12} {value:<32} {plain_status:<8}", file=sys.stderr)
    print(file=sys.stderr)


def _emit(markup: str, plain: str, rich_available: bool) -> None:
    if rich_available:
        console.error(markup)
    else:
        print(plain, file=sys.stderr)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor() -> int:
    """Execute all diagnostic checks and render a summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when all critical checks pass,
        :data:`exit_codes.GENERAL_ERROR` if a critical check fails.
    """
    checks = [
        _serika_version_check(),
        _python_version_check(),
        _requests_version_check(),
        _ytdlp_version_check(),
        _ffmpeg_check(),
        _ffplay_check(),
        _terminal_check(),
        _os_check(),
    ]

    has_failure = any("FAIL" in status for _, _, status in checks)

    rich_available = True
    try:
        from rich.table import Table
    except ModuleNotFoundError:
        rich_available = False

    if rich_available:
        table = Table(
            title="serika doctor",
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
        )
        table.add_column("Component", style="bold", min_width=12)
        table.add_column("Value", min_width=20)
        table.add_column("Status", justify="center", min_width=8)

        for label, value, status in checks:
            table.add_row(label, value, status)

        console.error()
        console.error(table)
        console.error()
    else:
        _print_plain_doctor_table(checks)

    # Show install guidance once when either tool is missing.
    missing = [s for s in (detect_ffmpeg(), detect_ffplay()) if not s.found]
    if missing and missing[0].install_commands:
        names = " and ".join(s.name for s in missing)
        _emit(f"[yellow]{names} not installed.[/yellow]", f"{names} not installed.", rich_available)
        _emit(
            "Install ffmpeg using one of the following commands:\n",
            "Install ffmpeg using one of the following commands:\n",
            rich_available,
        )
        for cmd in missing[0].install_commands:
            _emit(f"  [bold]{cmd}[/bold]", f"  {cmd}", rich_available)
        _emit("", "", rich_available)

    if has_failure:
        _emit("[bold red]Some checks failed.[/bold red]", "Some checks failed.", rich_available)
        return exit_codes.GENERAL_ERROR

    _emit("[bold green]All checks passed.[/bold green]", "All checks passed.", rich_available)
    return exit_codes.SUCCESS
