"""CLI application entry point, menu loop and command routing for serika-cli.

This module is the **sole error boundary** for the entire application.
It catches :class:`~serika_cli.exceptions.SerikaError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via Rich
and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — all work is delegated to the core/service
  and infrastructure layers.
* Failures of a single play or download are reported and the menu loop
  continues; failing to reach the API ends the process with exit code 1.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import logging
import sys

from serika_cli.cli import exit_codes
from serika_cli.cli.console import console
from serika_cli.core.catalog_service import CatalogService, filter_videos
from serika_cli.core.models import Settings, Video
from serika_cli.exceptions import SerikaError
from serika_cli.utils.logging_setup import configure_logging
from serika_cli.version import __version__

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    Sub-commands are not used; the CLI supports:
    * ``serika``           — interactive menu
    * ``serika doctor``    — environment diagnostics
    * ``serika --version``
    """
    parser = argparse.ArgumentParser(
        prog="serika",
        description="Browse, play and download videos from Serika in the terminal.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug information to stderr.",
    )
    parser.add_argument(
        "--api-url",
        default=None,
        help="Serika API root (default: $SERIKA_API_URL or https://serika.video/api).",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default=None,
        help="'doctor' to run diagnostics; omit for the interactive menu.",
    )
    return parser


def _report_error(exc: SerikaError) -> None:
    console.error(f"[bold red]Error:[/bold red] {exc}")
    if exc.hint:
        console.error(f"[yellow]Hint:[/yellow] {exc.hint}")


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _fetch_videos(catalog: CatalogService) -> list[Video]:
    """Fetch the listing behind a spinner."""
    from serika_cli.cli.console import get_rich_console

    with get_rich_console().status("Fetching videos from Serika..."):
        return catalog.list_videos()


def _handle_play(video: Video, settings: Settings) -> None:
    from serika_cli.cli.player import play_video

    url = video.playable_url
    if url is None:
        return
    try:
        play_video(url, settings)
    except SerikaError as exc:
        _report_error(exc)


def _handle_download(video: Video, settings: Settings) -> None:
    """Download *video* with a progress bar; failures are reported, not raised."""
    from serika_cli.cli.progress import RichProgressHook
    from serika_cli.core.download_service import DownloadService
    from serika_cli.infra.ffmpeg_merge_provider import FfmpegMergeProvider
    from serika_cli.infra.ytdlp_download_provider import YtDlpDownloadProvider

    if video.is_live:
        console.print("[yellow]Cannot download live videos.[/yellow]")
        return

    service = DownloadService(YtDlpDownloadProvider(), FfmpegMergeProvider())
    try:
        with RichProgressHook(video.title) as hook:
            path = service.download(video, settings, progress_callback=hook)
    except SerikaError as exc:
        console.error("[red]Download failed[/red]")
        _report_error(exc)
        return

    console.print(f"[green]Downloaded: {path.name}[/green]")
    console.print(f"[dim]Saved to: {path}[/dim]")


def _run_interactive(api_url: str) -> int:
    """Main menu loop; returns when the user picks Exit.

    Flow per iteration:
    1. Browse, Search, Settings or Exit.
    2. Fetch the listing (and filter it for Search).
    3. Pick a video, then Play / Download / Back.
    """
    from serika_cli.cli import menus
    from serika_cli.cli.settings_menu import run_settings_menu
    from serika_cli.infra.api_client import SerikaApiClient
    from serika_cli.infra.settings_store import JsonSettingsStore

    store = JsonSettingsStore()
    settings = store.load()
    catalog = CatalogService(SerikaApiClient(api_url))
    logger.debug("Using API %s, settings %s", api_url, store.path)

    console.print("[bold blue]Welcome to Serika CLI! 📺[/bold blue]")

    while True:
        action = menus.prompt_main_menu()

        if action == "exit":
            console.print("[blue]Goodbye! 👋[/blue]")
            return exit_codes.SUCCESS

        if action == "settings":
            settings = run_settings_menu(settings, store)
            continue

        videos = _fetch_videos(catalog)

        if action == "search":
            query = menus.prompt_search_query()
            videos = filter_videos(videos, query)
            if not videos:
                console.print("[yellow]No videos found matching your query.[/yellow]")
                continue

        video = menus.prompt_video_selection(videos)
        if video is None:
            continue

        if video.playable_url is None:
            console.print("[red]Error: No video URL found for this video.[/red]")
            continue

        video_action = menus.prompt_video_action(video)
        if video_action == "download":
            _handle_download(video, settings)
        elif video_action == "play":
            _handle_play(video, settings)


def _handle_doctor() -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from serika_cli.cli.doctor import run_doctor

    return run_doctor()


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the serika CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    from serika_cli.infra.api_client import resolve_api_url

    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.command is None:
        return _run_interactive(resolve_api_url(args.api_url))

    command: str = args.command
    if command.lower() == "doctor":
        return _handle_doctor()

    parser.print_usage(sys.stderr)
    console.error(f"[bold red]Error:[/bold red] unknown command: {command}")
    return exit_codes.GENERAL_ERROR


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except SerikaError as exc:
        _report_error(exc)
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.error("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.error(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
