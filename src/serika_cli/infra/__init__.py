"""Infrastructure layer — external system integration.

This layer wraps all interaction with the Serika HTTP API, yt-dlp,
ffmpeg/ffplay, the terminal and the settings file.  Every raw
third-party exception must be caught here and re-raised as a
:class:`~serika_cli.exceptions.SerikaError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from serika_cli.infra.api_client import SerikaApiClient, resolve_api_url
from serika_cli.infra.ffmpeg_detector import ToolStatus, detect_ffmpeg, detect_ffplay
from serika_cli.infra.ffmpeg_merge_provider import FfmpegMergeProvider
from serika_cli.infra.media_processes import AsyncioMediaLauncher, play_in_window
from serika_cli.infra.settings_store import JsonSettingsStore
from serika_cli.infra.terminal import RawKeyListener, supports_ansi
from serika_cli.infra.ytdlp_download_provider import YtDlpDownloadProvider

__all__: list[str] = [
    "AsyncioMediaLauncher",
    "FfmpegMergeProvider",
    "JsonSettingsStore",
    "RawKeyListener",
    "SerikaApiClient",
    "ToolStatus",
    "YtDlpDownloadProvider",
    "detect_ffmpeg",
    "detect_ffplay",
    "play_in_window",
    "resolve_api_url",
    "supports_ansi",
]
