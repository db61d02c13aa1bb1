"""Custom exception hierarchy for serika-cli.

All exceptions that cross layer boundaries must inherit from
:class:`SerikaError`.  Raw third-party exceptions (requests, yt-dlp,
``OSError`` from subprocess launches) must NEVER propagate beyond the
infrastructure layer — they are caught there and re-raised as a typed
subclass defined here.

Hierarchy
---------
SerikaError
├── ApiUnavailableError
├── CatalogFormatError
├── InvalidSettingError
├── SettingsStoreError
├── PlaybackError
├── DownloadFailedError
├── FfmpegNotFoundError
└── EnvironmentError
"""

from __future__ import annotations


class SerikaError(Exception):
    """Base exception for all serika-cli errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Video catalog ---------------------------------------------------------

class ApiUnavailableError(SerikaError):
    """Raised when the Serika API cannot be reached or answers with an error."""


class CatalogFormatError(SerikaError):
    """Raised when the API answers with a payload we cannot interpret."""


# --- Settings --------------------------------------------------------------

class InvalidSettingError(SerikaError):
    """Raised when a setting value is outside its allowed domain."""


class SettingsStoreError(SerikaError):
    """Raised when the settings file cannot be written."""


# --- Playback / download ---------------------------------------------------

class PlaybackError(SerikaError):
    """Raised when a video cannot be played at all."""


class DownloadFailedError(SerikaError):
    """Raised when a download terminates with an error."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(SerikaError):
    """Raised when a required runtime dependency is not available."""


class FfmpegNotFoundError(SerikaError):
    """Raised when ffmpeg (or ffplay) cannot be located on the system PATH."""


def append_server_hint(hint: str | None, api_url: str) -> str:
    """Append the "is the server running" reminder to an existing hint.

    The reminder is appended only once and preserves the original
    hint content verbatim.
    """
    marker = f"Make sure the Serika server is running at {api_url}"
    if hint is None:
        return marker
    if marker in hint:
        return hint
    return "\n".join((hint, marker))
