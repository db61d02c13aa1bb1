"""Rich-based progress display driven by download progress hooks.

Both download backends report through the same callback shape:

* yt-dlp calls its ``progress_hooks`` with byte counters
  (``downloaded_bytes``, ``total_bytes`` / ``total_bytes_estimate``);
* the ffmpeg merge backend reports ``processed_seconds`` of media time
  because the final size is unknown while muxing.

Design
------
* The :class:`RichProgressHook` manages a Rich Progress context.
* :meth:`__call__` is the callback handed to the download service.
* Shutdown-safe: if the progress bar is already stopped, calls are
  silently ignored.
"""

from __future__ import annotations

from typing import Any

from serika_cli.cli.console import get_rich_console
from serika_cli.exceptions import EnvironmentError


class RichProgressHook:
    """Callable progress-hook adapter for Rich.

    Usage::

        with RichProgressHook("My video") as hook:
            download_service.download(video, settings, progress_callback=hook)
    """

    def __init__(self, title: str = "Downloading") -> None:
        try:
            from rich.progress import (
                BarColumn,
                DownloadColumn,
                Progress,
                SpinnerColumn,
                TextColumn,
                TimeRemainingColumn,
                TransferSpeedColumn,
            )
        except ModuleNotFoundError as exc:
            raise EnvironmentError(
                "rich is not installed. Install with: pip install rich",
            ) from exc

        self._progress: Any = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=get_rich_console(),
            transient=False,
        )
        self._title: str = _shorten(title)
        self._task_id: int | None = None
        self._started: bool = False

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> RichProgressHook:
        self.start()
        return self

    def __exit__(self, *_args: object) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the Rich progress display."""
        if not self._started:
            self._progress.start()
            self._started = True

    def stop(self) -> None:
        """Stop the Rich progress display (idempotent)."""
        if self._started:
            self._progress.stop()
            self._started = False

    # ------------------------------------------------------------------
    # Hook callback
    # ------------------------------------------------------------------

    def __call__(self, d: dict[str, Any]) -> None:
        """Progress-hook callback.

        Parameters
        ----------
        d:
            A dict with at least a ``"status"`` key: ``"downloading"``,
            ``"finished"`` or ``"error"``.
        """
        if not self._started:
            return

        status: str = d.get("status", "")

        if status == "downloading":
            self._handle_downloading(d)
        elif status == "finished":
            self._handle_finished()

    # ------------------------------------------------------------------
    # Internal handlers
    # ------------------------------------------------------------------

    def _ensure_task(self, total: int | None) -> int:
        if self._task_id is None:
            self._task_id = self._progress.add_task(
                f"Downloading: {self._title}",
                total=total,
            )
        return self._task_id

    def _handle_downloading(self, d: dict[str, Any]) -> None:
        """Update the bar from byte counters or processed media time."""
        processed = _safe_int(d.get("processed_seconds"))
        if processed is not None:
            task_id = self._ensure_task(None)
            minutes, seconds = divmod(processed, 60)
            self._progress.update(
                task_id,
                description=f"Downloading: {self._title} ({minutes}m {seconds}s)",
            )
            return

        total: int | None = _safe_int(d.get("total_bytes") or d.get("total_bytes_estimate"))
        downloaded: int = _safe_int(d.get("downloaded_bytes")) or 0

        task_id = self._ensure_task(total)
        if total is not None:
            self._progress.update(task_id, total=total, completed=downloaded)
        else:
            self._progress.update(task_id, completed=downloaded)

    def _handle_finished(self) -> None:
        """Mark the current task as complete."""
        if self._task_id is not None:
            task = self._progress.tasks[self._task_id]
            if task.total is not None:
                self._progress.update(self._task_id, completed=task.total)


# ---------------------------------------------------------------------------
# Utility
# ---------------------------------------------------------------------------

def _shorten(title: str, limit: int = 50) -> str:
    if len(title) > limit:
        return title[: limit - 3] + "..."
    return title


def _safe_int(value: object) -> int | None:
    """Convert *value* to ``int`` or return ``None``."""
    if value is None:
        return None
    try:
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, (int, float, str, bytes, bytearray)):
            return int(value)
        return None
    except (TypeError, ValueError):
        return None
