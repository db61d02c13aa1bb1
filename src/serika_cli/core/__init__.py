"""Core / service layer — pure business logic and data transformations.

Rules
-----
* No ``print()`` calls.
* No direct network access or subprocess spawning; those arrive through
  the protocols in :mod:`serika_cli.core.protocols`.
* No imports from ``cli`` or ``infra``.
"""

from serika_cli.core.catalog_service import CatalogService, filter_videos
from serika_cli.core.download_service import DownloadPlan, DownloadService
from serika_cli.core.frame_assembler import FrameAssembler, assemble_frames
from serika_cli.core.frame_queue import FrameQueue
from serika_cli.core.frame_renderer import FrameRenderer, render_frame
from serika_cli.core.models import (
    OverflowPolicy,
    PlaybackEnd,
    PlaybackResult,
    PlaybackState,
    RenderConfig,
    Settings,
    Video,
)
from serika_cli.core.playback_scheduler import PlaybackScheduler
from serika_cli.core.playback_session import PlaybackSession

__all__: list[str] = [
    "CatalogService",
    "DownloadPlan",
    "DownloadService",
    "FrameAssembler",
    "FrameQueue",
    "FrameRenderer",
    "OverflowPolicy",
    "PlaybackEnd",
    "PlaybackResult",
    "PlaybackScheduler",
    "PlaybackSession",
    "PlaybackState",
    "RenderConfig",
    "Settings",
    "Video",
    "assemble_frames",
    "filter_videos",
    "render_frame",
]
