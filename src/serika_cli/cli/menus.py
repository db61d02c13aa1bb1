"""Interactive menus for browsing the catalog.

This module is responsible for:

* The main menu (browse / search / settings / exit).
* The search prompt.
* The video picker and the per-video action menu.

All prompts go through questionary's arrow-key selectors.  Label
building is kept in small pure helpers so it can be tested without a
terminal.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from serika_cli.core.models import Video
from serika_cli.exceptions import EnvironmentError

BACK: str = "back"

MAIN_MENU_CHOICES: tuple[tuple[str, str], ...] = (
    ("Browse Videos", "browse"),
    ("Search Videos", "search"),
    ("Settings", "settings"),
    ("Exit", "exit"),
)

VIDEO_ACTION_CHOICES: tuple[tuple[str, str], ...] = (
    ("Play Video", "play"),
    ("Download Video", "download"),
    ("Back", BACK),
)


def import_questionary() -> Any:
    """Import questionary lazily for interactive selection."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


# ---------------------------------------------------------------------------
# Presentation helpers (pure)
# ---------------------------------------------------------------------------

def video_label(video: Video) -> Any:
    """Styled questionary title: ``[LIVE] Title by author``.

    Returned as prompt_toolkit ``(style, text)`` fragments so the live
    marker and the author can be colored.
    """
    fragments: list[tuple[str, str]] = []
    if video.is_live:
        fragments.append(("fg:ansired bold", "[LIVE] "))
    fragments.append(("", video.title))
    fragments.append(("fg:ansibrightblack", f" by {video.display_author}"))
    return fragments


def plain_video_label(video: Video) -> str:
    """Unstyled form of :func:`video_label`."""
    return "".join(text for _, text in video_label(video))


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

def prompt_main_menu() -> str:
    """Ask what to do next; Ctrl+C / Esc counts as ``"exit"``."""
    questionary = import_questionary()
    choices = [
        questionary.Choice(title=title, value=value)
        for title, value in MAIN_MENU_CHOICES
    ]
    selected: str | None = questionary.select(
        "What would you like to do?",
        choices=choices,
        use_arrow_keys=True,
        use_shortcuts=False,
    ).ask()
    return selected if selected is not None else "exit"


def prompt_search_query() -> str:
    """Ask for a search query; cancelling yields an empty query."""
    questionary = import_questionary()
    query: str | None = questionary.text("Search query:").ask()
    return query or ""


def prompt_video_selection(videos: Sequence[Video]) -> Video | None:
    """Let the user pick one of *videos*.

    Returns
    -------
    Video | None
        The chosen video, or ``None`` for "Back to Menu" and Ctrl+C.
    """
    questionary = import_questionary()

    choices: list[Any] = [
        questionary.Choice(title=video_label(video), value=index)
        for index, video in enumerate(videos)
    ]
    choices.append(questionary.Separator())
    choices.append(
        questionary.Choice(title=[("fg:ansiyellow", "Back to Menu")], value=BACK),
    )

    selected: int | str | None = questionary.select(
        "Select a video to watch:",
        choices=choices,
        use_arrow_keys=True,
        use_shortcuts=False,
    ).ask()

    if selected is None or selected == BACK:
        return None
    return videos[int(selected)]


def prompt_video_action(video: Video) -> str:
    """Play / Download / Back for *video*; Ctrl+C counts as ``"back"``."""
    questionary = import_questionary()
    choices = [
        questionary.Choice(title=title, value=value)
        for title, value in VIDEO_ACTION_CHOICES
    ]
    selected: str | None = questionary.select(
        f'What would you like to do with "{video.title}"?',
        choices=choices,
        use_arrow_keys=True,
        use_shortcuts=False,
    ).ask()
    return selected if selected is not None else BACK
