"""Interactive settings editor.

Every change is validated through :func:`~serika_cli.core.settings.update_setting`
and persisted immediately through the settings store.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from serika_cli.cli.console import console
from serika_cli.cli.menus import BACK, import_questionary
from serika_cli.core.models import CHARSETS, DOWNLOAD_QUALITIES, OverflowPolicy, Settings
from serika_cli.core.settings import MAX_ASCII_WIDTH, MIN_ASCII_WIDTH, update_setting
from serika_cli.exceptions import InvalidSettingError, SettingsStoreError

logger = logging.getLogger(__name__)

QUALITY_LABELS: dict[str, str] = {
    "original": "Original (no re-encoding, fastest)",
    "high": "High (CRF 18, ~192kbps audio)",
    "medium": "Medium (CRF 23, ~128kbps audio)",
    "low": "Low (CRF 28, ~96kbps audio)",
}

OVERFLOW_LABELS: dict[str, str] = {
    OverflowPolicy.DROP_OLDEST.value: "Drop oldest frame (stay in sync with audio)",
    OverflowPolicy.DROP_NEWEST.value: "Drop newest frame",
    OverflowPolicy.BLOCK.value: "Wait for the terminal (may drift from audio)",
}


class SettingsStore(Protocol):
    def save(self, settings: Settings) -> None: ...  # pragma: no cover


def _on_off(flag: bool) -> str:
    return "ON" if flag else "OFF"


def settings_entries(settings: Settings) -> list[tuple[str, str]]:
    """``(label, field)`` pairs shown in the settings menu, in order.

    An empty field marks a separator.
    """
    return [
        (f"ASCII Mode: {_on_off(settings.ascii_mode)}", "ascii_mode"),
        (f"ASCII Width: {settings.ascii_width}", "ascii_width"),
        (f"ASCII Charset: {settings.ascii_charset}", "ascii_charset"),
        (f"ASCII Frame Overflow: {settings.ascii_overflow}", "ascii_overflow"),
        ("", ""),
        (f"Download Directory: {settings.download_dir}", "download_dir"),
        (f"Download Quality: {settings.download_quality}", "download_quality"),
        (f"Auto-merge Audio: {_on_off(settings.auto_merge_audio)}", "auto_merge_audio"),
        ("", ""),
        ("Back", BACK),
    ]


def _validate_width(text: str) -> bool | str:
    try:
        width = int(text)
    except ValueError:
        return "Enter a whole number."
    if not MIN_ASCII_WIDTH <= width <= MAX_ASCII_WIDTH:
        return f"Enter a width between {MIN_ASCII_WIDTH} and {MAX_ASCII_WIDTH}."
    return True


def _ask_new_value(questionary: Any, field: str, settings: Settings) -> Any:
    """Prompt for the new value of *field*; ``None`` when cancelled."""
    if field == "ascii_mode":
        return not settings.ascii_mode
    if field == "auto_merge_audio":
        return not settings.auto_merge_audio
    if field == "ascii_width":
        answer = questionary.text(
            "Enter ASCII width (characters):",
            default=str(settings.ascii_width),
            validate=_validate_width,
        ).ask()
        return int(answer) if answer is not None else None
    if field == "ascii_charset":
        return questionary.select(
            "Select ASCII Charset:",
            choices=list(CHARSETS),
            default=settings.ascii_charset if settings.ascii_charset in CHARSETS else None,
        ).ask()
    if field == "ascii_overflow":
        return questionary.select(
            "When the terminal falls behind:",
            choices=[
                questionary.Choice(title=OVERFLOW_LABELS[p.value], value=p.value)
                for p in OverflowPolicy
            ],
        ).ask()
    if field == "download_dir":
        return questionary.text(
            "Enter download directory path (use . for current, ~ for home):",
            default=settings.download_dir,
        ).ask()
    if field == "download_quality":
        return questionary.select(
            "Select download quality:",
            choices=[
                questionary.Choice(title=QUALITY_LABELS[q], value=q)
                for q in DOWNLOAD_QUALITIES
            ],
        ).ask()
    raise InvalidSettingError(f"Unknown setting: {field}")


def run_settings_menu(settings: Settings, store: SettingsStore) -> Settings:
    """Edit *settings* until the user picks Back; return the final value."""
    questionary = import_questionary()

    while True:
        choices: list[Any] = [
            questionary.Separator() if not name else questionary.Choice(title=label, value=name)
            for label, name in settings_entries(settings)
        ]
        field: str | None = questionary.select(
            "Settings",
            choices=choices,
            use_arrow_keys=True,
            use_shortcuts=False,
        ).ask()
        if field is None or field == BACK:
            return settings

        value = _ask_new_value(questionary, field, settings)
        if value is None:
            continue
        try:
            updated = update_setting(settings, field, value)
            store.save(updated)
        except (InvalidSettingError, SettingsStoreError) as exc:
            console.error(f"[bold red]Error:[/bold red] {exc}")
            if exc.hint:
                console.error(f"[yellow]Hint:[/yellow] {exc.hint}")
            continue
        logger.debug("Setting %s changed to %r", field, value)
        settings = updated
