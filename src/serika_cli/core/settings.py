"""Pure conversion between persisted key-value settings and :class:`Settings`.

The on-disk format uses camelCase keys (``asciiMode``, ``asciiWidth``…)
so files written by earlier releases keep working.  Every function here
is a pure transformation; the file I/O lives in
:mod:`serika_cli.infra.settings_store`.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any

from serika_cli.core.models import (
    CHARSETS,
    DOWNLOAD_QUALITIES,
    OverflowPolicy,
    Settings,
    derive_height,
)
from serika_cli.exceptions import InvalidSettingError

# field name -> persisted key
SETTING_KEYS: dict[str, str] = {
    "ascii_mode": "asciiMode",
    "ascii_width": "asciiWidth",
    "ascii_charset": "asciiCharset",
    "ascii_overflow": "asciiOverflow",
    "download_dir": "downloadDir",
    "download_quality": "downloadQuality",
    "auto_merge_audio": "autoMergeAudio",
}

MIN_ASCII_WIDTH: int = 4
MAX_ASCII_WIDTH: int = 1000


def validate_setting(name: str, value: Any) -> Any:
    """Return *value* normalised for field *name*.

    Raises
    ------
    InvalidSettingError
        When *name* is unknown or *value* is outside the field's domain.
    """
    if name not in SETTING_KEYS:
        raise InvalidSettingError(f"Unknown setting: {name}")

    if name in ("ascii_mode", "auto_merge_audio"):
        if not isinstance(value, bool):
            raise InvalidSettingError(f"{name} must be true or false.")
        return value

    if name == "ascii_width":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidSettingError("ASCII width must be a number.")
        width = int(value)
        if not MIN_ASCII_WIDTH <= width <= MAX_ASCII_WIDTH or derive_height(width) < 1:
            raise InvalidSettingError(
                f"ASCII width must be between {MIN_ASCII_WIDTH} and {MAX_ASCII_WIDTH}.",
            )
        return width

    if name == "ascii_charset":
        if value not in CHARSETS:
            raise InvalidSettingError(
                f"Unknown charset: {value}",
                hint=f"Choose one of: {', '.join(CHARSETS)}",
            )
        return value

    if name == "ascii_overflow":
        try:
            return OverflowPolicy(value).value
        except ValueError as exc:
            raise InvalidSettingError(
                f"Unknown overflow policy: {value}",
                hint=f"Choose one of: {', '.join(p.value for p in OverflowPolicy)}",
            ) from exc

    if name == "download_quality":
        if value not in DOWNLOAD_QUALITIES:
            raise InvalidSettingError(f"Unknown download quality: {value}")
        return value

    # download_dir
    if not isinstance(value, str) or not value.strip():
        raise InvalidSettingError("Download directory must be a non-empty path.")
    return value.strip()


def settings_from_mapping(data: Mapping[str, Any]) -> Settings:
    """Build :class:`Settings` from persisted data.

    Unknown keys are ignored and invalid values fall back to the
    defaults, so a hand-edited file never prevents startup.
    """
    values: dict[str, Any] = {}
    for name, key in SETTING_KEYS.items():
        if key not in data:
            continue
        try:
            values[name] = validate_setting(name, data[key])
        except InvalidSettingError:
            continue
    return Settings(**values)


def settings_to_mapping(settings: Settings) -> dict[str, Any]:
    """Serialise :class:`Settings` using the persisted camelCase keys."""
    return {
        key: getattr(settings, name)
        for name, key in SETTING_KEYS.items()
    }


def update_setting(settings: Settings, name: str, value: Any) -> Settings:
    """Return a copy of *settings* with field *name* set to *value*.

    Raises
    ------
    InvalidSettingError
        When the new value is invalid.
    """
    return dataclasses.replace(settings, **{name: validate_setting(name, value)})
