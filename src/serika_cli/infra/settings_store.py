"""JSON file persistence for :class:`~serika_cli.core.models.Settings`.

The file lives in the per-user configuration directory and holds a
flat object of camelCase keys.  A missing or unreadable file yields the
defaults; writing failures are reported as
:class:`~serika_cli.exceptions.SettingsStoreError`.
"""

from __future__ import annotations

import json
import logging
import os
import platform
from pathlib import Path

from serika_cli.core.models import Settings
from serika_cli.core.settings import settings_from_mapping, settings_to_mapping
from serika_cli.exceptions import SettingsStoreError

logger = logging.getLogger(__name__)

APP_DIR_NAME: str = "serika-cli"
SETTINGS_FILENAME: str = "settings.json"


def config_root() -> Path:
    """Per-platform directory holding serika-cli configuration."""
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / APP_DIR_NAME
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR_NAME
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / APP_DIR_NAME


def default_settings_path() -> Path:
    return config_root() / SETTINGS_FILENAME


class JsonSettingsStore:
    """Load and save :class:`Settings` as a JSON object."""

    def __init__(self, path: Path | None = None) -> None:
        self.path: Path = path if path is not None else default_settings_path()

    def load(self) -> Settings:
        """Read settings, falling back to defaults on any read problem."""
        if not self.path.exists():
            return Settings()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable settings file %s: %s", self.path, exc)
            return Settings()
        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: not a JSON object", self.path)
            return Settings()
        return settings_from_mapping(data)

    def save(self, settings: Settings) -> None:
        """Write *settings* atomically (temp file + rename).

        Raises
        ------
        SettingsStoreError
            When the file or its directory cannot be written.
        """
        tmp = self.path.with_suffix(".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(
                json.dumps(settings_to_mapping(settings), indent=2),
                encoding="utf-8",
            )
            tmp.replace(self.path)
        except OSError as exc:
            raise SettingsStoreError(
                f"Could not save settings to {self.path}: {exc}",
            ) from exc
