"""User settings loaded from ~/.config/tsm/settings.json."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

SETTINGS_PATH = Path.home() / ".config" / "tsm" / "settings.json"


def settings_path() -> Path:
    override = os.environ.get("TSM_SETTINGS")
    return Path(override).expanduser() if override else SETTINGS_PATH


@dataclass
class Settings:
    refresh_interval: float = 2.0
    preview_lines: int = 15
    show_preview: bool = True
    agent_command: str = "claude"
    agent_name_prefix: str = "claude"
    shell_name_prefix: str = "shell"

    @staticmethod
    def load(path: Path | None = None) -> Settings:
        path = path or settings_path()
        if not path.exists():
            return Settings()
        try:
            data = json.loads(path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s", path, e)
            return Settings()
        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: expected a JSON object", path)
            return Settings()

        defaults = Settings()
        try:
            return Settings(
                refresh_interval=float(data.get("refresh_interval", defaults.refresh_interval)),
                preview_lines=int(data.get("preview_lines", defaults.preview_lines)),
                show_preview=bool(data.get("show_preview", defaults.show_preview)),
                agent_command=str(data.get("agent_command", defaults.agent_command)),
                agent_name_prefix=str(data.get("agent_name_prefix", defaults.agent_name_prefix)),
                shell_name_prefix=str(data.get("shell_name_prefix", defaults.shell_name_prefix)),
            )
        except (TypeError, ValueError) as e:
            logger.warning("Ignoring invalid settings in %s: %s", path, e)
            return Settings()
