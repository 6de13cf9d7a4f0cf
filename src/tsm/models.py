from __future__ import annotations

import os
import time
from dataclasses import dataclass, field
from enum import Enum


class SessionStatus(Enum):
    WORKING = "working"
    WAITING_INPUT = "waiting"
    IDLE = "idle"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        return self.value

    @property
    def symbol(self) -> str:
        return _STATUS_SYMBOLS[self]


_STATUS_SYMBOLS = {
    SessionStatus.WORKING: "●",
    SessionStatus.WAITING_INPUT: "◐",
    SessionStatus.IDLE: "○",
    SessionStatus.UNKNOWN: "·",
}


@dataclass(frozen=True)
class Pane:
    pane_id: str
    current_command: str = ""
    current_path: str = ""
    pid: int = 0
    title: str = ""


@dataclass(frozen=True)
class Session:
    name: str
    created: int = 0
    attached: bool = False
    working_directory: str = ""
    window_count: int = 1
    panes: tuple[Pane, ...] = field(default_factory=tuple)
    agent_pane: str | None = None
    status: SessionStatus = SessionStatus.UNKNOWN
    pane_title: str = ""

    @property
    def display_path(self) -> str:
        """Working directory with the home directory shown as ``~``."""
        return shorten_home(self.working_directory)

    @property
    def preview_pane(self) -> str | None:
        if self.agent_pane:
            return self.agent_pane
        if self.panes:
            return self.panes[0].pane_id
        return None

    def duration(self, now: float | None = None) -> str:
        """Human-readable uptime since the session was created."""
        if now is None:
            now = time.time()
        delta = max(0, int(now - self.created))
        if delta < 60:
            return f"{delta}s"
        if delta < 3600:
            return f"{delta // 60}m"
        if delta < 86400:
            return f"{delta // 3600}h {delta % 3600 // 60}m"
        return f"{delta // 86400}d {delta % 86400 // 3600}h"


def shorten_home(path: str) -> str:
    if not path:
        return ""
    home = os.path.expanduser("~")
    if path == home:
        return "~"
    if home != "/" and path.startswith(home + "/"):
        return "~" + path[len(home):]
    return path
