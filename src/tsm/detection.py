"""Infer what the agent in a pane is doing from its captured output."""

from __future__ import annotations

import re

from tsm.models import SessionStatus

_ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[a-zA-Z]")

WAITING_MARKERS = ("Enter to select", "↑/↓ to navigate", "Esc to cancel", "to edit")


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences."""
    return _ANSI_RE.sub("", text)


def _has_input_field(lines: list[str]) -> bool:
    # Prompt line (❯) with a box border directly above it
    for i, line in enumerate(lines):
        if "❯" in line and i > 0 and "─" in lines[i - 1]:
            return True
    return False


def detect_status(output: str) -> SessionStatus:
    """Classify captured pane output into a SessionStatus."""
    text = strip_ansi(output)

    if any(marker in text for marker in WAITING_MARKERS):
        return SessionStatus.WAITING_INPUT

    if _has_input_field(text.splitlines()):
        if "to interrupt" in text:
            return SessionStatus.WORKING
        return SessionStatus.IDLE

    return SessionStatus.UNKNOWN
