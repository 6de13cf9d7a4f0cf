"""Center-locked scrolling for the session list."""

from __future__ import annotations

from dataclasses import dataclass


def centered_offset(selected: int, total: int, height: int) -> int:
    """First visible row that keeps ``selected`` centered.

    No scrolling until the selection passes the middle of the viewport, and
    never past the point where the last row reaches the bottom.
    """
    if height <= 0 or total <= 0:
        return 0
    middle = height // 2
    if selected <= middle:
        return 0
    return min(selected - middle, max(0, total - height))


@dataclass
class ScrollState:
    selected: int = 0
    offset: int = 0

    def update(self, selected: int, total: int, height: int) -> int:
        self.selected = selected
        self.offset = centered_offset(selected, total, height)
        return self.offset
