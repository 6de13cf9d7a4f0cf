"""Filtering, grouping and flat-row indexing of the session list.

The list the renderer paints is a single column of rows: one header per
working-directory group, one row per session, and, while the action menu is
open, a block of extra rows right below the selected session::

     ─ ~/code/api (2) ─           group header
       api-main                   session
     ▾ api-tests                  selected session
         windows: 1  panes: 2 ... metadata row
         ──────────────           separator
       ▸ Switch to session        action rows
         Rename session
         Kill session
                                  trailing separator
     ─ ~/notes (1) ─
       notes

flat_list_index() and total_list_items() describe that column; the renderer
in tsm.widgets.session_list builds exactly those rows.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from tsm.models import Session

SESSION_ROW = 1
METADATA_ROWS = 1
SEPARATOR_ROWS = 1
TRAILING_SEPARATOR_ROWS = 1


@dataclass
class Group:
    path: str
    # (filtered index, session) in filtered order
    members: list[tuple[int, Session]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.members)


def filter_sessions(sessions: Sequence[Session], filter_text: str) -> list[Session]:
    """Sessions matching ``filter_text`` (name or path, case-insensitive), oldest first."""
    if filter_text:
        needle = filter_text.lower()
        sessions = [
            s for s in sessions
            if needle in s.name.lower() or needle in s.display_path.lower()
        ]
    # sorted() is stable: equal timestamps keep snapshot order
    return sorted(sessions, key=lambda s: s.created)


def group_sessions(filtered: Sequence[Session]) -> list[Group]:
    """Partition by display path, groups in order of first appearance."""
    groups: list[Group] = []
    by_path: dict[str, Group] = {}
    for index, session in enumerate(filtered):
        path = session.display_path
        group = by_path.get(path)
        if group is None:
            group = by_path[path] = Group(path)
            groups.append(group)
        group.members.append((index, session))
    return groups


def visual_order(groups: Sequence[Group]) -> list[int]:
    """Filtered indices in the order they appear on screen."""
    return [index for group in groups for index, _ in group.members]


def session_count(groups: Sequence[Group]) -> int:
    return sum(len(group) for group in groups)


def _locate(groups: Sequence[Group], selected: int) -> tuple[int, int] | None:
    """(position in visual order, headers painted above it) for ``selected``."""
    position = 0
    for headers, group in enumerate(groups, 1):
        for index, _ in group.members:
            if index == selected:
                return position, headers
            position += 1
    return None


def group_headers_before(groups: Sequence[Group], selected: int) -> int:
    """Number of group headers painted above the session at ``selected``.

    Groups can interleave in filtered order (sessions created alternately in
    two directories), so this comes from membership, not from index ranges.
    """
    location = _locate(groups, selected)
    return location[1] if location else 0


def flat_list_index(
    groups: Sequence[Group],
    selected: int,
    action_menu_open: bool = False,
    selected_action: int = 0,
) -> int:
    """Row of the cursor: the selected session, or its highlighted action."""
    location = _locate(groups, selected)
    if location is None:
        return 0
    position, headers = location
    index = position + headers
    if action_menu_open:
        index += SESSION_ROW + METADATA_ROWS + SEPARATOR_ROWS + selected_action
    return index


def total_list_items(
    groups: Sequence[Group],
    action_menu_open: bool = False,
    action_count: int = 0,
) -> int:
    count = session_count(groups)
    if not count:
        return 0
    total = count + len(groups)
    if action_menu_open:
        total += METADATA_ROWS + SEPARATOR_ROWS + action_count + TRAILING_SEPARATOR_ROWS
    return total
