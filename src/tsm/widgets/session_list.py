"""Grouped, center-scrolled session list."""

from __future__ import annotations

from rich.cells import cell_len
from rich.text import Text
from textual.events import Key
from textual.message import Message
from textual.widget import Widget

from tsm.keys import dispatch_key
from tsm.listing import Group
from tsm.models import Session, SessionStatus
from tsm.scroll import ScrollState
from tsm.state import SessionBrowser

MUTED = "#5c6370"
HEADER = "#56b6c2"
SELECTED_BG = "on #3e4451"

STATUS_STYLE = {
    SessionStatus.WORKING: ("#7dba6d", "#7dba6d"),
    SessionStatus.WAITING_INPUT: ("#d4b85c", "#d4b85c"),
    SessionStatus.IDLE: ("#abb2bf", MUTED),
    SessionStatus.UNKNOWN: ("#828997", MUTED),
}

INDENT = "   "
OVERLAY_INDENT = "     "


def _status_color(status: SessionStatus, selected: bool) -> str:
    when_selected, otherwise = STATUS_STYLE[status]
    return when_selected if selected else otherwise


def _group_header(group: Group) -> Text:
    return Text.assemble(
        (" ─ ", MUTED),
        (group.path or "?", HEADER),
        (f" ({len(group)})", MUTED),
        (" ─", MUTED),
    )


def _session_row(
    session: Session, selected: bool, expanded: bool, current: bool, name_width: int,
) -> Text:
    marker = ("▾" if expanded else "▸") if selected else " "
    color = _status_color(session.status, selected)
    padding = " " * max(0, name_width - cell_len(session.name))

    row = Text.assemble(
        f"{INDENT} {marker} ",
        (session.name, "bold" if current else ""),
        padding,
        "  ",
        (session.status.symbol, color),
        " ",
        (f"{session.status.label:<8}", color),
    )
    if session.pane_title:
        row.append("  ")
        row.append(session.pane_title, style=HEADER if selected else MUTED)
    if selected:
        row.stylize(SELECTED_BG)
    return row


def _overlay_rows(browser: SessionBrowser, session: Session) -> list[Text]:
    """Metadata, separator, one row per action, trailing separator."""
    label = MUTED
    value = "#abb2bf"
    rows = [
        Text.assemble(
            OVERLAY_INDENT,
            ("windows: ", label), (str(session.window_count), value), "  ",
            ("panes: ", label), (str(len(session.panes)), value), "  ",
            ("uptime: ", label), (session.duration(), value), "  ",
            ("attached: ", label), ("yes" if session.attached else "no", value),
        ),
        Text(f"{OVERLAY_INDENT}────────────────────────", style=MUTED),
    ]
    for index, action in enumerate(browser.available_actions):
        highlighted = index == browser.selected_action
        marker = "▸" if highlighted else " "
        rows.append(Text(
            f"{OVERLAY_INDENT}{marker} {action.label}",
            style="#d4b85c" if highlighted else value,
        ))
    rows.append(Text(""))
    return rows


def build_rows(browser: SessionBrowser) -> list[Text]:
    """Every row of the list, including headers and the action overlay.

    len(build_rows(b)) == b.total_list_items(), and the row at
    b.flat_list_index() is the cursor row.
    """
    groups = browser.grouped_sessions()
    sessions = [session for group in groups for _, session in group.members]
    if not sessions:
        return []

    name_width = max(10, max(cell_len(s.name) for s in sessions))
    rows: list[Text] = []
    for group in groups:
        rows.append(_group_header(group))
        for index, session in group.members:
            selected = index == browser.selected
            expanded = selected and browser.action_menu_open
            current = session.name == browser.current_session
            rows.append(_session_row(session, selected, expanded, current, name_width))
            if expanded:
                rows.extend(_overlay_rows(browser, session))
    return rows


class BrowserChanged(Message):
    """Posted after a key press has been applied to the browser."""


class SessionList(Widget, can_focus=True):
    """Paints the visible window of build_rows() and takes keyboard input."""

    DEFAULT_CSS = """
    SessionList {
        height: 1fr;
        min-height: 3;
    }
    """

    def __init__(self, browser: SessionBrowser, **kwargs) -> None:
        super().__init__(**kwargs)
        self.browser = browser
        self.scroll_state = ScrollState()

    def render(self) -> Text:
        rows = build_rows(self.browser)
        if not rows:
            if self.browser.filter:
                empty = "No sessions match the filter."
            else:
                empty = "No tmux sessions found. Press 'n' to create one."
            return Text(empty, style=MUTED, justify="center")

        height = self.size.height
        offset = self.scroll_state.update(
            self.browser.flat_list_index(), self.browser.total_list_items(), height,
        )
        return Text("\n").join(rows[offset:offset + height])

    def on_key(self, event: Key) -> None:
        if dispatch_key(self.browser, event.key, event.character):
            event.stop()
            event.prevent_default()
            self.post_message(BrowserChanged())
