"""Modal dialogs, help, status bar and footer contents for each mode."""

from __future__ import annotations

from rich.console import Group as RenderGroup
from rich.console import RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from textual.app import ComposeResult
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from tsm.completion import complete_path
from tsm.keys import dispatch_key
from tsm.modes import (
    ActionMenu,
    ConfirmAction,
    Filter,
    Help,
    Mode,
    NewSession,
    NewSessionField,
    Normal,
    Rename,
    SessionAction,
)
from tsm.state import SessionBrowser
from tsm.widgets.session_list import BrowserChanged

MUTED = "#5c6370"
ACCENT = "#61afef"
ACTIVE = "bold #d4b85c"
ERROR = "#c97070"
SUCCESS = "#7dba6d"

MAX_VISIBLE_SUGGESTIONS = 5

FOOTER_HINTS = {
    Normal: "? help  jk navigate  l actions  ⏎ switch  ␣ peek  n new  r rename  K kill  R refresh  p preview  / filter  q quit",
    ActionMenu: "jk navigate  ⏎/l select  h/esc back  q quit",
    Filter: "⏎ apply  esc cancel",
    ConfirmAction: "y/⏎ confirm  n/esc cancel",
    NewSession: "⏎ create  tab switch  ←→ toggle  ↑↓ select  → accept  esc cancel",
    Rename: "⏎ confirm  esc cancel",
    Help: "any key to close",
}

HELP_KEYS = [
    ("j / ↓", "Next session"),
    ("k / ↑", "Previous session"),
    ("l / →", "Open actions for the session"),
    ("Enter", "Switch to the session and quit"),
    ("Space", "Switch to the session, stay open"),
    ("n", "New session"),
    ("r", "Rename session"),
    ("K", "Kill session"),
    ("R", "Refresh"),
    ("p", "Toggle preview"),
    ("/", "Filter by name or path"),
    ("Esc", "Clear filter"),
    ("?", "This help"),
    ("q", "Quit"),
]


def footer_hints(mode: Mode) -> str:
    return "  " + FOOTER_HINTS[type(mode)]


def status_line(browser: SessionBrowser) -> Text:
    """Session counts and the active filter, or the filter being typed."""
    if isinstance(browser.mode, Filter):
        return Text(f"  / {browser.mode.input}_", style="#d4b85c")

    working, waiting, _idle = browser.status_counts()
    parts = [f"{len(browser.sessions)} sessions"]
    if working:
        parts.append(f"{working} working")
    if waiting:
        parts.append(f"{waiting} awaiting input")
    text = "  " + " │ ".join(parts)
    if browser.filter:
        text += f' │ filter: "{browser.filter}"'
    return Text(text, style=MUTED)


def message_line(browser: SessionBrowser) -> Text | None:
    if browser.error:
        return Text(f"  {browser.error}", style=ERROR)
    if browser.message:
        return Text(f"  {browser.message}", style=SUCCESS)
    return None


def confirm_dialog(browser: SessionBrowser) -> RenderableType | None:
    action = browser.pending_action
    mode = browser.mode
    if action is None or not isinstance(mode, ConfirmAction):
        return None
    name = mode.session_name

    lines = [Text(f"{action.label} '{name}'?", justify="center")]
    if action is SessionAction.KILL and name == browser.current_session:
        lines.append(Text(""))
        lines.append(Text(
            "This is your current session - tmux will exit!",
            style="bold #d4b85c", justify="center",
        ))
    lines.append(Text(""))
    lines.append(Text("[Y]es  [n]o", justify="center"))
    return Panel(RenderGroup(*lines), title="Confirm", border_style=ERROR, width=55)


def _suggestion_window(mode: NewSession) -> tuple[int, int]:
    total = len(mode.path_suggestions)
    start = 0
    if mode.path_selected is not None and mode.path_selected >= MAX_VISIBLE_SUGGESTIONS:
        start = mode.path_selected - MAX_VISIBLE_SUGGESTIONS + 1
    return start, min(start + MAX_VISIBLE_SUGGESTIONS, total)


def new_session_dialog(mode: NewSession) -> RenderableType:
    field = mode.field
    lines: list[Text] = []

    on_start = field is NewSessionField.START_WITH
    chosen = f"bold {ACCENT}" if on_start else "#abb2bf"
    lines.append(Text.assemble(
        ("Start: ", ACTIVE if on_start else ""),
        ("◀ ", MUTED if on_start else f"dim {MUTED}"),
        ("[Agent]" if mode.start_agent else " Agent ", chosen if mode.start_agent else MUTED),
        "  ",
        (" Shell " if mode.start_agent else "[Shell]", MUTED if mode.start_agent else chosen),
        (" ▶", MUTED if on_start else f"dim {MUTED}"),
    ))
    lines.append(Text(""))

    on_name = field is NewSessionField.NAME
    lines.append(Text.assemble(
        ("Name: ", ACTIVE if on_name else ""),
        mode.name,
        "_" if on_name else "",
    ))
    lines.append(Text(""))

    on_path = field is NewSessionField.PATH
    path_line = Text.assemble(("Path: ", ACTIVE if on_path else ""), (mode.path, "#d4b85c"))
    if on_path:
        ghost = complete_path(mode.path).ghost_text
        if ghost:
            path_line.append(ghost, style=f"dim {MUTED}")
        path_line.append("_")
    lines.append(path_line)

    if on_path and mode.path_suggestions:
        rule = Text("      " + "─" * 36, style=MUTED)
        lines.append(rule)
        start, end = _suggestion_window(mode)
        if start > 0:
            lines.append(Text(f"      ... {start} more above", style=MUTED))
        for index in range(start, end):
            if index == mode.path_selected:
                lines.append(Text(f"    > {mode.path_suggestions[index]}", style=f"bold {ACCENT}"))
            else:
                lines.append(Text(f"      {mode.path_suggestions[index]}", style=MUTED))
        if end < len(mode.path_suggestions):
            lines.append(Text(f"      ... {len(mode.path_suggestions) - end} more below", style=MUTED))
        lines.append(rule)

    lines.append(Text(""))
    lines.append(Text("Tab switch  ←→ toggle  ↑↓ select  Enter create  Esc cancel", style=MUTED))
    return Panel(RenderGroup(*lines), title="New Session", border_style=ACCENT, width=60)


def rename_dialog(mode: Rename) -> RenderableType:
    body = RenderGroup(
        Text.assemble("New name: ", (mode.new_name, "#d4b85c"), "_"),
        Text(""),
        Text("Press Enter to confirm", style=MUTED),
    )
    return Panel(body, title=Text(f"Rename '{mode.old_name}'"), border_style=ACCENT, width=50)


def help_dialog() -> RenderableType:
    table = Table.grid(padding=(0, 2))
    table.add_column(style=f"bold {ACCENT}", no_wrap=True)
    table.add_column()
    for key, description in HELP_KEYS:
        table.add_row(key, description)
    return Panel(table, title="Help", border_style=ACCENT, width=56)


def dialog_for(browser: SessionBrowser) -> RenderableType | None:
    """The modal to draw over the list for the current mode, if any."""
    mode = browser.mode
    if isinstance(mode, ConfirmAction):
        return confirm_dialog(browser)
    if isinstance(mode, NewSession):
        return new_session_dialog(mode)
    if isinstance(mode, Rename):
        return rename_dialog(mode)
    if isinstance(mode, Help):
        return help_dialog()
    return None


class DialogScreen(ModalScreen):
    """Shows dialog_for(browser) over the dimmed list while a dialog mode is active."""

    DEFAULT_CSS = """
    DialogScreen {
        align: center middle;
    }
    DialogScreen > #dialog {
        width: auto;
        height: auto;
        background: $surface;
    }
    """

    def __init__(self, browser: SessionBrowser) -> None:
        super().__init__()
        self.browser = browser

    def compose(self) -> ComposeResult:
        yield Static(id="dialog")

    def on_mount(self) -> None:
        self.update_dialog()

    def update_dialog(self) -> None:
        self.query_one("#dialog", Static).update(dialog_for(self.browser) or "")

    def on_key(self, event: Key) -> None:
        if dispatch_key(self.browser, event.key, event.character):
            event.stop()
            event.prevent_default()
            self.app.post_message(BrowserChanged())
