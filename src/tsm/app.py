"""Main Textual TUI application for browsing and managing tmux sessions."""

from __future__ import annotations

import logging
import os
import select
import sys
import termios
import tty

from rich.text import Text
from textual.app import App, ComposeResult
from textual.events import Resize
from textual.screen import Screen
from textual.theme import Theme
from textual.widgets import Static

from tsm.state import SessionBrowser
from tsm.widgets.dialogs import DialogScreen, dialog_for, footer_hints, message_line, status_line
from tsm.widgets.session_list import BrowserChanged, SessionList

logger = logging.getLogger(__name__)

# Below this many rows the preview would squeeze the list too much
MIN_HEIGHT_FOR_PREVIEW = 30


def _query_terminal_bg() -> str | None:
    """Query the terminal's background color via OSC 11.

    Sends the standard OSC 11 query and parses the rgb response.
    Returns a hex color string like '#282c34', or None if detection fails.
    """
    if not sys.stdin.isatty() or not sys.stdout.isatty():
        return None
    fd = sys.stdin.fileno()
    old = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        os.write(sys.stdout.fileno(), b"\033]11;?\033\\")
        resp = b""
        while select.select([fd], [], [], 0.3)[0]:
            ch = os.read(fd, 1)
            resp += ch
            if ch in (b"\\", b"\x07"):
                break
        decoded = resp.decode("latin-1")
        if "rgb:" in decoded:
            rgb = decoded.split("rgb:")[1].split("\033")[0].split("\x07")[0]
            parts = rgb.split("/")
            if len(parts) == 3:
                # 8-bit (ab) and 16-bit (abcd) components both start with the high byte
                r = int(parts[0][:2], 16)
                g = int(parts[1][:2], 16)
                b = int(parts[2][:2], 16)
                return f"#{r:02x}{g:02x}{b:02x}"
    except (OSError, ValueError) as e:
        logger.debug("Terminal background query failed: %s", e)
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)
    return None


def _lighten(color: str, amount: float) -> str:
    """Shift a hex color toward white by the given fraction (0.0-1.0)."""
    r, g, b = int(color[1:3], 16), int(color[3:5], 16), int(color[5:7], 16)
    r = min(255, int(r + (255 - r) * amount))
    g = min(255, int(g + (255 - g) * amount))
    b = min(255, int(b + (255 - b) * amount))
    return f"#{r:02x}{g:02x}{b:02x}"


def _build_theme(bg: str) -> Theme:
    """Build the app theme, deriving background/surface/panel from the given color."""
    return Theme(
        name="one-dark",
        primary="#61afef",
        secondary="#c678dd",
        warning="#d4b85c",
        error="#c97070",
        success="#7dba6d",
        accent="#56b6c2",
        foreground="#abb2bf",
        background=bg,
        surface=_lighten(bg, 0.04),
        panel=_lighten(bg, 0.08),
        dark=True,
    )


def _header_text(browser: SessionBrowser, width: int) -> Text:
    prefix = "─ tsm ─"
    attached = f" attached: {browser.current_session} " if browser.current_session else ""
    fill = max(0, width - len(prefix) - len(attached))
    return Text(prefix + "─" * fill + attached, style="bold #56b6c2")


class SessionManagerApp(App):
    CSS_PATH = "app.tcss"
    TITLE = "tsm"

    def __init__(self, browser: SessionBrowser, terminal_bg: str | None = None) -> None:
        super().__init__()
        bg = terminal_bg or "#282c34"
        self.register_theme(_build_theme(bg))
        self.theme = "one-dark"
        self.browser = browser
        self._dialog: DialogScreen | None = None
        self._main: Screen | None = None

    def compose(self) -> ComposeResult:
        yield Static(id="header-bar")
        yield SessionList(self.browser, id="session-list")
        yield Static(id="preview")
        yield Static(id="status-bar")
        yield Static(id="message-bar")
        yield Static(id="footer")

    def on_mount(self) -> None:
        self._main = self.screen
        self._main.query_one(SessionList).focus()
        self.set_interval(self.browser.settings.refresh_interval, self._tick)
        self._refresh_view()

    def _tick(self) -> None:
        self.browser.tick()
        self._refresh_view()

    def on_browser_changed(self, _event: BrowserChanged) -> None:
        if self.browser.should_quit:
            self.exit(self.browser.attach_target)
            return
        self._refresh_view()

    def on_resize(self, _event: Resize) -> None:
        if self._main is not None:
            self._refresh_view()

    def _sync_dialog(self) -> None:
        wants_dialog = dialog_for(self.browser) is not None
        if wants_dialog and self._dialog is None:
            self._dialog = DialogScreen(self.browser)
            self.push_screen(self._dialog)
        elif not wants_dialog and self._dialog is not None:
            self._dialog = None
            self.pop_screen()
        elif self._dialog is not None:
            self._dialog.update_dialog()

    def _refresh_view(self) -> None:
        browser = self.browser
        main = self._main
        main.query_one("#header-bar", Static).update(_header_text(browser, self.size.width))

        preview = main.query_one("#preview", Static)
        preview.display = browser.show_preview and self.size.height >= MIN_HEIGHT_FOR_PREVIEW
        if preview.display:
            if browser.preview_content:
                preview.update(Text.from_ansi(browser.preview_content))
            else:
                preview.update(Text("  No preview available", style="#5c6370"))

        main.query_one("#status-bar", Static).update(status_line(browser))

        message_bar = main.query_one("#message-bar", Static)
        message = message_line(browser)
        message_bar.display = message is not None
        if message is not None:
            message_bar.update(message)

        main.query_one("#footer", Static).update(footer_hints(browser.mode))
        main.query_one(SessionList).refresh()
        self._sync_dialog()


def run_app(browser: SessionBrowser) -> str | None:
    """Run the UI until the user quits. Returns a session to attach to, if any."""
    app = SessionManagerApp(browser, terminal_bg=_query_terminal_bg())
    return app.run()
