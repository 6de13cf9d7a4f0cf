"""SessionBrowser: the session list, its selection and the UI mode machine."""

from __future__ import annotations

import logging
import os
import re
import time
from dataclasses import replace

from tsm import listing
from tsm.completion import complete_path, expand_path
from tsm.listing import Group
from tsm.models import Session, SessionStatus
from tsm.modes import (
    SESSION_ACTIONS,
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
from tsm.settings import Settings
from tsm.tmux import TmuxClient, TmuxError

logger = logging.getLogger(__name__)

OK = "✓"
FAIL = "✗"


def generate_session_name(prefix: str) -> str:
    """Default session name like ``claude_A1B2C3D4``."""
    seed = time.time_ns() & 0xFFFFFFFF
    return f"{prefix}_{seed:08X}"


class SessionBrowser:
    """All interactive state, independent of how it is drawn.

    The tmux client is only ever called from here, synchronously, and its
    failures end up in ``error`` rather than propagating.
    """

    def __init__(
        self,
        client: TmuxClient,
        settings: Settings | None = None,
        sessions: list[Session] | None = None,
        current_session: str | None = None,
    ) -> None:
        self.client = client
        self.settings = settings or Settings()
        self.sessions: list[Session] = list(sessions or [])
        self.current_session = current_session
        self.selected = 0
        self.mode: Mode = Normal()
        self.filter = ""
        self.error: str | None = None
        self.message: str | None = None
        self.preview_content: str | None = None
        self.show_preview = self.settings.show_preview
        self.available_actions: list[SessionAction] = []
        self.selected_action = 0
        self.pending_action: SessionAction | None = None
        self.should_quit = False
        # Set when switching had to be deferred until the UI released the terminal
        self.attach_target: str | None = None

    @classmethod
    def load(cls, client: TmuxClient, settings: Settings | None = None) -> SessionBrowser:
        """Build a browser from the live tmux server. Raises TmuxError."""
        browser = cls(
            client,
            settings,
            sessions=client.list_sessions(),
            current_session=client.current_session(),
        )
        browser.update_preview()
        return browser

    # -- derived views -----------------------------------------------------

    def filtered_sessions(self) -> list[Session]:
        return listing.filter_sessions(self.sessions, self.filter)

    def grouped_sessions(self) -> list[Group]:
        return listing.group_sessions(self.filtered_sessions())

    def selected_session(self) -> Session | None:
        filtered = self.filtered_sessions()
        if 0 <= self.selected < len(filtered):
            return filtered[self.selected]
        return None

    @property
    def action_menu_open(self) -> bool:
        return isinstance(self.mode, ActionMenu)

    def flat_list_index(self) -> int:
        return listing.flat_list_index(
            self.grouped_sessions(), self.selected, self.action_menu_open, self.selected_action,
        )

    def total_list_items(self) -> int:
        return listing.total_list_items(
            self.grouped_sessions(), self.action_menu_open, len(self.available_actions),
        )

    def status_counts(self) -> tuple[int, int, int]:
        """(working, waiting, idle) across all sessions, ignoring the filter."""
        statuses = [s.status for s in self.sessions]
        return (
            statuses.count(SessionStatus.WORKING),
            statuses.count(SessionStatus.WAITING_INPUT),
            statuses.count(SessionStatus.IDLE),
        )

    # -- refresh -----------------------------------------------------------

    def clear_messages(self) -> None:
        self.error = None
        self.message = None

    def _fail(self, verb: str, error: Exception) -> None:
        logger.warning("Failed to %s: %s", verb, error)
        self.error = f"{FAIL} Failed to {verb}: {error}"

    def _replace_sessions(self, sessions: list[Session]) -> None:
        """Swap in a new snapshot, keeping the cursor on the same session name."""
        current = self.selected_session()
        selected_name = current.name if current else None
        self.sessions = list(sessions)

        filtered = self.filtered_sessions()
        if selected_name is not None:
            for index, session in enumerate(filtered):
                if session.name == selected_name:
                    self.selected = index
                    break
        self.selected = max(0, min(self.selected, len(filtered) - 1))

    def _refresh_sessions(self) -> bool:
        try:
            sessions = self.client.list_sessions()
        except TmuxError as e:
            self._fail("refresh", e)
            return False
        self._replace_sessions(sessions)
        self.update_preview()
        return True

    def refresh(self) -> None:
        """User-requested reload."""
        self.clear_messages()
        if self._refresh_sessions():
            self.message = f"{OK} Refreshed"

    def tick(self) -> None:
        """Periodic reload; failures are logged and the old snapshot kept."""
        try:
            sessions = self.client.list_sessions()
        except TmuxError as e:
            logger.warning("Periodic refresh failed: %s", e)
        else:
            self._replace_sessions(sessions)
        self.update_preview()

    def update_preview(self) -> None:
        session = self.selected_session()
        pane_id = session.preview_pane if session else None
        if pane_id is None:
            self.preview_content = None
            return
        try:
            self.preview_content = self.client.capture_pane(pane_id, self.settings.preview_lines)
        except TmuxError as e:
            logger.debug("Preview capture failed for %s: %s", pane_id, e)
            self.preview_content = None

    def toggle_preview(self) -> None:
        self.show_preview = not self.show_preview

    # -- navigation --------------------------------------------------------

    def _step(self, delta: int) -> None:
        order = listing.visual_order(self.grouped_sessions())
        if self.selected not in order:
            return
        position = order.index(self.selected) + delta
        if 0 <= position < len(order):
            self.selected = order[position]
            self.update_preview()

    def select_prev(self) -> None:
        """Move up in on-screen order."""
        self._step(-1)

    def select_next(self) -> None:
        """Move down in on-screen order."""
        self._step(1)

    # -- switching ---------------------------------------------------------

    def _switch(self, name: str, stay: bool) -> None:
        try:
            in_place = self.client.switch_to(name)
        except TmuxError as e:
            self._fail("switch", e)
            return
        if stay:
            if in_place:
                self.message = f"{OK} Switched to '{name}'"
            else:
                self.error = f"{FAIL} Not inside tmux, press Enter to attach to '{name}'"
            return
        if not in_place:
            self.attach_target = name
        self.should_quit = True

    def switch_to_selected(self) -> None:
        """Switch to the selected session and quit."""
        self.clear_messages()
        session = self.selected_session()
        if session is not None:
            self._switch(session.name, stay=False)

    def switch_to_selected_stay(self) -> None:
        """Switch to the selected session but keep the browser open."""
        self.clear_messages()
        session = self.selected_session()
        if session is not None:
            self._switch(session.name, stay=True)

    def quit(self) -> None:
        self.should_quit = True

    # -- action menu -------------------------------------------------------

    def enter_action_menu(self) -> None:
        self.clear_messages()
        if self.selected_session() is None:
            return
        self.available_actions = list(SESSION_ACTIONS)
        self.selected_action = 0
        self.mode = ActionMenu()

    def select_next_action(self) -> None:
        if self.available_actions:
            self.selected_action = (self.selected_action + 1) % len(self.available_actions)

    def select_prev_action(self) -> None:
        if self.available_actions:
            self.selected_action = (self.selected_action - 1) % len(self.available_actions)

    def execute_selected_action(self) -> None:
        if not 0 <= self.selected_action < len(self.available_actions):
            return
        action = self.available_actions[self.selected_action]
        if action.requires_confirmation:
            self._confirm(action)
        else:
            self.execute_action(action)

    def _confirm(self, action: SessionAction) -> None:
        session = self.selected_session()
        if session is None:
            self.mode = Normal()
            return
        self.pending_action = action
        self.mode = ConfirmAction(session_name=session.name)

    def start_kill(self) -> None:
        """Kill shortcut: straight to confirmation."""
        self.clear_messages()
        self._confirm(SessionAction.KILL)

    def confirm_action(self) -> None:
        """Run the pending action against the session the dialog was opened for."""
        mode = self.mode
        action, self.pending_action = self.pending_action, None
        self.mode = Normal()
        if action is None or not isinstance(mode, ConfirmAction):
            return
        if all(s.name != mode.session_name for s in self.sessions):
            self.error = f"{FAIL} Session '{mode.session_name}' no longer exists"
            return
        self.execute_action(action, mode.session_name)

    def execute_action(self, action: SessionAction, name: str | None = None) -> None:
        """Apply ``action`` to ``name``, or to the selected session."""
        self.mode = Normal()
        if name is None:
            session = self.selected_session()
            if session is None:
                return
            name = session.name

        if action is SessionAction.SWITCH_TO:
            self._switch(name, stay=False)
        elif action is SessionAction.RENAME:
            self.mode = Rename(old_name=name, new_name=name)
        elif action is SessionAction.KILL:
            try:
                self.client.kill_session(name)
            except TmuxError as e:
                self._fail("kill", e)
                return
            self._refresh_sessions()
            self.message = f"{OK} Killed session '{name}'"

    # -- filter ------------------------------------------------------------

    def start_filter(self) -> None:
        self.clear_messages()
        self.mode = Filter(input=self.filter)

    def apply_filter(self) -> None:
        if isinstance(self.mode, Filter):
            self.filter = self.mode.input
            self.selected = 0
        self.mode = Normal()
        self.update_preview()

    def clear_filter(self) -> None:
        self.filter = ""
        self.selected = 0
        self.update_preview()

    # -- rename ------------------------------------------------------------

    def start_rename(self) -> None:
        self.clear_messages()
        session = self.selected_session()
        if session is not None:
            self.mode = Rename(old_name=session.name, new_name=session.name)

    def confirm_rename(self) -> None:
        mode = self.mode
        self.mode = Normal()
        if not isinstance(mode, Rename) or mode.new_name == mode.old_name:
            return
        if not mode.new_name.strip():
            self.error = f"{FAIL} Session name cannot be empty"
            return
        try:
            self.client.rename_session(mode.old_name, mode.new_name)
        except TmuxError as e:
            self._fail("rename", e)
            return
        self._refresh_sessions()
        self.message = f"{OK} Renamed '{mode.old_name}' to '{mode.new_name}'"

    # -- new session -------------------------------------------------------

    def _name_prefix(self, start_agent: bool) -> str:
        if start_agent:
            return self.settings.agent_name_prefix
        return self.settings.shell_name_prefix

    def _is_generated_name(self, name: str) -> bool:
        prefixes = "|".join(
            re.escape(p) for p in (self.settings.agent_name_prefix, self.settings.shell_name_prefix)
        )
        return re.fullmatch(rf"(?:{prefixes})_[0-9A-F]{{8}}", name) is not None

    def start_new_session(self) -> None:
        """Open the new-session dialog next to the selected session's directory."""
        self.clear_messages()
        session = self.selected_session()
        if session is not None and session.display_path:
            default_path = session.display_path
        else:
            try:
                default_path = os.getcwd()
            except OSError:
                default_path = "~"

        self.mode = NewSession(
            name=generate_session_name(self._name_prefix(True)),
            path=default_path,
            field=NewSessionField.START_WITH,
            path_suggestions=tuple(complete_path(default_path).suggestions),
            path_selected=None,
            start_agent=True,
        )

    def next_new_session_field(self) -> None:
        if isinstance(self.mode, NewSession):
            self.mode = replace(self.mode, field=self.mode.field.next())

    def prev_new_session_field(self) -> None:
        if isinstance(self.mode, NewSession):
            self.mode = replace(self.mode, field=self.mode.field.prev())

    def toggle_start_agent(self) -> None:
        mode = self.mode
        if not isinstance(mode, NewSession):
            return
        start_agent = not mode.start_agent
        name = mode.name
        if self._is_generated_name(name):
            name = generate_session_name(self._name_prefix(start_agent))
        self.mode = replace(mode, start_agent=start_agent, name=name)

    def update_new_session_path_suggestions(self) -> None:
        mode = self.mode
        if not isinstance(mode, NewSession):
            return
        suggestions = tuple(complete_path(mode.path).suggestions)
        selected = mode.path_selected
        if selected is not None and selected >= len(suggestions):
            selected = len(suggestions) - 1 if suggestions else None
        self.mode = replace(mode, path_suggestions=suggestions, path_selected=selected)

    def select_prev_new_session_path(self) -> None:
        mode = self.mode
        if not isinstance(mode, NewSession) or not mode.path_suggestions:
            return
        count = len(mode.path_suggestions)
        selected = count - 1 if mode.path_selected is None else (mode.path_selected - 1) % count
        self.mode = replace(mode, path_selected=selected)

    def select_next_new_session_path(self) -> None:
        mode = self.mode
        if not isinstance(mode, NewSession) or not mode.path_suggestions:
            return
        count = len(mode.path_suggestions)
        selected = 0 if mode.path_selected is None else (mode.path_selected + 1) % count
        self.mode = replace(mode, path_selected=selected)

    def accept_new_session_path_completion(self) -> None:
        """Take the highlighted suggestion, or the top one."""
        mode = self.mode
        if not isinstance(mode, NewSession):
            return
        if mode.path_selected is not None and mode.path_selected < len(mode.path_suggestions):
            self.mode = replace(mode, path=mode.path_suggestions[mode.path_selected], path_selected=None)
        elif mode.path_suggestions:
            self.mode = replace(mode, path=mode.path_suggestions[0])
        self.update_new_session_path_suggestions()

    def confirm_new_session(self) -> None:
        mode = self.mode
        self.mode = Normal()
        if not isinstance(mode, NewSession):
            return
        name = mode.name.strip()
        if not name:
            self.error = f"{FAIL} Session name cannot be empty"
            return
        try:
            self.client.new_session(name, expand_path(mode.path), mode.start_agent)
        except TmuxError as e:
            self._fail("create session", e)
            return
        self._refresh_sessions()
        self.message = f"{OK} Created session '{name}'"

    # -- text entry --------------------------------------------------------

    def type_char(self, char: str) -> None:
        """Append a character to whichever text field the mode is editing."""
        mode = self.mode
        if isinstance(mode, Filter):
            self.mode = replace(mode, input=mode.input + char)
        elif isinstance(mode, Rename):
            self.mode = replace(mode, new_name=mode.new_name + char)
        elif isinstance(mode, NewSession):
            if mode.field is NewSessionField.NAME:
                self.mode = replace(mode, name=mode.name + char)
            elif mode.field is NewSessionField.PATH:
                self.mode = replace(mode, path=mode.path + char)
                self.update_new_session_path_suggestions()

    def backspace(self) -> None:
        mode = self.mode
        if isinstance(mode, Filter):
            self.mode = replace(mode, input=mode.input[:-1])
        elif isinstance(mode, Rename):
            self.mode = replace(mode, new_name=mode.new_name[:-1])
        elif isinstance(mode, NewSession):
            if mode.field is NewSessionField.NAME:
                self.mode = replace(mode, name=mode.name[:-1])
            elif mode.field is NewSessionField.PATH:
                self.mode = replace(mode, path=mode.path[:-1])
                self.update_new_session_path_suggestions()

    # -- help / cancel -----------------------------------------------------

    def show_help(self) -> None:
        self.clear_messages()
        self.mode = Help()

    def cancel(self) -> None:
        """Back to Normal from any mode, dropping a pending action."""
        self.pending_action = None
        self.mode = Normal()
