"""tmux subprocess wrappers for session discovery, pane capture and lifecycle."""

from __future__ import annotations

import logging
import os
import subprocess

from tsm.detection import detect_status
from tsm.models import Pane, Session, SessionStatus

logger = logging.getLogger(__name__)

SESSION_FORMAT = "#{session_name}\t#{session_created}\t#{session_attached}\t#{session_windows}"
PANE_FORMAT = "#{pane_id}\t#{pane_current_command}\t#{pane_current_path}\t#{pane_pid}\t#{pane_title}"

# stderr fragments meaning "there is simply nothing to list"
_NO_SERVER_MARKERS = ("no server running", "no sessions", "error connecting to")

STATUS_CAPTURE_LINES = 4


class TmuxError(RuntimeError):
    """A tmux command failed or tmux is not available."""


def _to_int(value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        return default


class TmuxClient:
    """Synchronous access to the tmux server.

    Every method either returns its value or raises TmuxError; callers decide
    how failures are surfaced.
    """

    def __init__(
        self,
        agent_command: str = "claude",
        agent_name_prefix: str = "claude",
        timeout: float = 5.0,
    ) -> None:
        self.agent_command = agent_command
        self.agent_name_prefix = agent_name_prefix
        self.timeout = timeout

    def run(self, *args: str) -> str:
        """Run a tmux subcommand and return its stdout."""
        logger.debug("tmux %s", " ".join(args))
        try:
            result = subprocess.run(
                ["tmux", *args],
                capture_output=True, text=True, timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise TmuxError("tmux is not installed") from e
        except subprocess.TimeoutExpired as e:
            raise TmuxError(f"tmux {args[0]} timed out") from e
        if result.returncode != 0:
            reason = result.stderr.strip() or f"tmux {args[0]} exited with {result.returncode}"
            raise TmuxError(reason)
        return result.stdout

    # -- discovery ---------------------------------------------------------

    def list_sessions(self) -> list[Session]:
        """List all tmux sessions with panes and agent status.

        Sorted attached-first, then by name.
        """
        try:
            output = self.run("list-sessions", "-F", SESSION_FORMAT)
        except TmuxError as e:
            if any(marker in str(e) for marker in _NO_SERVER_MARKERS):
                return []
            raise

        sessions: list[Session] = []
        for line in output.splitlines():
            parts = line.split("\t")
            if len(parts) < 4:
                continue
            name = parts[0]
            try:
                panes = self.list_panes(name)
            except TmuxError as e:
                logger.warning("Could not list panes for %s: %s", name, e)
                panes = []

            agent_pane, status, agent_path, pane_title = self._find_agent_pane(name, panes)
            working_directory = agent_path or (panes[0].current_path if panes else "")

            sessions.append(Session(
                name=name,
                created=_to_int(parts[1], 0),
                attached=_to_int(parts[2], 0) > 0,
                working_directory=working_directory,
                window_count=_to_int(parts[3], 1),
                panes=tuple(panes),
                agent_pane=agent_pane,
                status=status,
                pane_title=pane_title,
            ))

        sessions.sort(key=lambda s: (not s.attached, s.name))
        return sessions

    def list_panes(self, session_name: str) -> list[Pane]:
        """List all panes in a session."""
        output = self.run("list-panes", "-s", "-t", session_name, "-F", PANE_FORMAT)
        panes: list[Pane] = []
        for line in output.splitlines():
            parts = line.split("\t")
            if len(parts) < 5:
                continue
            panes.append(Pane(
                pane_id=parts[0],
                current_command=parts[1],
                current_path=parts[2],
                pid=_to_int(parts[3], 0),
                title=parts[4],
            ))
        return panes

    def _is_agent_process(self, pane: Pane) -> bool:
        if self.agent_command in pane.current_command:
            return True
        # pane_current_command can show a version string instead of the binary name
        if pane.pid > 0:
            try:
                result = subprocess.run(
                    ["ps", "-o", "command=", "-p", str(pane.pid)],
                    capture_output=True, text=True, timeout=2,
                )
            except (subprocess.TimeoutExpired, OSError):
                return False
            return self.agent_command in result.stdout
        return False

    def _status_of(self, pane_id: str) -> SessionStatus:
        try:
            content = self.capture_pane(pane_id, STATUS_CAPTURE_LINES, strip_empty=True)
        except TmuxError as e:
            logger.debug("Status capture failed for %s: %s", pane_id, e)
            return SessionStatus.UNKNOWN
        return detect_status(content)

    def _find_agent_pane(
        self, session_name: str, panes: list[Pane],
    ) -> tuple[str | None, SessionStatus, str | None, str]:
        """Return (pane_id, status, working_directory, pane_title) of the agent pane."""
        for pane in panes:
            if self._is_agent_process(pane):
                return pane.pane_id, self._status_of(pane.pane_id), pane.current_path, pane.title

        # Sessions created by us are named <agent prefix>_XXXXXXXX
        if session_name.startswith(self.agent_name_prefix) and panes:
            pane = panes[0]
            return pane.pane_id, self._status_of(pane.pane_id), pane.current_path, pane.title

        title = panes[0].title if panes else ""
        return None, SessionStatus.UNKNOWN, None, title

    def capture_pane(self, pane_id: str, lines: int, strip_empty: bool = False) -> str:
        """Capture the last N lines of a pane, escape sequences included.

        With strip_empty, blank lines are dropped before taking the tail (for
        status detection). Otherwise inner blank lines are kept and only
        trailing ones are trimmed (for the preview).
        """
        output = self.run("capture-pane", "-t", pane_id, "-p", "-J", "-e")
        all_lines = output.splitlines()
        if strip_empty:
            kept = [line for line in all_lines if line.strip()]
        else:
            end = len(all_lines)
            while end and not all_lines[end - 1].strip():
                end -= 1
            kept = all_lines[:end]
        return "\n".join(kept[-lines:] if lines else [])

    def is_inside_tmux(self) -> bool:
        return bool(os.environ.get("TMUX"))

    def current_session(self) -> str | None:
        """Name of the session this terminal is attached to, if any."""
        if not self.is_inside_tmux():
            return None
        try:
            name = self.run("display-message", "-p", "#{session_name}").strip()
        except TmuxError as e:
            logger.warning("Could not read current session: %s", e)
            return None
        return name or None

    # -- lifecycle ---------------------------------------------------------

    def switch_to(self, name: str) -> bool:
        """Switch this client to the session.

        Returns True when the switch happened in place (inside tmux). Outside
        tmux the session is only checked for existence and False is returned:
        the caller has to attach once it has released the terminal.
        """
        if self.is_inside_tmux():
            self.run("switch-client", "-t", name)
            return True
        self.run("has-session", "-t", name)
        return False

    def attach(self, name: str) -> None:
        """Replace the current process with ``tmux attach-session``."""
        try:
            os.execvp("tmux", ["tmux", "attach-session", "-t", name])
        except OSError as e:
            raise TmuxError(f"cannot exec tmux: {e}") from e

    def new_session(self, name: str, path: str, start_agent: bool) -> None:
        """Create a detached session, optionally starting the agent in it."""
        self.run("new-session", "-d", "-s", name, "-c", path)
        if start_agent:
            try:
                self.run("send-keys", "-t", name, self.agent_command, "Enter")
            except TmuxError as e:
                logger.warning("Session %s created but %s did not start: %s", name, self.agent_command, e)

    def rename_session(self, old_name: str, new_name: str) -> None:
        self.run("rename-session", "-t", old_name, new_name)

    def kill_session(self, name: str) -> None:
        self.run("kill-session", "-t", name)
