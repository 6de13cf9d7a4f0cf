"""Shared fixtures: an in-memory stand-in for TmuxClient and a session factory."""

from __future__ import annotations

import pytest

from tsm.models import Pane, Session, SessionStatus
from tsm.settings import Settings
from tsm.state import SessionBrowser
from tsm.tmux import TmuxError


def make_session(
    name: str,
    created: int = 0,
    path: str = "/work",
    status: SessionStatus = SessionStatus.UNKNOWN,
    attached: bool = False,
) -> Session:
    return Session(
        name=name,
        created=created,
        attached=attached,
        working_directory=path,
        panes=(Pane(pane_id=f"%{name}", current_path=path),),
        status=status,
    )


class FakeClient:
    """Records calls and serves sessions from a list; ``fail`` makes a method raise."""

    def __init__(self, sessions=None, inside_tmux: bool = True, current: str | None = None):
        self.sessions = list(sessions or [])
        self.inside_tmux = inside_tmux
        self.current = current
        self.calls: list[tuple] = []
        self.fail: set[str] = set()

    def _check(self, method: str) -> None:
        if method in self.fail:
            raise TmuxError(f"{method} broke")

    def list_sessions(self):
        self._check("list_sessions")
        return list(self.sessions)

    def current_session(self):
        return self.current

    def capture_pane(self, pane_id, lines, strip_empty=False):
        self._check("capture_pane")
        return f"preview of {pane_id}"

    def is_inside_tmux(self):
        return self.inside_tmux

    def switch_to(self, name):
        self._check("switch_to")
        self.calls.append(("switch_to", name))
        return self.inside_tmux

    def new_session(self, name, path, start_agent):
        self._check("new_session")
        self.calls.append(("new_session", name, path, start_agent))
        self.sessions.append(make_session(name, created=10**9, path=path))

    def rename_session(self, old_name, new_name):
        self._check("rename_session")
        self.calls.append(("rename_session", old_name, new_name))
        self.sessions = [
            Session(new_name, s.created, s.attached, s.working_directory, panes=s.panes)
            if s.name == old_name else s
            for s in self.sessions
        ]

    def kill_session(self, name):
        self._check("kill_session")
        self.calls.append(("kill_session", name))
        self.sessions = [s for s in self.sessions if s.name != name]


@pytest.fixture
def client():
    return FakeClient([
        make_session("api", created=1, path="/code/api"),
        make_session("api-tests", created=2, path="/code/api"),
        make_session("notes", created=3, path="/notes"),
    ])


@pytest.fixture
def browser(client):
    return SessionBrowser.load(client, Settings())
