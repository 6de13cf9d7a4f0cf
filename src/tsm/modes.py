"""UI modes and session actions.

Exactly one mode is active at a time; it decides both what is drawn and
where keys go. Modes are immutable values, transitions swap them out.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class SessionAction(Enum):
    SWITCH_TO = "switch"
    RENAME = "rename"
    KILL = "kill"

    @property
    def label(self) -> str:
        return _ACTION_LABELS[self]

    @property
    def requires_confirmation(self) -> bool:
        return self is SessionAction.KILL


_ACTION_LABELS = {
    SessionAction.SWITCH_TO: "Switch to session",
    SessionAction.RENAME: "Rename session",
    SessionAction.KILL: "Kill session",
}

SESSION_ACTIONS = (SessionAction.SWITCH_TO, SessionAction.RENAME, SessionAction.KILL)


class NewSessionField(Enum):
    START_WITH = "start_with"
    NAME = "name"
    PATH = "path"

    def next(self) -> NewSessionField:
        fields = list(NewSessionField)
        return fields[(fields.index(self) + 1) % len(fields)]

    def prev(self) -> NewSessionField:
        fields = list(NewSessionField)
        return fields[(fields.index(self) - 1) % len(fields)]


@dataclass(frozen=True)
class Normal:
    pass


@dataclass(frozen=True)
class ActionMenu:
    pass


@dataclass(frozen=True)
class Filter:
    input: str = ""


@dataclass(frozen=True)
class ConfirmAction:
    # Target fixed when the dialog opens; refreshes may move the selection
    session_name: str


@dataclass(frozen=True)
class NewSession:
    name: str
    path: str
    field: NewSessionField = NewSessionField.START_WITH
    path_suggestions: tuple[str, ...] = ()
    path_selected: int | None = None
    start_agent: bool = True


@dataclass(frozen=True)
class Rename:
    old_name: str
    new_name: str


@dataclass(frozen=True)
class Help:
    pass


Mode = Union[Normal, ActionMenu, Filter, ConfirmAction, NewSession, Rename, Help]
