"""Route key presses to SessionBrowser operations according to the mode."""

from __future__ import annotations

from tsm.modes import (
    ActionMenu,
    ConfirmAction,
    Filter,
    Help,
    NewSession,
    NewSessionField,
    Normal,
    Rename,
)
from tsm.state import SessionBrowser


def key_token(key: str, character: str | None) -> str:
    """Printable keys by their character (``K``, ``?``, `` ``), others by name."""
    if character is not None and len(character) == 1 and character.isprintable():
        return character
    return key


def _normal(browser: SessionBrowser, token: str) -> bool:
    if token in ("q", "ctrl+c"):
        browser.quit()
    elif token in ("j", "down"):
        browser.select_next()
    elif token in ("k", "up"):
        browser.select_prev()
    elif token in ("l", "right"):
        browser.enter_action_menu()
    elif token == "enter":
        browser.switch_to_selected()
    elif token == " ":
        browser.switch_to_selected_stay()
    elif token == "n":
        browser.start_new_session()
    elif token == "r":
        browser.start_rename()
    elif token == "K":
        browser.start_kill()
    elif token == "R":
        browser.refresh()
    elif token == "p":
        browser.toggle_preview()
    elif token == "/":
        browser.start_filter()
    elif token == "?":
        browser.show_help()
    elif token == "escape":
        browser.clear_messages()
        browser.clear_filter()
    else:
        return False
    return True


def _action_menu(browser: SessionBrowser, token: str) -> bool:
    if token in ("j", "down"):
        browser.select_next_action()
    elif token in ("k", "up"):
        browser.select_prev_action()
    elif token in ("enter", "l", "right"):
        browser.execute_selected_action()
    elif token in ("h", "left", "escape"):
        browser.cancel()
    elif token in ("q", "ctrl+c"):
        browser.quit()
    else:
        return False
    return True


def _confirm(browser: SessionBrowser, token: str) -> bool:
    if token in ("y", "Y", "enter"):
        browser.confirm_action()
    elif token in ("n", "N", "escape"):
        browser.cancel()
    else:
        return False
    return True


def _text_entry(browser: SessionBrowser, token: str, on_enter) -> bool:
    if token == "enter":
        on_enter()
    elif token == "escape":
        browser.cancel()
    elif token == "backspace":
        browser.backspace()
    elif len(token) == 1:
        browser.type_char(token)
    else:
        return False
    return True


def _new_session(browser: SessionBrowser, mode: NewSession, token: str) -> bool:
    if token == "escape":
        browser.cancel()
    elif token == "enter":
        browser.confirm_new_session()
    elif token == "tab":
        if mode.field is NewSessionField.PATH and mode.path_selected is not None:
            browser.accept_new_session_path_completion()
        else:
            browser.next_new_session_field()
    elif token == "shift+tab":
        browser.prev_new_session_field()
    elif mode.field is NewSessionField.START_WITH:
        if token in ("left", "right", "h", "l", " "):
            browser.toggle_start_agent()
        elif token == "down":
            browser.next_new_session_field()
        elif token == "up":
            browser.prev_new_session_field()
        else:
            return False
    elif mode.field is NewSessionField.PATH:
        if token == "up":
            browser.select_prev_new_session_path()
        elif token == "down":
            browser.select_next_new_session_path()
        elif token == "right":
            browser.accept_new_session_path_completion()
        elif token == "backspace":
            browser.backspace()
        elif len(token) == 1:
            browser.type_char(token)
        else:
            return False
    else:
        if token == "down":
            browser.next_new_session_field()
        elif token == "up":
            browser.prev_new_session_field()
        elif token == "backspace":
            browser.backspace()
        elif len(token) == 1:
            browser.type_char(token)
        else:
            return False
    return True


def dispatch_key(browser: SessionBrowser, key: str, character: str | None = None) -> bool:
    """Apply one key press. Returns True if the key meant something in this mode."""
    token = key_token(key, character)
    mode = browser.mode

    if isinstance(mode, Normal):
        return _normal(browser, token)
    if isinstance(mode, ActionMenu):
        return _action_menu(browser, token)
    if isinstance(mode, ConfirmAction):
        return _confirm(browser, token)
    if isinstance(mode, Filter):
        return _text_entry(browser, token, browser.apply_filter)
    if isinstance(mode, Rename):
        return _text_entry(browser, token, browser.confirm_rename)
    if isinstance(mode, NewSession):
        return _new_session(browser, mode, token)
    if isinstance(mode, Help):
        browser.cancel()
        return True
    raise TypeError(f"unhandled mode {mode!r}")
