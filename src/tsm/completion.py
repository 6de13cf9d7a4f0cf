"""Directory-aware path completion for the new-session dialog."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from tsm.models import shorten_home

logger = logging.getLogger(__name__)


@dataclass
class PathCompletion:
    suggestions: list[str] = field(default_factory=list)
    # Suffix shown dimmed after the cursor; accepting copies the whole top suggestion
    ghost_text: str | None = None


def expand_path(path: str) -> str:
    """Expand a leading ``~`` the way a shell would."""
    return os.path.expanduser(path.strip())


def _expand_for_completion(text: str) -> tuple[str, bool]:
    """Return (expanded, used_tilde)."""
    home = os.path.expanduser("~")
    if text.startswith("~/"):
        return os.path.join(home, text[2:]), True
    if text == "~":
        return home, True
    return text, text.startswith("~")


def complete_path(partial: str) -> PathCompletion:
    """Suggest directory entries completing ``partial``.

    Directories come first, then files, each in case-insensitive order.
    Hidden entries are only offered once the typed prefix starts with a dot.
    """
    partial = partial.strip()
    if not partial:
        return _complete_in_directory(".", "", uses_tilde=False)

    expanded, uses_tilde = _expand_for_completion(partial)

    if partial.endswith("/"):
        if os.path.isdir(expanded):
            return _complete_in_directory(expanded, "", uses_tilde)
        return PathCompletion()

    directory, prefix = os.path.split(expanded)
    if not directory:
        directory = "."
    if not os.path.exists(directory):
        return PathCompletion()

    return _complete_in_directory(directory, prefix, uses_tilde)


def _complete_in_directory(directory: str, prefix: str, uses_tilde: bool) -> PathCompletion:
    prefix_lower = prefix.lower()
    matches: list[tuple[str, bool]] = []
    try:
        with os.scandir(directory) as entries:
            for entry in entries:
                name = entry.name
                if prefix and not name.lower().startswith(prefix_lower):
                    continue
                if name.startswith(".") and not prefix.startswith("."):
                    continue
                try:
                    is_dir = entry.is_dir()
                except OSError:
                    is_dir = False
                matches.append((_display_path(directory, name, uses_tilde, is_dir), is_dir))
    except OSError as e:
        logger.debug("Completion skipped %s: %s", directory, e)
        return PathCompletion()

    matches.sort(key=lambda m: (not m[1], m[0].lower()))
    suggestions = [display for display, _ in matches]
    return PathCompletion(suggestions=suggestions, ghost_text=_ghost_text(prefix, suggestions))


def _display_path(directory: str, name: str, uses_tilde: bool, is_dir: bool) -> str:
    # Entries of the working directory are shown bare, without "./"
    display = name if directory == "." else os.path.join(directory, name)
    if uses_tilde:
        display = shorten_home(display)
    if is_dir and not display.endswith("/"):
        display += "/"
    return display


def _ghost_text(prefix: str, suggestions: list[str]) -> str | None:
    if not suggestions:
        return None
    top = suggestions[0]
    # A directory's own trailing slash belongs to its final segment
    sep = top.rstrip("/").rfind("/")
    segment = top[sep + 1:]
    if not segment.lower().startswith(prefix.lower()):
        return None
    return segment[len(prefix):] or None
