"""Dev mode: rerun tsm whenever its Python or stylesheet sources change.

Extra arguments are passed through, so ``tsm-dev --no-preview`` restarts
``tsm --debug --no-preview``.
"""

from __future__ import annotations

import shlex
import sys
from pathlib import Path

from watchfiles import DefaultFilter, run_process

SOURCE_DIR = Path(__file__).resolve().parent
WATCHED_SUFFIXES = (".py", ".tcss")


class SourceFilter(DefaultFilter):
    """Default ignores (caches, editor swap files) plus a suffix allow-list."""

    def __call__(self, change, path: str) -> bool:
        return path.endswith(WATCHED_SUFFIXES) and super().__call__(change, path)


def command(argv: list[str]) -> str:
    return shlex.join(["tsm", "--debug", *argv])


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    try:
        run_process(SOURCE_DIR, target=command(args), target_type="command", watch_filter=SourceFilter())
    except KeyboardInterrupt:
        pass
    return 0
