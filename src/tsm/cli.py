"""Command-line entry point: parse flags, load tmux state, run the UI."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from tsm.settings import Settings
from tsm.state import SessionBrowser
from tsm.tmux import TmuxClient, TmuxError

logger = logging.getLogger(__name__)

LOG_PATH = Path.home() / ".local" / "state" / "tsm" / "tsm.log"


def _version() -> str:
    try:
        return version("tsm")
    except PackageNotFoundError:
        return "unknown"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tsm",
        description="Browse, switch, create, rename and kill tmux sessions.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_version()}")
    parser.add_argument("--debug", action="store_true", help="Write debug logs to --log-file")
    parser.add_argument("--log-file", type=Path, help=f"Log destination (default: {LOG_PATH})")
    parser.add_argument("--no-preview", action="store_true", help="Start with the preview hidden")
    parser.add_argument(
        "--refresh-interval", type=float, metavar="SECONDS",
        help="Seconds between automatic refreshes",
    )
    return parser


def _configure_logging(debug: bool, log_file: Path | None) -> None:
    # The terminal belongs to the UI, so logs only ever go to a file
    if not debug and log_file is None:
        logging.getLogger().addHandler(logging.NullHandler())
        return
    path = log_file or LOG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=path,
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.debug, args.log_file)

    settings = Settings.load()
    if args.no_preview:
        settings = replace(settings, show_preview=False)
    if args.refresh_interval is not None:
        if args.refresh_interval <= 0:
            print("tsm: --refresh-interval must be positive", file=sys.stderr)
            return 2
        settings = replace(settings, refresh_interval=args.refresh_interval)

    client = TmuxClient(
        agent_command=settings.agent_command,
        agent_name_prefix=settings.agent_name_prefix,
    )
    try:
        browser = SessionBrowser.load(client, settings)
    except TmuxError as e:
        logger.error("Could not list tmux sessions: %s", e)
        print(f"tsm: could not list tmux sessions: {e}", file=sys.stderr)
        return 1

    # Imported late so --help and --version work without a terminal
    from tsm.app import run_app

    target = run_app(browser)
    if target:
        logger.info("Attaching to %s", target)
        try:
            client.attach(target)
        except TmuxError as e:
            print(f"tsm: could not attach to '{target}': {e}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
