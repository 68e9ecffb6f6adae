"""taskpane command-line entry point."""

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import Settings, get_settings
from .errors import TaskpaneError
from .logging_setup import level_from_name, setup_logging
from .storage import TaskStore

logger = logging.getLogger(__name__)


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    p = argparse.ArgumentParser(
        prog="taskpane",
        description="Two-pane terminal task tracker (active vs. closed tasks).",
    )
    p.add_argument(
        "--db",
        type=Path,
        default=settings.db_path,
        help=f"Path to the SQLite database (default: {settings.db_path})",
    )
    p.add_argument(
        "--no-seed",
        action="store_true",
        help="Do not insert demo tasks into an empty database",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def apply_args(settings: Settings, args: argparse.Namespace) -> Settings:
    """Command-line flags override environment settings."""
    return dataclasses.replace(
        settings,
        db_path=args.db,
        seed_demo=settings.seed_demo and not args.no_seed,
    )


def run(settings: Settings) -> None:
    """Open the store, run the TUI, and close the store on every exit path."""
    from .tui import start_curses

    with TaskStore(settings.db_path, seed=settings.seed_demo) as store:
        start_curses(store)


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point. Exits non-zero with a one-line message on fatal errors."""
    settings = get_settings()
    args = build_parser(settings).parse_args(argv)
    settings = apply_args(settings, args)

    try:
        log_file = setup_logging(
            log_dir=settings.log_dir, file_level=level_from_name(settings.log_level)
        )
    except OSError as exc:
        sys.exit(f"taskpane: cannot set up logging in {settings.log_dir}: {exc}")

    logger.info("Starting taskpane %s db=%s log=%s", __version__, settings.db_path, log_file)
    try:
        run(settings)
    except TaskpaneError as exc:
        logger.error("Fatal: %s", exc, exc_info=True)
        sys.exit(f"taskpane: {exc}")
    logger.info("Bye.")


if __name__ == "__main__":
    main()
