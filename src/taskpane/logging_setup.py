"""Logging configuration for taskpane."""

import logging
import sys
from pathlib import Path
from typing import Union

LOG_FILE_NAME = "taskpane.log"


def setup_logging(
    *,
    log_dir: Union[str, Path],
    file_level: int = logging.INFO,
    console_level: int = logging.CRITICAL,
) -> Path:
    """
    Configure logging with:
    - File handler: the full log, at file_level
    - Console handler on stderr: critical only, since curses owns the screen
      and fatal errors are reported by the CLI itself

    Call this once, before the terminal is taken over. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(min(file_level, console_level))

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root.addHandler(ch)

    logging.captureWarnings(True)
    return log_file


def level_from_name(name: str, default: int = logging.INFO) -> int:
    """Translate 'DEBUG', 'info', ... into a logging level."""
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else default
