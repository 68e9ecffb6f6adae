"""Settings loaded from environment variables (+ optional .env file).

Every variable uses the TASKPANE_ prefix:

    TASKPANE_DB_PATH     SQLite file (default ./mybase.db)
    TASKPANE_SEED_DEMO   insert demo tasks into an empty database (default true)
    TASKPANE_LOG_DIR     directory for taskpane.log (default ~/.taskpane)
    TASKPANE_LOG_LEVEL   file log level (default INFO)
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

ENV_PREFIX = "TASKPANE"

DEFAULT_DB_PATH = Path("mybase.db")
DEFAULT_LOG_DIR = Path("~/.taskpane").expanduser()


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    db_path: Path
    seed_demo: bool
    log_dir: Path
    log_level: str

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            db_path=_env_path(_k("DB_PATH"), DEFAULT_DB_PATH),
            seed_demo=_env_bool(_k("SEED_DEMO"), True),
            log_dir=_env_path(_k("LOG_DIR"), DEFAULT_LOG_DIR),
            log_level=_env(_k("LOG_LEVEL"), "INFO").strip().upper() or "INFO",
        )


def get_settings(*, dotenv: bool = True) -> Settings:
    """Read settings, loading .env (searched upward from the cwd) unless dotenv is False.

    Real environment variables win over values from .env.
    """
    if dotenv:
        load_dotenv(find_dotenv(usecwd=True), override=False)
    return Settings.from_env()
