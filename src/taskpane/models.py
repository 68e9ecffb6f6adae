"""Data models and constants for taskpane."""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional, Tuple

TaskState = Literal["open", "in_progress", "closed", "cancelled"]

STATES: Tuple[str, ...] = ("open", "in_progress", "closed", "cancelled")
ACTIVE_STATES: Tuple[str, ...] = ("open", "in_progress")
CLOSED_STATES: Tuple[str, ...] = ("closed", "cancelled")

# SQLite CURRENT_TIMESTAMP format (UTC).
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def is_state(value: str) -> bool:
    """True if value is exactly one of the accepted task states."""
    return value in STATES


def is_state_prefix(value: str) -> bool:
    """True if value is a case-sensitive prefix of at least one task state."""
    return any(state.startswith(value) for state in STATES)


def parse_timestamp(raw: Optional[str]) -> Optional[datetime]:
    """Parse a stored timestamp; None stays None."""
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    try:
        return datetime.strptime(text, TIMESTAMP_FORMAT)
    except ValueError:
        return datetime.fromisoformat(text)


@dataclass
class Task:
    """A single persisted task row."""

    id: int
    content: str
    spoc: Optional[str]
    state: TaskState  # "open" | "in_progress" | "closed" | "cancelled"
    created: datetime
    closed: Optional[datetime] = None


@dataclass
class Stats:
    """Aggregate counts over all tasks.

    avg_completion_days is 0.0 when no closed task carries a closed time.
    """

    open: int = 0
    in_progress: int = 0
    closed: int = 0
    cancelled: int = 0
    avg_completion_days: float = 0.0
