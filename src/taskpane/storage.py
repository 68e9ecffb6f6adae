"""SQLite persistence for taskpane tasks."""

import contextlib
import logging
import sqlite3
from pathlib import Path
from typing import Iterator, List, Optional, Union

from .errors import StoreError
from .models import ACTIVE_STATES, CLOSED_STATES, Stats, Task, parse_timestamp

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS task (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    closed_at TIMESTAMP NULL,
    task_state TEXT CHECK(task_state IN ('open', 'in_progress', 'closed', 'cancelled')) DEFAULT 'open',
    task_content TEXT NOT NULL,
    task_spoc TEXT NULL
);

CREATE TRIGGER IF NOT EXISTS update_task_timestamp
    AFTER UPDATE ON task
BEGIN
    UPDATE task SET updated_at = CURRENT_TIMESTAMP
    WHERE id = NEW.id;
END;
"""

# (content, spoc, state, created offset, closed offset); offsets are SQLite modifiers.
DEMO_TASKS = [
    ("Setup development environment for new project", "John Doe", "closed", "-9 days", "-5 days"),
    ("Review pull request #123 for authentication module", "Jane Smith", "in_progress", "-3 days", None),
    ("Investigate performance issues in production", "Mike Johnson", "open", "-2 days", None),
    ("Update documentation for API endpoints", "Sarah Wilson", "open", "-2 days", None),
    ("Fix bug in user registration flow", "John Doe", "in_progress", "-1 days", None),
    ("Deploy v2.0 to staging environment", "Jane Smith", "cancelled", "-4 days", "-1 days"),
    ("Implement new dashboard features", "Mike Johnson", "open", "-1 days", None),
    ("Conduct security audit", "Sarah Wilson", "open", "-0 days", None),
    ("Optimize database queries", "John Doe", "in_progress", "-0 days", None),
    ("Setup monitoring alerts", "Jane Smith", "closed", "-6 days", "-2 days"),
]

_SELECT_TASKS = """
    SELECT id, task_content, task_spoc, task_state, created_at, closed_at
    FROM task
    WHERE task_state IN ({placeholders})
    ORDER BY id
"""

_SELECT_STATS = """
    SELECT
        COUNT(CASE WHEN task_state = 'open' THEN 1 END),
        COUNT(CASE WHEN task_state = 'in_progress' THEN 1 END),
        COUNT(CASE WHEN task_state = 'closed' THEN 1 END),
        COUNT(CASE WHEN task_state = 'cancelled' THEN 1 END),
        AVG(CASE
            WHEN task_state = 'closed' AND closed_at IS NOT NULL
            THEN JULIANDAY(closed_at) - JULIANDAY(created_at)
        END)
    FROM task
"""


@contextlib.contextmanager
def _store_errors(action: str) -> Iterator[None]:
    """Re-raise sqlite3 failures as StoreError."""
    try:
        yield
    except sqlite3.Error as exc:
        raise StoreError(f"{action}: {exc}") from exc


class TaskStore:
    """
    SQLite task store.

    Owns one connection for its whole lifetime; use it as a context
    manager (or call close()) so the connection is always released.
    """

    def __init__(self, db_path: Union[str, Path] = "mybase.db", *, seed: bool = False) -> None:
        self._db_path = Path(db_path)
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreError(f"error opening database: {exc}") from exc

        with _store_errors("error opening database"):
            self._conn: Optional[sqlite3.Connection] = sqlite3.connect(str(self._db_path))
        self._conn.row_factory = sqlite3.Row

        try:
            with _store_errors("error connecting to database"):
                self._conn.execute("SELECT 1").fetchone()
            with _store_errors("error creating schema"):
                self._conn.executescript(SCHEMA)
            if seed:
                self.seed_demo_tasks()
        except StoreError:
            self.close()
            raise

        logger.info("TaskStore ready db=%s total=%s", self._db_path, self.count_tasks())

    def __enter__(self) -> "TaskStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug("TaskStore closed db=%s", self._db_path)

    @property
    def path(self) -> Path:
        return self._db_path

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreError("database connection is closed")
        return self._conn

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            content=str(row["task_content"] or ""),
            spoc=row["task_spoc"],
            state=row["task_state"],
            created=parse_timestamp(row["created_at"]),
            closed=parse_timestamp(row["closed_at"]),
        )

    def _load_where_state_in(self, states) -> List[Task]:
        sql = _SELECT_TASKS.format(placeholders=", ".join("?" for _ in states))
        with _store_errors("error loading tasks"):
            rows = self._get_conn().execute(sql, tuple(states)).fetchall()
        return [self._row_to_task(r) for r in rows]

    def _execute_update(self, sql: str, params: tuple, task_id: int) -> None:
        conn = self._get_conn()
        with _store_errors(f"error updating task {task_id}"):
            with conn:
                cur = conn.execute(sql, params)
                if cur.rowcount == 0:
                    raise StoreError(f"no task with id {task_id}")

    # ---- queries ----

    def load_active(self) -> List[Task]:
        """Tasks that are open or in progress, ascending id."""
        return self._load_where_state_in(ACTIVE_STATES)

    def load_closed(self) -> List[Task]:
        """Tasks that are closed or cancelled, ascending id."""
        return self._load_where_state_in(CLOSED_STATES)

    def load_stats(self) -> Stats:
        with _store_errors("error loading stats"):
            row = self._get_conn().execute(_SELECT_STATS).fetchone()
        open_, in_progress, closed, cancelled, avg_days = tuple(row)
        return Stats(
            open=int(open_),
            in_progress=int(in_progress),
            closed=int(closed),
            cancelled=int(cancelled),
            avg_completion_days=float(avg_days) if avg_days is not None else 0.0,
        )

    def count_tasks(self) -> int:
        with _store_errors("error counting tasks"):
            (n,) = self._get_conn().execute("SELECT COUNT(*) FROM task").fetchone()
        return int(n)

    # ---- writes ----

    def update_content(self, task_id: int, content: str) -> None:
        self._execute_update(
            "UPDATE task SET task_content = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (content, task_id),
            task_id,
        )
        logger.info("Updated content of task %s", task_id)

    def update_state(self, task_id: int, state: str) -> None:
        """Set task_state; moving to 'closed' stamps closed_at in the same statement.

        The value is not checked here; the schema CHECK rejects unknown states.
        """
        sql = "UPDATE task SET task_state = ?, updated_at = CURRENT_TIMESTAMP"
        if state == "closed":
            sql += ", closed_at = CURRENT_TIMESTAMP"
        sql += " WHERE id = ?"
        self._execute_update(sql, (state, task_id), task_id)
        logger.info("Updated state of task %s to %s", task_id, state)

    def add_task(self, content: str, spoc: Optional[str] = None, state: str = "open") -> int:
        """Insert a task and return its id; closed tasks get closed_at stamped."""
        if not content or not content.strip():
            raise ValueError("content is required")
        conn = self._get_conn()
        closed_at = "CURRENT_TIMESTAMP" if state == "closed" else "NULL"
        with _store_errors("error adding task"):
            with conn:
                cur = conn.execute(
                    "INSERT INTO task (task_content, task_spoc, task_state, closed_at) "
                    f"VALUES (?, ?, ?, {closed_at})",
                    (content, spoc, state),
                )
        task_id = int(cur.lastrowid)
        logger.debug("Added task %s state=%s", task_id, state)
        return task_id

    def seed_demo_tasks(self) -> int:
        """Insert the demo rows when the table is empty; return how many were added."""
        if self.count_tasks() > 0:
            return 0
        conn = self._get_conn()
        with _store_errors("error seeding database"):
            with conn:
                conn.executemany(
                    "INSERT INTO task (task_content, task_spoc, task_state, created_at, closed_at) "
                    "VALUES (?, ?, ?, DATETIME('now', ?), "
                    "CASE WHEN ? IS NULL THEN NULL ELSE DATETIME('now', ?) END)",
                    [
                        (content, spoc, state, created, closed, closed)
                        for content, spoc, state, created, closed in DEMO_TASKS
                    ],
                )
        logger.info("Seeded %d demo tasks into %s", len(DEMO_TASKS), self._db_path)
        return len(DEMO_TASKS)
