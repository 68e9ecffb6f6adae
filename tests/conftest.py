# tests/conftest.py

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from taskpane.core import ViewModel, load_view
from taskpane.storage import TaskStore


@pytest.fixture()
def store(tmp_path: Path) -> Iterator[TaskStore]:
    """Empty SQLite store in a temp dir, closed after the test."""
    with TaskStore(tmp_path / "tasks.db") as s:
        yield s


@pytest.fixture()
def seeded_store(tmp_path: Path) -> Iterator[TaskStore]:
    """Store holding the ten demo tasks."""
    with TaskStore(tmp_path / "seeded.db", seed=True) as s:
        yield s


@pytest.fixture()
def view(store: TaskStore) -> ViewModel:
    """
    Three open tasks and one closed task, loaded into a fresh view.

    ids: 1 "alpha", 2 "beta", 3 "gamma" (open), 4 "done" (closed)
    """
    store.add_task("alpha", spoc="Ann")
    store.add_task("beta")
    store.add_task("gamma", spoc="Bob")
    store.add_task("done", state="closed")
    return load_view(store)
