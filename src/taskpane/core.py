"""View model and key-driven state machine (no terminal I/O)."""

import logging
from dataclasses import dataclass, field
from typing import List, Literal, Optional

from .errors import ValidationError
from .models import STATES, Stats, Task, is_state, is_state_prefix

logger = logging.getLogger(__name__)

Pane = Literal["active", "closed"]
Mode = Literal["normal", "edit"]
EditColumn = Literal["content", "state"]

KEY_QUIT = "q"
KEY_LEFT = "h"
KEY_RIGHT = "l"
KEY_NEXT = "j"
KEY_PREV = "k"
KEY_EDIT = "i"


@dataclass(frozen=True)
class KeyEvent:
    """One input event; char is only set for kind == "rune"."""

    kind: str  # rune | escape | enter | tab | backspace | ctrl_c | up | down | left | right | resize | other
    char: str = ""

    @classmethod
    def rune(cls, char: str) -> "KeyEvent":
        return cls("rune", char)


@dataclass
class ViewModel:
    """Everything the renderer needs, plus cursor and edit state."""

    active: List[Task] = field(default_factory=list)
    closed: List[Task] = field(default_factory=list)
    stats: Stats = field(default_factory=Stats)
    pane: Pane = "active"
    cursor: int = 0
    mode: Mode = "normal"
    edit_column: EditColumn = "content"
    edit_buffer: str = ""
    edit_pane: Pane = "active"
    message: str = ""

    def tasks_for(self, pane: Pane) -> List[Task]:
        return self.active if pane == "active" else self.closed

    @property
    def focused(self) -> List[Task]:
        return self.tasks_for(self.pane)

    def selected(self, pane: Optional[Pane] = None) -> Optional[Task]:
        """Task under the cursor in pane (default: focused pane), or None."""
        tasks = self.tasks_for(pane or self.pane)
        if 0 <= self.cursor < len(tasks):
            return tasks[self.cursor]
        return None


def clamp_cursor(view: ViewModel) -> None:
    """Keep 0 <= cursor < max(1, len(focused list))."""
    view.cursor = max(0, min(view.cursor, max(1, len(view.focused)) - 1))


def reload(view: ViewModel, store) -> None:
    """Re-query lists and stats, then swap them into the view together."""
    active = store.load_active()
    closed = store.load_closed()
    stats = store.load_stats()
    view.active, view.closed, view.stats = active, closed, stats
    clamp_cursor(view)


def load_view(store) -> ViewModel:
    view = ViewModel()
    reload(view, store)
    return view


# ---- normal mode ----

def focus_pane(view: ViewModel, pane: Pane) -> None:
    if view.pane != pane:
        view.pane = pane
        view.cursor = 0


def toggle_pane(view: ViewModel) -> None:
    view.pane = "closed" if view.pane == "active" else "active"
    view.cursor = 0


def move_cursor(view: ViewModel, delta: int) -> None:
    view.cursor += delta
    clamp_cursor(view)


def start_edit(view: ViewModel) -> bool:
    """Enter edit mode on the content of the selected active task."""
    if view.pane != "active" or not view.active:
        return False
    task = view.selected("active")
    if task is None:
        return False
    view.mode = "edit"
    view.edit_pane = "active"
    view.edit_column = "content"
    view.edit_buffer = task.content
    return True


def _handle_normal(view: ViewModel, event: KeyEvent) -> bool:
    view.message = ""
    kind, ch = event.kind, event.char

    if kind in ("escape", "ctrl_c") or (kind == "rune" and ch == KEY_QUIT):
        return False
    if kind == "tab":
        toggle_pane(view)
    elif kind == "right" or (kind == "rune" and ch == KEY_RIGHT):
        focus_pane(view, "closed")
    elif kind == "left" or (kind == "rune" and ch == KEY_LEFT):
        focus_pane(view, "active")
    elif kind == "down" or (kind == "rune" and ch == KEY_NEXT):
        move_cursor(view, +1)
    elif kind == "up" or (kind == "rune" and ch == KEY_PREV):
        move_cursor(view, -1)
    elif kind == "rune" and ch == KEY_EDIT:
        start_edit(view)
    return True


# ---- edit mode ----

def end_edit(view: ViewModel) -> None:
    view.mode = "normal"
    view.edit_buffer = ""


def toggle_edit_column(view: ViewModel) -> None:
    """Switch between content and state, reloading the buffer from the task."""
    task = view.selected(view.edit_pane)
    view.edit_column = "state" if view.edit_column == "content" else "content"
    if task is None:
        view.edit_buffer = ""
    elif view.edit_column == "state":
        view.edit_buffer = task.state
    else:
        view.edit_buffer = task.content


def type_char(view: ViewModel, ch: str) -> bool:
    """Append ch to the buffer; in the state column only valid prefixes are accepted."""
    candidate = view.edit_buffer + ch
    if view.edit_column == "state" and not is_state_prefix(candidate):
        return False
    view.edit_buffer = candidate
    return True


def backspace(view: ViewModel) -> None:
    if view.edit_buffer:
        view.edit_buffer = view.edit_buffer[:-1]


def save_current_edit(view: ViewModel, store) -> None:
    """Write the edit buffer to the store and reload the view.

    Raises ValidationError for an unknown state value (nothing is written).
    Store failures propagate unchanged.
    """
    task = view.selected(view.edit_pane)
    if task is None:
        return

    if view.edit_column == "content":
        store.update_content(task.id, view.edit_buffer)
    else:
        if not is_state(view.edit_buffer):
            raise ValidationError(
                f"invalid state: {view.edit_buffer!r} (expected one of {', '.join(STATES)})"
            )
        store.update_state(task.id, view.edit_buffer)

    logger.info("Committed %s edit for task %s", view.edit_column, task.id)
    reload(view, store)


def commit_edit(view: ViewModel, store) -> None:
    """Commit and return to normal mode; rejected values only set a message."""
    try:
        save_current_edit(view, store)
    except ValidationError as exc:
        logger.info("Edit rejected: %s", exc)
        view.message = str(exc)
    finally:
        end_edit(view)


def _handle_edit(view: ViewModel, event: KeyEvent, store) -> bool:
    kind = event.kind
    if kind == "escape":
        end_edit(view)
    elif kind == "enter":
        commit_edit(view, store)
    elif kind == "tab":
        toggle_edit_column(view)
    elif kind == "backspace":
        backspace(view)
    elif kind == "rune" and event.char:
        type_char(view, event.char)
    return True


def handle_key(view: ViewModel, event: KeyEvent, store) -> bool:
    """Dispatch one event; returns False when the run loop should stop."""
    if view.mode == "edit":
        return _handle_edit(view, event, store)
    return _handle_normal(view, event)
