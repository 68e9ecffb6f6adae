"""taskpane - two-pane terminal task tracker."""

__version__ = "1.0.0"

from .models import Task, Stats, STATES
from .errors import TaskpaneError, StoreError, ValidationError, TerminalError
from .storage import TaskStore
from .core import ViewModel, KeyEvent, handle_key, reload, save_current_edit
from .render import render

__all__ = [
    "Task",
    "Stats",
    "STATES",
    "TaskpaneError",
    "StoreError",
    "ValidationError",
    "TerminalError",
    "TaskStore",
    "ViewModel",
    "KeyEvent",
    "handle_key",
    "reload",
    "save_current_edit",
    "render",
]
