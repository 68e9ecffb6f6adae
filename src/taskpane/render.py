"""Pure rendering of a ViewModel into a grid of styled cells.

Nothing here touches the terminal: render() returns a Grid that the
curses adapter in tui.py copies to the screen, and that tests can inspect
directly.

Layout (width W, height H, half = W // 2):

    row 0           titles
    row 2           column headers
    row 4..         task rows (focused pane scrolls to keep the cursor visible)
    H-7             right half: "Statistics" rule
    H-6..H-2        right half: five statistics lines
    H-2             left half: status message (if any)
    H-1             key help
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .core import ViewModel
from .models import Task

STYLE_NORMAL = "normal"
STYLE_BOLD = "bold"
STYLE_DIM = "dim"
STYLE_HIGHLIGHT = "highlight"
STYLE_EDITING = "editing"
STYLE_ALERT = "alert"

HEADERS = ("ID", "Content", "SPOC", "State")
ID_WIDTH = 4
SPOC_WIDTH = 15
STATE_WIDTH = 11
CONTENT_RESERVE = 35
ELLIPSIS = "..."

LIST_TOP = 2
ROWS_OFFSET = 2
STATS_ROWS = 6

EDIT_COLUMN_INDEX = {"content": 1, "state": 3}

HELP_TEXT = (
    "j/k ↑/↓: Move | h/l Tab: Switch pane | i: Edit | "
    "Enter: Save | Esc: Cancel | Tab (edit): Content/State | q: Quit"
)


@dataclass(frozen=True)
class Cell:
    char: str = " "
    style: str = STYLE_NORMAL


BLANK = Cell()


class Grid:
    """Fixed-size character grid; writes outside the bounds are dropped."""

    def __init__(self, width: int, height: int):
        self.width = max(0, width)
        self.height = max(0, height)
        self.rows: List[List[Cell]] = [[BLANK] * self.width for _ in range(self.height)]

    def put(self, x: int, y: int, char: str, style: str = STYLE_NORMAL) -> None:
        if 0 <= x < self.width and 0 <= y < self.height:
            self.rows[y][x] = Cell(char, style)

    def text(self, x: int, y: int, text: str, style: str = STYLE_NORMAL,
             limit: Optional[int] = None) -> None:
        """Write text left to right from (x, y), at most limit characters."""
        if limit is not None:
            text = text[: max(0, limit)]
        for i, ch in enumerate(text):
            self.put(x + i, y, ch, style)

    def fill(self, x: int, y: int, length: int, char: str = " ",
             style: str = STYLE_NORMAL) -> None:
        for i in range(max(0, length)):
            self.put(x + i, y, char, style)

    def row_text(self, y: int) -> str:
        return "".join(c.char for c in self.rows[y])

    def style_at(self, x: int, y: int) -> str:
        return self.rows[y][x].style

    def lines(self) -> List[str]:
        return [self.row_text(y) for y in range(self.height)]


def column_widths(pane_width: int) -> List[int]:
    return [ID_WIDTH, max(1, pane_width - CONTENT_RESERVE), SPOC_WIDTH, STATE_WIDTH]


def truncate(value: str, width: int) -> str:
    """Cut value to width, ending in '...' when it had to be shortened."""
    if len(value) <= width:
        return value
    if width <= len(ELLIPSIS):
        return value[:width]
    return value[: width - len(ELLIPSIS)] + ELLIPSIS


def _single_line(value: str) -> str:
    return " ".join(value.splitlines()).replace("\t", " ")


def _task_fields(task: Task) -> List[str]:
    return [str(task.id), _single_line(task.content), _single_line(task.spoc or ""), task.state]


def scroll_offset(cursor: int, visible_rows: int) -> int:
    if visible_rows <= 0:
        return 0
    return max(0, cursor - visible_rows + 1)


def draw_task_list(grid: Grid, view: ViewModel, x: int, y: int, width: int,
                   max_rows: int, tasks: Sequence[Task], pane: str) -> None:
    """Header plus task rows for one pane, at most max_rows task rows.

    Nothing is written at or beyond x + width, so narrow panes lose their
    rightmost columns instead of spilling into the neighbouring pane.
    """
    widths = column_widths(width)
    focused = view.pane == pane
    editing = view.mode == "edit" and view.edit_pane == pane
    right = x + max(0, width)

    cx = x
    for header, w in zip(HEADERS, widths):
        grid.text(cx, y, header, STYLE_BOLD, limit=min(w, right - cx))
        cx += w + 1

    visible = max(0, max_rows)
    offset = scroll_offset(view.cursor, visible) if focused else 0
    for i in range(offset, min(len(tasks), offset + visible)):
        row_y = y + ROWS_OFFSET + (i - offset)
        selected = focused and i == view.cursor
        row_style = STYLE_HIGHLIGHT if selected else STYLE_NORMAL
        if selected:
            grid.fill(x, row_y, min(width, sum(widths) + len(widths) - 1), style=row_style)

        cx = x
        for col, (value, w) in enumerate(zip(_task_fields(tasks[i]), widths)):
            if editing and i == view.cursor and col == EDIT_COLUMN_INDEX[view.edit_column]:
                shown = view.edit_buffer[-w:] if len(view.edit_buffer) > w else view.edit_buffer
                grid.fill(cx, row_y, min(max(1, len(shown)), right - cx), style=STYLE_EDITING)
                grid.text(cx, row_y, shown, STYLE_EDITING, limit=right - cx)
            else:
                grid.text(cx, row_y, truncate(value, w), row_style, limit=right - cx)
            cx += w + 1


def stats_lines(view: ViewModel) -> List[str]:
    s = view.stats
    return [
        f"Open Tasks: {s.open}",
        f"In Progress: {s.in_progress}",
        f"Completed: {s.closed}",
        f"Cancelled: {s.cancelled}",
        f"Avg Completion Time: {s.avg_completion_days:.1f} days",
    ]


def render(view: ViewModel, width: int, height: int) -> Grid:
    """Lay out both panes, statistics and help for a width x height viewport."""
    grid = Grid(width, height)
    if grid.width == 0 or grid.height == 0:
        return grid

    half = width // 2
    footer_y = height - 1
    stats_y = footer_y - STATS_ROWS
    message_y = footer_y - 1
    rows_top = LIST_TOP + ROWS_OFFSET

    for y in range(footer_y):
        grid.put(half, y, "│")

    grid.text(2, 0, "Active Tasks", STYLE_BOLD, limit=half - 2)
    grid.text(half + 2, 0, "Completed Tasks", STYLE_BOLD)

    left_width = half - 2
    right_width = width - half - 2
    draw_task_list(grid, view, 1, LIST_TOP, left_width, message_y - rows_top,
                   view.active, "active")
    draw_task_list(grid, view, half + 1, LIST_TOP, right_width, stats_y - rows_top,
                   view.closed, "closed")

    grid.fill(half + 1, stats_y, width - half - 1, "─")
    grid.text(half + 2, stats_y, " Statistics ", STYLE_BOLD)
    for i, line in enumerate(stats_lines(view), start=1):
        grid.text(half + 2, stats_y + i, line)

    if view.message:
        grid.text(1, message_y, view.message, STYLE_ALERT, limit=half - 2)

    grid.text(1, footer_y, HELP_TEXT, STYLE_DIM, limit=width - 2)
    return grid
