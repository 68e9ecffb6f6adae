"""taskpane curses-based terminal user interface."""

import curses
import locale
import logging
import os
from typing import Dict, Optional, Union

from .core import KeyEvent, ViewModel, handle_key, reload
from .errors import TerminalError
from .render import (
    Grid,
    STYLE_ALERT,
    STYLE_BOLD,
    STYLE_DIM,
    STYLE_EDITING,
    STYLE_HIGHLIGHT,
    STYLE_NORMAL,
    render,
)

logger = logging.getLogger(__name__)

MIN_WIDTH = 20
MIN_HEIGHT = 8

_CHAR_KEYS = {
    "\x1b": "escape",
    "\n": "enter",
    "\r": "enter",
    "\t": "tab",
    "\x7f": "backspace",
    "\b": "backspace",
    "\x03": "ctrl_c",
}

_CODE_KEYS = {
    curses.KEY_UP: "up",
    curses.KEY_DOWN: "down",
    curses.KEY_LEFT: "left",
    curses.KEY_RIGHT: "right",
    curses.KEY_BACKSPACE: "backspace",
    curses.KEY_ENTER: "enter",
    curses.KEY_RESIZE: "resize",
}


def translate_key(ch: Union[str, int]) -> KeyEvent:
    """Map a get_wch() result to a KeyEvent."""
    if isinstance(ch, str):
        if ch in _CHAR_KEYS:
            return KeyEvent(_CHAR_KEYS[ch])
        if ch.isprintable():
            return KeyEvent.rune(ch)
        return KeyEvent("other")
    return KeyEvent(_CODE_KEYS.get(ch, "other"))


class CursesScreen:
    """The terminal capability the run loop needs, on top of a curses window."""

    def __init__(self, stdscr):
        self.stdscr = stdscr
        curses.curs_set(0)
        curses.raw()
        self.stdscr.keypad(True)

        self.styles: Dict[str, int] = {
            STYLE_NORMAL: curses.A_NORMAL,
            STYLE_BOLD: curses.A_BOLD,
            STYLE_DIM: curses.A_DIM,
            STYLE_HIGHLIGHT: curses.A_REVERSE,
            STYLE_EDITING: curses.A_STANDOUT | curses.A_BOLD,
            STYLE_ALERT: curses.A_BOLD,
        }
        if curses.has_colors():
            curses.start_color()
            try:
                curses.use_default_colors()
                background = -1
            except curses.error:
                background = curses.COLOR_BLACK
            curses.init_pair(1, curses.COLOR_BLACK, curses.COLOR_YELLOW)
            curses.init_pair(2, curses.COLOR_RED, background)
            self.styles[STYLE_EDITING] = curses.color_pair(1)
            self.styles[STYLE_ALERT] = curses.color_pair(2) | curses.A_BOLD

    def size(self):
        height, width = self.stdscr.getmaxyx()
        return width, height

    def clear(self) -> None:
        self.stdscr.erase()

    def draw(self, grid: Grid) -> None:
        """Copy the grid to the window, one run of equally styled cells at a time."""
        height, width = self.stdscr.getmaxyx()
        for y, row in enumerate(grid.rows[:height]):
            # Writing the bottom-right cell makes curses raise; leave it blank.
            limit = min(len(row), width - 1 if y == height - 1 else width)
            x = 0
            while x < limit:
                style = row[x].style
                end = x
                while end < limit and row[end].style == style:
                    end += 1
                text = "".join(c.char for c in row[x:end])
                try:
                    self.stdscr.addstr(y, x, text, self.styles.get(style, curses.A_NORMAL))
                except curses.error:
                    logger.debug("addstr failed at %d,%d", x, y)
                x = end

    def show(self) -> None:
        self.stdscr.refresh()

    def poll_event(self) -> KeyEvent:
        return translate_key(self.stdscr.get_wch())


class TUI:
    """Run loop tying the view model, renderer and terminal together."""

    def __init__(self, screen, store, view: Optional[ViewModel] = None):
        self.screen = screen
        self.store = store
        self.view = view if view is not None else ViewModel()

    def draw(self) -> None:
        width, height = self.screen.size()
        self.screen.clear()
        self.screen.draw(render(self.view, width, height))
        self.screen.show()

    def run(self) -> None:
        """Main event loop; returns on quit, store failures propagate."""
        reload(self.view, self.store)
        logger.info(
            "Loaded %d active and %d closed tasks",
            len(self.view.active),
            len(self.view.closed),
        )
        while True:
            self.draw()
            event = self.screen.poll_event()
            if not handle_key(self.view, event, self.store):
                logger.info("Quit requested")
                return


def check_size(screen) -> None:
    width, height = screen.size()
    if width < MIN_WIDTH or height < MIN_HEIGHT:
        raise TerminalError(
            f"terminal too small: {width}x{height} (need at least {MIN_WIDTH}x{MIN_HEIGHT})"
        )


def start_curses(store) -> None:
    """Initialize curses and run the TUI; the terminal is restored on every exit path."""

    def _main(stdscr):
        screen = CursesScreen(stdscr)
        check_size(screen)
        TUI(screen, store).run()

    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error as exc:
        # Unsupported LANG/LC_* value; keep the C locale.
        logger.warning("Cannot apply environment locale (%s); using C", exc)
    os.environ.setdefault("ESCDELAY", "25")
    try:
        curses.wrapper(_main)
    except curses.error as exc:
        raise TerminalError(f"cannot initialize terminal: {exc}") from exc
