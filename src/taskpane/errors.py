"""Exception types raised by taskpane."""


class TaskpaneError(Exception):
    """Base class for all taskpane errors."""


class StoreError(TaskpaneError):
    """Connection, query or write failure against the task database."""


class ValidationError(TaskpaneError):
    """A user-entered value was rejected before reaching the database."""


class TerminalError(TaskpaneError):
    """The terminal could not be initialized or is too small."""
