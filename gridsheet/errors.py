class GridError(Exception):
    """Base class for recoverable grid-editing failures."""

    message = "Grid operation failed."

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.message)


class OutOfBounds(GridError, IndexError):
    message = "Cell position is outside the grid."


class EmptySelection(GridError, ValueError):
    message = "Nothing is selected."


class AtBoundary(GridError):
    message = "No more history in that direction."


class ClipboardUnavailable(GridError, OSError):
    message = "The clipboard is not available."
