from typing import List

from gridsheet.errors import AtBoundary
from gridsheet.models import Grid


class HistoryLog:
    """Linear undo/redo log of grid snapshots.

    Committing from the middle of the log drops the redo branch. The log is
    never empty: it is seeded with the initial grid.
    """

    def __init__(self, initial: Grid) -> None:
        self._snapshots: List[Grid] = [initial]
        self._index = 0

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def index(self) -> int:
        return self._index

    @property
    def current(self) -> Grid:
        return self._snapshots[self._index]

    def push(self, snapshot: Grid) -> bool:
        if snapshot == self.current:
            return False
        if self._index < len(self._snapshots) - 1:
            self._snapshots = self._snapshots[: self._index + 1]
        self._snapshots.append(snapshot)
        self._index = len(self._snapshots) - 1
        return True

    def can_undo(self) -> bool:
        return self._index > 0

    def can_redo(self) -> bool:
        return self._index < len(self._snapshots) - 1

    def undo(self) -> Grid:
        if not self.can_undo():
            raise AtBoundary("Nothing to undo.")
        self._index -= 1
        return self.current

    def redo(self) -> Grid:
        if not self.can_redo():
            raise AtBoundary("Nothing to redo.")
        self._index += 1
        return self.current
