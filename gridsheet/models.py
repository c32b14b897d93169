from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, TYPE_CHECKING

from PyQt6 import QtCore

from gridsheet.errors import OutOfBounds

if TYPE_CHECKING:
    from gridsheet.controller import GridController
    from gridsheet.selection import Region


def column_label(index: int) -> str:
    """Spreadsheet letters for a zero-based column: 0 -> A, 25 -> Z, 26 -> AA."""
    if index < 0:
        raise ValueError(f"Column index must be non-negative, got {index}.")
    label = ""
    number = index + 1
    while number:
        number, remainder = divmod(number - 1, 26)
        label = chr(ord("A") + remainder) + label
    return label


def column_index(label: str) -> int:
    text = label.strip().upper()
    if not text or not text.isascii() or not text.isalpha():
        raise ValueError(f"Not a column label: {label!r}")
    number = 0
    for char in text:
        number = number * 26 + (ord(char) - ord("A") + 1)
    return number - 1


def cell_label(row: int, col: int) -> str:
    return f"{column_label(col)}{row + 1}"


@dataclass(frozen=True)
class Cell:
    value: str = ""


EMPTY_CELL = Cell()


@dataclass(frozen=True)
class Grid:
    """Immutable rectangular block of cells.

    Every mutator returns a new grid. Rows that an edit does not touch are
    shared with the receiver, so history snapshots stay cheap.
    """

    rows: Tuple[Tuple[Cell, ...], ...] = ()
    width: int = 0

    def __post_init__(self) -> None:
        if self.width < 0:
            raise ValueError(f"Grid width must be non-negative, got {self.width}.")
        for idx, row in enumerate(self.rows, start=1):
            if len(row) != self.width:
                raise ValueError(f"Row {idx} has {len(row)} cells, expected {self.width}.")

    @classmethod
    def empty(cls, rows: int, cols: int) -> "Grid":
        if rows < 0 or cols < 0:
            raise ValueError(f"Grid dimensions must be non-negative, got {rows}x{cols}.")
        blank_row = (EMPTY_CELL,) * cols
        return cls(tuple(blank_row for _ in range(rows)), cols)

    @classmethod
    def from_values(cls, values: Sequence[Sequence[str]]) -> "Grid":
        width = len(values[0]) if values else 0
        rows = tuple(tuple(Cell(str(value)) for value in row) for row in values)
        return cls(rows, width)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return self.width

    def dimensions(self) -> Tuple[int, int]:
        return len(self.rows), self.width

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < len(self.rows) and 0 <= col < self.width

    def _check(self, row: int, col: int) -> None:
        if not self.in_bounds(row, col):
            rows, cols = self.dimensions()
            raise OutOfBounds(f"Cell ({row}, {col}) is outside a {rows}x{cols} grid.")

    def get(self, row: int, col: int) -> Cell:
        self._check(row, col)
        return self.rows[row][col]

    def value(self, row: int, col: int) -> str:
        return self.get(row, col).value

    def set_cell(self, row: int, col: int, value) -> "Grid":
        self._check(row, col)
        text = "" if value is None else str(value)
        if self.rows[row][col].value == text:
            return self
        current = self.rows[row]
        updated = current[:col] + (Cell(text),) + current[col + 1 :]
        return Grid(self.rows[:row] + (updated,) + self.rows[row + 1 :], self.width)

    def set_cells(self, updates: Iterable[Tuple[int, int, str]]) -> "Grid":
        """Apply many cell writes at once, copying each touched row a single time."""
        pending: dict[int, dict[int, str]] = {}
        for row, col, value in updates:
            self._check(row, col)
            pending.setdefault(row, {})[col] = "" if value is None else str(value)
        if not pending:
            return self
        rows = list(self.rows)
        for row, changes in pending.items():
            cells = list(rows[row])
            for col, text in changes.items():
                if cells[col].value != text:
                    cells[col] = Cell(text)
            rows[row] = tuple(cells)
        grid = Grid(tuple(rows), self.width)
        return self if grid == self else grid

    def append_rows(self, count: int, fill_width: Optional[int] = None) -> "Grid":
        if count < 0:
            raise ValueError(f"Row count must be non-negative, got {count}.")
        width = self.width
        if not self.rows and fill_width is not None:
            width = fill_width
        if count == 0 and width == self.width:
            return self
        blank_row = (EMPTY_CELL,) * width
        return Grid(self.rows + tuple(blank_row for _ in range(count)), width)

    def append_columns(self, count: int) -> "Grid":
        if count < 0:
            raise ValueError(f"Column count must be non-negative, got {count}.")
        if count == 0:
            return self
        padding = (EMPTY_CELL,) * count
        return Grid(tuple(row + padding for row in self.rows), self.width + count)

    def values(self) -> List[List[str]]:
        return [[cell.value for cell in row] for row in self.rows]

    def region_values(self, region: "Region") -> List[List[str]]:
        self._check(region.min_row, region.min_col)
        self._check(region.max_row, region.max_col)
        return [
            [cell.value for cell in self.rows[row][region.min_col : region.max_col + 1]]
            for row in range(region.min_row, region.max_row + 1)
        ]


class GridTableModel(QtCore.QAbstractTableModel):
    """Presents the controller's current grid to a QTableView.

    With a search filter active only matching rows are exposed, and the
    vertical header keeps showing their original row numbers. Edits are
    handed to the controller in view coordinates and rebased there.
    """

    def __init__(self, controller: "GridController", parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self._controller = controller
        controller.grid_changed.connect(self.refresh)
        controller.search_changed.connect(self.refresh)

    def rowCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(self._controller.visible_rows())

    def columnCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return self._controller.grid.column_count

    def source_row(self, view_row: int) -> int:
        return self._controller.visible_rows()[view_row]

    def data(self, index: QtCore.QModelIndex, role: int = QtCore.Qt.ItemDataRole.DisplayRole):
        if not index.isValid():
            return None
        if role in (QtCore.Qt.ItemDataRole.DisplayRole, QtCore.Qt.ItemDataRole.EditRole):
            try:
                return self._controller.grid.value(self.source_row(index.row()), index.column())
            except IndexError:
                return ""
        return None

    def setData(self, index: QtCore.QModelIndex, value, role: int = QtCore.Qt.ItemDataRole.EditRole) -> bool:
        if not index.isValid() or role != QtCore.Qt.ItemDataRole.EditRole:
            return False
        self._controller.edit_view_cell(index.row(), index.column(), "" if value is None else str(value))
        return True

    def flags(self, index: QtCore.QModelIndex) -> QtCore.Qt.ItemFlag:
        if not index.isValid():
            return QtCore.Qt.ItemFlag.NoItemFlags
        return (
            QtCore.Qt.ItemFlag.ItemIsSelectable
            | QtCore.Qt.ItemFlag.ItemIsEnabled
            | QtCore.Qt.ItemFlag.ItemIsEditable
        )

    def headerData(self, section: int, orientation: QtCore.Qt.Orientation, role: int = QtCore.Qt.ItemDataRole.DisplayRole):
        if role != QtCore.Qt.ItemDataRole.DisplayRole or section < 0:
            return None
        if orientation == QtCore.Qt.Orientation.Horizontal:
            return column_label(section)
        labels = self._controller.row_labels()
        if section < len(labels):
            return labels[section]
        return None

    def refresh(self) -> None:
        self.beginResetModel()
        self.endResetModel()
