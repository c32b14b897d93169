"""Selection shapes and their resolution to grid regions.

The table surface reports a selection as either an explicit list of cells
or a bare ``(start, end)`` span. A span is ambiguous: clicking a row header
and clicking a column header both produce one. The interaction context,
reported alongside by the surface, says which header the user last
clicked and settles the question.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Iterator, List, Optional, Tuple, Union

from gridsheet.errors import EmptySelection, OutOfBounds
from gridsheet.models import column_index

ROW_HEADER = "row-header"
COLUMN_HEADER = "column-header"
CELL = "cell"
UNKNOWN = "unknown"

CONTEXT_KINDS = (ROW_HEADER, COLUMN_HEADER, CELL, UNKNOWN)


@dataclass(frozen=True)
class Region:
    min_row: int
    max_row: int
    min_col: int
    max_col: int

    @property
    def top_left(self) -> Tuple[int, int]:
        return self.min_row, self.min_col

    @property
    def row_span(self) -> int:
        return self.max_row - self.min_row + 1

    @property
    def col_span(self) -> int:
        return self.max_col - self.min_col + 1

    def contains(self, row: int, col: int) -> bool:
        return self.min_row <= row <= self.max_row and self.min_col <= col <= self.max_col

    def cells(self) -> Iterator[Tuple[int, int]]:
        for row in range(self.min_row, self.max_row + 1):
            for col in range(self.min_col, self.max_col + 1):
                yield row, col


@dataclass(frozen=True)
class InteractionContext:
    """What the user clicked most recently, as reported by the surface."""

    kind: str = UNKNOWN
    index: Optional[int] = None
    label: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind not in CONTEXT_KINDS:
            raise ValueError(f"Unknown interaction kind: {self.kind!r}")

    @classmethod
    def row_header(cls, index: int) -> "InteractionContext":
        return cls(ROW_HEADER, index=index)

    @classmethod
    def column_header(cls, label: str) -> "InteractionContext":
        return cls(COLUMN_HEADER, label=label)

    @classmethod
    def cell(cls) -> "InteractionContext":
        return cls(CELL)

    def column(self) -> Optional[int]:
        if self.label:
            return column_index(self.label)
        return self.index


@dataclass(frozen=True)
class SelectionDescriptor:
    cells: Optional[Tuple[Tuple[int, int], ...]] = None
    start: Optional[int] = None
    end: Optional[int] = None

    @classmethod
    def of_cells(cls, cells: Iterable[Tuple[int, int]]) -> "SelectionDescriptor":
        return cls(cells=tuple((int(row), int(col)) for row, col in cells))

    @classmethod
    def span(cls, start: int, end: int) -> "SelectionDescriptor":
        return cls(start=start, end=end)


# Selection variants. Exactly one is active in the controller at a time.


@dataclass(frozen=True)
class EmptySelectionState:
    def region(self, rows: int, cols: int) -> Region:
        raise EmptySelection()


Empty = EmptySelectionState()


@dataclass(frozen=True)
class CellSet:
    cells: FrozenSet[Tuple[int, int]] = field(default_factory=frozenset)

    def ordered(self) -> List[Tuple[int, int]]:
        return sorted(self.cells)

    def region(self, rows: int, cols: int) -> Region:
        if not self.cells:
            raise EmptySelection()
        ordered = self.ordered()
        row_ids = [row for row, _ in ordered]
        col_ids = [col for _, col in ordered]
        return _bounded(Region(min(row_ids), max(row_ids), min(col_ids), max(col_ids)), rows, cols)


@dataclass(frozen=True)
class RowRange:
    start: int
    end: int

    def region(self, rows: int, cols: int) -> Region:
        if rows == 0 or cols == 0:
            raise EmptySelection("The grid has no cells to select.")
        return _bounded(Region(min(self.start, self.end), max(self.start, self.end), 0, cols - 1), rows, cols)


@dataclass(frozen=True)
class Column:
    index: int

    def region(self, rows: int, cols: int) -> Region:
        if rows == 0 or cols == 0:
            raise EmptySelection("The grid has no cells to select.")
        return _bounded(Region(0, rows - 1, self.index, self.index), rows, cols)


Selection = Union[EmptySelectionState, CellSet, RowRange, Column]


def _bounded(region: Region, rows: int, cols: int) -> Region:
    if region.min_row < 0 or region.min_col < 0 or region.max_row >= rows or region.max_col >= cols:
        raise OutOfBounds(
            f"Selection rows {region.min_row}-{region.max_row}, cols {region.min_col}-{region.max_col} "
            f"exceed a {rows}x{cols} grid."
        )
    return region


def classify(descriptor: Optional[SelectionDescriptor], context: Optional[InteractionContext] = None) -> Selection:
    if descriptor is None:
        return Empty
    if descriptor.cells is not None:
        if not descriptor.cells:
            raise EmptySelection()
        return CellSet(frozenset(descriptor.cells))
    if descriptor.start is None and descriptor.end is None:
        return Empty
    start = descriptor.start if descriptor.start is not None else descriptor.end
    end = descriptor.end if descriptor.end is not None else descriptor.start
    context = context or InteractionContext()
    if context.kind == COLUMN_HEADER:
        col = context.column()
        if col is None:
            col = start
        return Column(col)
    return RowRange(start, end)


def resolve(
    descriptor: Optional[SelectionDescriptor],
    context: Optional[InteractionContext],
    rows: int,
    cols: int,
) -> Region:
    return classify(descriptor, context).region(rows, cols)


def select_all(rows: int, cols: int) -> Selection:
    if rows == 0 or cols == 0:
        return Empty
    return RowRange(0, rows - 1)

