from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from gridsheet.models import Grid, cell_label, column_label


@dataclass(frozen=True)
class SearchResult:
    row: int
    col: int
    value: str
    position_label: str

    @property
    def row_label(self) -> int:
        return self.row + 1

    @property
    def col_label(self) -> str:
        return column_label(self.col)


def _grid_match(value: str, text: str, case_sensitive: bool) -> bool:
    if case_sensitive:
        return text in value
    return text.lower() in value.lower()


def search(grid: Grid, term: str, case_sensitive: bool = False) -> List[SearchResult]:
    """Every cell containing ``term``, in row-major order.

    A blank term matches nothing; callers treat that as a reset rather than
    an empty hit list.
    """
    if not term or not term.strip():
        return []
    results: List[SearchResult] = []
    for row, cells in enumerate(grid.rows):
        for col, cell in enumerate(cells):
            if _grid_match(cell.value, term, case_sensitive):
                results.append(SearchResult(row, col, cell.value, cell_label(row, col)))
    return results


def matching_rows(results: Iterable[SearchResult]) -> Tuple[int, ...]:
    return tuple(sorted({result.row for result in results}))


class RowFilter:
    """Maps rows of a filtered view back to rows of the underlying grid."""

    def __init__(self, rows: Sequence[int]) -> None:
        self._rows = tuple(sorted(set(rows)))

    @classmethod
    def from_results(cls, results: Iterable[SearchResult]) -> "RowFilter":
        return cls(matching_rows(results))

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, row: object) -> bool:
        return row in self._rows

    @property
    def rows(self) -> Tuple[int, ...]:
        return self._rows

    def source_row(self, view_row: int) -> int:
        if view_row < 0 or view_row >= len(self._rows):
            raise IndexError(f"View row {view_row} is outside a filter of {len(self._rows)} rows.")
        return self._rows[view_row]

    def view_row(self, source_row: int) -> Optional[int]:
        try:
            return self._rows.index(source_row)
        except ValueError:
            return None
