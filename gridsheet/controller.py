import logging
from typing import List, Optional, Tuple

from PyQt6 import QtCore

from gridsheet.clipboard import ClipboardBridge, decode_text, encode_region, export_csv, write_csv_file
from gridsheet.config import GridConfig
from gridsheet.errors import AtBoundary, EmptySelection, OutOfBounds
from gridsheet.history import HistoryLog
from gridsheet.models import Grid
from gridsheet.search import RowFilter, SearchResult, search
from gridsheet.selection import (
    COLUMN_HEADER,
    Empty,
    InteractionContext,
    Region,
    Selection,
    SelectionDescriptor,
    classify,
    select_all,
)

logger = logging.getLogger(__name__)


class GridController(QtCore.QObject):
    """Owns the current grid, its history, the selection and the search state.

    Every committed change swaps in a new immutable ``Grid`` and bumps
    ``generation``; clipboard reads that started under an older generation
    are dropped when they complete.
    """

    grid_changed = QtCore.pyqtSignal()
    selection_changed = QtCore.pyqtSignal()
    search_changed = QtCore.pyqtSignal()
    message = QtCore.pyqtSignal(str)

    def __init__(
        self,
        config: Optional[GridConfig] = None,
        clipboard: Optional[ClipboardBridge] = None,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._config = config or GridConfig()
        self._clipboard = clipboard or ClipboardBridge()
        self._grid = self._fresh_grid()
        self._history = HistoryLog(self._grid)
        self._selection: Selection = Empty
        self._search_term = ""
        self._case_sensitive = False
        self._search_results: List[SearchResult] = []
        self._row_filter: Optional[RowFilter] = None
        self._generation = 0

    def _fresh_grid(self) -> Grid:
        return Grid.empty(self._config.default_rows, self._config.default_cols)

    @property
    def config(self) -> GridConfig:
        return self._config

    @property
    def grid(self) -> Grid:
        return self._grid

    @property
    def history(self) -> HistoryLog:
        return self._history

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def search_term(self) -> str:
        return self._search_term

    @property
    def search_results(self) -> List[SearchResult]:
        return list(self._search_results)

    @property
    def row_filter(self) -> Optional[RowFilter]:
        return self._row_filter

    def can_undo(self) -> bool:
        return self._history.can_undo()

    def can_redo(self) -> bool:
        return self._history.can_redo()

    # State swaps

    def _commit(self, grid: Grid, action: str) -> bool:
        if not self._history.push(grid):
            logger.debug("%s left the grid unchanged; nothing recorded.", action)
            return False
        logger.debug("%s committed (history %d/%d).", action, self._history.index + 1, len(self._history))
        self._replace(grid)
        return True

    def _replace(self, grid: Grid) -> None:
        self._grid = grid
        self._generation += 1
        self._revalidate_selection()
        if self._row_filter is not None:
            self._run_search()
            self.search_changed.emit()
        self.grid_changed.emit()

    def _revalidate_selection(self) -> None:
        if self._selection is Empty:
            return
        rows, cols = self._grid.dimensions()
        try:
            self._selection.region(rows, cols)
        except (EmptySelection, OutOfBounds):
            self._selection = Empty
            self.selection_changed.emit()

    # View coordinates

    def visible_rows(self) -> List[int]:
        if self._row_filter is not None:
            return list(self._row_filter.rows)
        return list(range(self._grid.row_count))

    def row_labels(self) -> List[str]:
        return [str(row + 1) for row in self.visible_rows()]

    def source_row(self, view_row: int) -> int:
        """Underlying grid row shown at ``view_row`` of the (possibly filtered) view."""
        if self._row_filter is not None:
            try:
                return self._row_filter.source_row(view_row)
            except IndexError as exc:
                raise OutOfBounds(str(exc)) from exc
        if view_row < 0 or view_row >= self._grid.row_count:
            raise OutOfBounds(f"Row {view_row} is outside a grid of {self._grid.row_count} rows.")
        return view_row

    def rebase_descriptor(
        self, descriptor: SelectionDescriptor, context: Optional[InteractionContext] = None
    ) -> SelectionDescriptor:
        """Map view rows in ``descriptor`` to underlying grid rows.

        A span under a column-header context names a column, so it is
        returned unchanged.
        """
        if self._row_filter is None:
            return descriptor
        if descriptor.cells is None and context is not None and context.kind == COLUMN_HEADER:
            return descriptor
        if descriptor.cells is not None:
            return SelectionDescriptor.of_cells((self.source_row(row), col) for row, col in descriptor.cells)
        if descriptor.start is None or descriptor.end is None:
            return descriptor
        return SelectionDescriptor.span(self.source_row(descriptor.start), self.source_row(descriptor.end))

    # Editing

    def edit_cell(self, row: int, col: int, value: str) -> bool:
        return self._commit(self._grid.set_cell(row, col, value), f"Edit {row},{col}")

    def edit_view_cell(self, view_row: int, col: int, value: str) -> bool:
        return self.edit_cell(self.source_row(view_row), col, value)

    def resize(self, add_rows: int, add_cols: int) -> bool:
        grid = self._grid.append_rows(add_rows, fill_width=self._config.default_cols)
        grid = grid.append_columns(add_cols)
        return self._commit(grid, f"Resize +{add_rows} rows, +{add_cols} cols")

    def add_rows(self, count: Optional[int] = None) -> bool:
        return self.resize(self._config.add_rows_step if count is None else count, 0)

    def add_columns(self, count: Optional[int] = None) -> bool:
        return self.resize(0, self._config.add_cols_step if count is None else count)

    def clear(self) -> bool:
        """Replace everything with a fresh default grid. Confirm before calling."""
        self.clear_selection()
        return self._commit(self._fresh_grid(), "Clear all")

    def delete_selection(self) -> bool:
        """Blank every cell in the selected region. Confirm before calling."""
        region = self.selected_region()
        updates = [(row, col, "") for row, col in region.cells()]
        return self._commit(self._grid.set_cells(updates), "Delete selection")

    def undo(self) -> bool:
        try:
            grid = self._history.undo()
        except AtBoundary as exc:
            logger.debug("Undo ignored: %s", exc)
            return False
        self._replace(grid)
        return True

    def redo(self) -> bool:
        try:
            grid = self._history.redo()
        except AtBoundary as exc:
            logger.debug("Redo ignored: %s", exc)
            return False
        self._replace(grid)
        return True

    # Selection

    def select(self, descriptor: Optional[SelectionDescriptor], context: Optional[InteractionContext] = None) -> Selection:
        try:
            selection = classify(descriptor, context)
            selection.region(*self._grid.dimensions())
        except EmptySelection:
            selection = Empty
        self._selection = selection
        self.selection_changed.emit()
        return selection

    def select_all(self) -> Selection:
        self._selection = select_all(*self._grid.dimensions())
        self.selection_changed.emit()
        return self._selection

    def clear_selection(self) -> None:
        if self._selection is Empty:
            return
        self._selection = Empty
        self.selection_changed.emit()

    def selected_region(self) -> Region:
        return self._selection.region(*self._grid.dimensions())

    # Clipboard

    def copy_region(
        self,
        descriptor: Optional[SelectionDescriptor] = None,
        context: Optional[InteractionContext] = None,
    ) -> str:
        """Serialize the stored selection, or ``descriptor`` given in view coordinates."""
        if descriptor is None:
            region = self.selected_region()
        else:
            descriptor = self.rebase_descriptor(descriptor, context)
            region = classify(descriptor, context).region(*self._grid.dimensions())
        return encode_region(self._grid, region)

    def copy_all(self) -> str:
        rows, cols = self._grid.dimensions()
        if rows == 0 or cols == 0:
            raise EmptySelection("The grid has no cells to copy.")
        return encode_region(self._grid, Region(0, rows - 1, 0, cols - 1))

    def copy_to_clipboard(self, text: Optional[str] = None) -> bool:
        if text is None:
            text = self.copy_region()
        stored = self._clipboard.write_text(text)
        if stored:
            self.message.emit("Data copied to clipboard.")
        else:
            self.message.emit("System clipboard unavailable; copied within the app only.")
        return stored

    def begin_clipboard_read(self) -> int:
        return self._generation

    def paste_anchor(self) -> Tuple[int, int]:
        try:
            return self.selected_region().top_left
        except EmptySelection:
            return 0, 0

    def paste_region(
        self,
        text: str,
        anchor: Optional[Tuple[int, int]] = None,
        generation: Optional[int] = None,
    ) -> bool:
        """Write decoded clipboard text into the grid starting at ``anchor``.

        Cells that would land outside the grid are dropped. A paste whose
        ``generation`` predates the current state is discarded.
        """
        if generation is not None and generation != self._generation:
            logger.info("Discarding stale paste (generation %d, now %d).", generation, self._generation)
            return False
        if anchor is None:
            anchor = self.paste_anchor()
        elif not self._grid.in_bounds(*anchor):
            raise OutOfBounds(f"Paste anchor {anchor} is outside the grid.")
        start_row, start_col = anchor
        updates = []
        for r, row in enumerate(decode_text(text)):
            for c, cell in enumerate(row):
                if self._grid.in_bounds(start_row + r, start_col + c):
                    updates.append((start_row + r, start_col + c, cell.value))
        return self._commit(self._grid.set_cells(updates), "Paste")

    def paste_from_clipboard(self) -> bool:
        generation = self.begin_clipboard_read()
        text = self._clipboard.read_text()
        pasted = self.paste_region(text, generation=generation)
        if pasted:
            self.message.emit("Data pasted.")
        return pasted

    # Search

    def search(self, term: str, case_sensitive: bool = False) -> List[SearchResult]:
        if not term or not term.strip():
            self.clear_search()
            return []
        self._search_term = term
        self._case_sensitive = case_sensitive
        self._run_search()
        logger.info(
            "Search found %d matches in %d rows", len(self._search_results), len(self._row_filter or ())
        )
        self.search_changed.emit()
        return list(self._search_results)

    def _run_search(self) -> None:
        self._search_results = search(self._grid, self._search_term, self._case_sensitive)
        self._row_filter = RowFilter.from_results(self._search_results)

    def clear_search(self) -> None:
        self._search_term = ""
        self._search_results = []
        self._row_filter = None
        self.search_changed.emit()

    # Export

    def export_csv(self) -> str:
        return export_csv(self._grid)

    def export_to_file(self, path: Optional[str] = None) -> str:
        path = path or self._config.export_filename
        write_csv_file(self._grid, path)
        self.message.emit(f"Exported {path}")
        return path
