import logging
from typing import Optional

from PyQt6 import QtCore, QtGui, QtWidgets

from gridsheet.controller import GridController
from gridsheet.errors import ClipboardUnavailable, EmptySelection, OutOfBounds
from gridsheet.models import GridTableModel, column_label
from gridsheet.selection import COLUMN_HEADER, ROW_HEADER, InteractionContext, SelectionDescriptor

logger = logging.getLogger(__name__)


class SheetView(QtWidgets.QWidget):
    """Table surface for a GridController.

    Header presses and cell clicks are recorded as the interaction context
    so the controller can tell a row span from a column span.
    """

    status_message = QtCore.pyqtSignal(str)

    def __init__(self, controller: GridController, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self._controller = controller
        self._context = InteractionContext.cell()
        self._syncing = False

        self._table_view = QtWidgets.QTableView(self)
        self._table_view.setAlternatingRowColors(True)
        self._table_view.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectionBehavior.SelectItems)
        self._table_view.setSelectionMode(QtWidgets.QAbstractItemView.SelectionMode.ExtendedSelection)
        self._table_view.setTextElideMode(QtCore.Qt.TextElideMode.ElideRight)
        self._table_view.verticalHeader().setVisible(True)
        self._table_view.installEventFilter(self)
        self._table_view.viewport().installEventFilter(self)

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self._table_view)

        self._model = GridTableModel(controller, self)
        self._table_view.setModel(self._model)
        self._table_view.selectionModel().selectionChanged.connect(self._on_selection_changed)
        # The table selects the row/column on sectionPressed, so the context
        # has to be set from the raw press before that happens.
        self._table_view.horizontalHeader().viewport().installEventFilter(self)
        self._table_view.verticalHeader().viewport().installEventFilter(self)
        controller.grid_changed.connect(self._restore_selection)
        controller.search_changed.connect(self._restore_selection)

    @property
    def model(self) -> GridTableModel:
        return self._model

    @property
    def table_view(self) -> QtWidgets.QTableView:
        return self._table_view

    def _on_header_pressed(self, obj: QtCore.QObject, event: QtGui.QMouseEvent) -> None:
        horizontal = self._table_view.horizontalHeader()
        vertical = self._table_view.verticalHeader()
        pos = event.position().toPoint()
        if obj is horizontal.viewport():
            col = horizontal.logicalIndexAt(pos)
            if col >= 0:
                self._context = InteractionContext.column_header(column_label(col))
        elif obj is vertical.viewport():
            view_row = vertical.logicalIndexAt(pos)
            if view_row >= 0:
                self._context = InteractionContext.row_header(view_row)

    def _current_descriptor(self) -> Optional[SelectionDescriptor]:
        selection = self._table_view.selectionModel()
        indexes = selection.selectedIndexes()
        if not indexes:
            return None
        if self._context.kind == COLUMN_HEADER:
            col = self._context.column()
            return SelectionDescriptor.span(col, col)
        if self._context.kind == ROW_HEADER:
            rows = [index.row() for index in indexes]
            return SelectionDescriptor.span(min(rows), max(rows))
        return SelectionDescriptor.of_cells((index.row(), index.column()) for index in indexes)

    def _on_selection_changed(self, *_: object) -> None:
        if self._syncing:
            return
        descriptor = self._current_descriptor()
        try:
            if descriptor is None:
                self._controller.clear_selection()
            else:
                self._controller.select(self._controller.rebase_descriptor(descriptor, self._context), self._context)
        except OutOfBounds as exc:
            logger.warning("Selection out of sync with the grid: %s", exc)
            self._controller.clear_selection()

    def _restore_selection(self) -> None:
        try:
            region = self._controller.selected_region()
        except EmptySelection:
            return
        selection = QtCore.QItemSelection()
        for view_row, source_row in enumerate(self._controller.visible_rows()):
            if region.min_row <= source_row <= region.max_row:
                selection.select(
                    self._model.index(view_row, region.min_col),
                    self._model.index(view_row, region.max_col),
                )
        self._syncing = True
        try:
            self._table_view.selectionModel().select(
                selection, QtCore.QItemSelectionModel.SelectionFlag.ClearAndSelect
            )
        finally:
            self._syncing = False

    def select_cell(self, row: int, col: int) -> None:
        """Select an underlying grid cell, if the current view shows it."""
        visible = self._controller.visible_rows()
        if row not in visible:
            return
        index = self._model.index(visible.index(row), col)
        if not index.isValid():
            return
        self._context = InteractionContext.cell()
        selection = self._table_view.selectionModel()
        selection.setCurrentIndex(index, QtCore.QItemSelectionModel.SelectionFlag.ClearAndSelect)
        self._table_view.scrollTo(index)

    def copy_selection(self) -> None:
        try:
            self._controller.copy_to_clipboard()
        except EmptySelection as exc:
            self.status_message.emit(str(exc))

    def paste(self) -> None:
        try:
            self._controller.paste_from_clipboard()
        except ClipboardUnavailable as exc:
            QtWidgets.QMessageBox.warning(
                self, "Paste failed", f"{exc}\nTry copying the data again and pasting with Ctrl+V."
            )

    def select_all(self) -> None:
        self._context = InteractionContext.row_header(0)
        self._table_view.selectAll()
        self._controller.select_all()

    def clear_selection(self) -> None:
        self._table_view.selectionModel().clearSelection()
        self._controller.clear_selection()

    def delete_selection(self) -> None:
        try:
            region = self._controller.selected_region()
        except EmptySelection as exc:
            self.status_message.emit(str(exc))
            return
        count = region.row_span * region.col_span
        result = QtWidgets.QMessageBox.question(
            self,
            "Delete Cells",
            f"Clear {count} selected cell(s)?",
            QtWidgets.QMessageBox.StandardButton.Yes | QtWidgets.QMessageBox.StandardButton.No,
        )
        if result == QtWidgets.QMessageBox.StandardButton.Yes:
            self._controller.delete_selection()

    def eventFilter(self, obj: QtCore.QObject, event: QtCore.QEvent) -> bool:
        if event.type() == QtCore.QEvent.Type.MouseButtonPress:
            if obj is self._table_view.viewport():
                self._context = InteractionContext.cell()
            else:
                self._on_header_pressed(obj, event)
        if obj is self._table_view and event.type() == QtCore.QEvent.Type.KeyPress:
            if event.matches(QtGui.QKeySequence.StandardKey.Copy):
                self.copy_selection()
                return True
            if event.matches(QtGui.QKeySequence.StandardKey.Paste):
                self.paste()
                return True
            if event.matches(QtGui.QKeySequence.StandardKey.SelectAll):
                self.select_all()
                return True
            if event.key() in (QtCore.Qt.Key.Key_Delete, QtCore.Qt.Key.Key_Backspace):
                self.delete_selection()
                return True
            if event.key() == QtCore.Qt.Key.Key_Escape:
                self.clear_selection()
                return True
            self._context = InteractionContext.cell()
        return super().eventFilter(obj, event)
