from typing import TYPE_CHECKING

from PyQt6 import QtCore, QtWidgets

from gridsheet.controller import GridController

if TYPE_CHECKING:
    from gridsheet.widgets.sheet_view import SheetView


class FindPanel(QtWidgets.QWidget):
    def __init__(self, controller: GridController, sheet_view: "SheetView", parent: QtWidgets.QWidget) -> None:
        super().__init__(parent)
        self._controller = controller
        self._sheet_view = sheet_view
        layout = QtWidgets.QVBoxLayout(self)
        form = QtWidgets.QGridLayout()

        self._find_input = QtWidgets.QLineEdit(self)
        self._find_input.setPlaceholderText("Search in spreadsheet...")
        self._case_check = QtWidgets.QCheckBox("Case sensitive", self)
        find_label = QtWidgets.QLabel("Find:", self)

        self._search_btn = QtWidgets.QPushButton("Search", self)
        self._clear_btn = QtWidgets.QPushButton("Clear", self)
        self._clear_btn.setEnabled(False)

        form.addWidget(find_label, 0, 0)
        form.addWidget(self._find_input, 0, 1, 1, 3)
        form.addWidget(self._case_check, 1, 1, 1, 3)
        form.addWidget(self._search_btn, 2, 0)
        form.addWidget(self._clear_btn, 2, 1)

        self._summary = QtWidgets.QLabel(self)
        self._results = QtWidgets.QListWidget(self)
        self._results.setSelectionMode(QtWidgets.QAbstractItemView.SelectionMode.SingleSelection)

        layout.addLayout(form)
        layout.addWidget(self._summary)
        layout.addWidget(self._results)

        self._find_input.returnPressed.connect(self._on_search)
        self._search_btn.clicked.connect(self._on_search)
        self._clear_btn.clicked.connect(self._on_clear)
        self._results.itemDoubleClicked.connect(self._on_result_activated)
        controller.search_changed.connect(self._populate)

    def focus_input(self) -> None:
        self._find_input.setFocus()
        self._find_input.selectAll()

    def _on_search(self) -> None:
        self._controller.search(self._find_input.text(), self._case_check.isChecked())

    def _on_clear(self) -> None:
        self._find_input.clear()
        self._controller.clear_search()

    def _populate(self) -> None:
        self._results.clear()
        term = self._controller.search_term
        self._clear_btn.setEnabled(bool(term))
        if not term:
            self._summary.clear()
            return
        matches = self._controller.search_results
        self._summary.setText(f'Results for "{term}" ({len(matches)} found)')
        for result in matches:
            preview = self._ellipsize(" ".join(result.value.split()), 40)
            item = QtWidgets.QListWidgetItem(f"{result.position_label}: {preview}")
            item.setData(QtCore.Qt.ItemDataRole.UserRole, (result.row, result.col))
            self._results.addItem(item)

    def _on_result_activated(self, item: QtWidgets.QListWidgetItem) -> None:
        data = item.data(QtCore.Qt.ItemDataRole.UserRole)
        if isinstance(data, tuple) and len(data) == 2:
            row, col = data
            self._sheet_view.select_cell(row, col)

    def _ellipsize(self, text: str, limit: int) -> str:
        if len(text) <= limit:
            return text
        return f"{text[:limit - 1]}…"
