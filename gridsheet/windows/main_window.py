import logging
from typing import Optional

from PyQt6 import QtCore, QtGui, QtWidgets

from gridsheet.clipboard import ClipboardBridge
from gridsheet.config import load_config, open_settings
from gridsheet.controller import GridController
from gridsheet.errors import EmptySelection
from gridsheet.theme import THEMES, apply_theme
from gridsheet.widgets.find_panel import FindPanel
from gridsheet.widgets.sheet_view import SheetView

logger = logging.getLogger(__name__)


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, settings: Optional[QtCore.QSettings] = None) -> None:
        super().__init__()
        self.setWindowTitle("GridSheet")
        self.resize(1200, 720)
        self._settings = settings or open_settings()
        self._config = load_config(self._settings)
        self._theme_name = self._config.theme

        self._controller = GridController(self._config, ClipboardBridge(), self)
        self._sheet_view = SheetView(self._controller, self)
        self._find_panel = FindPanel(self._controller, self._sheet_view, self)

        splitter = QtWidgets.QSplitter(self)
        splitter.setOrientation(QtCore.Qt.Orientation.Horizontal)
        splitter.addWidget(self._sheet_view)
        splitter.addWidget(self._find_panel)
        splitter.setStretchFactor(0, 1)
        self.setCentralWidget(splitter)

        self._status_bar = self.statusBar()
        self._status_bar.showMessage("Ready")

        self._controller.grid_changed.connect(self._update_status)
        self._controller.selection_changed.connect(self._update_status)
        self._controller.search_changed.connect(self._update_status)
        self._controller.message.connect(self._show_message)
        self._sheet_view.status_message.connect(self._show_message)

        self._build_actions()
        self._apply_theme(self._theme_name)
        self._update_status()

    @property
    def controller(self) -> GridController:
        return self._controller

    def _build_actions(self) -> None:
        self._undo_action = QtGui.QAction("Undo", self)
        self._undo_action.setShortcut(QtGui.QKeySequence.StandardKey.Undo)
        self._undo_action.triggered.connect(self._controller.undo)

        self._redo_action = QtGui.QAction("Redo", self)
        self._redo_action.setShortcuts(
            [QtGui.QKeySequence(QtGui.QKeySequence.StandardKey.Redo), QtGui.QKeySequence("Ctrl+Y")]
        )
        self._redo_action.triggered.connect(self._controller.redo)

        find_action = QtGui.QAction("Find", self)
        find_action.setShortcut(QtGui.QKeySequence.StandardKey.Find)
        find_action.triggered.connect(self._find_panel.focus_input)

        copy_all_action = QtGui.QAction("Copy All", self)
        copy_all_action.triggered.connect(self.copy_all)

        paste_action = QtGui.QAction("Paste", self)
        paste_action.triggered.connect(self._sheet_view.paste)

        export_action = QtGui.QAction("Export CSV...", self)
        export_action.setShortcut(QtGui.QKeySequence("Ctrl+E"))
        export_action.triggered.connect(self.export_csv)

        add_rows_action = QtGui.QAction(f"+ {self._config.add_rows_step} Rows", self)
        add_rows_action.triggered.connect(lambda: self._controller.add_rows())

        add_cols_action = QtGui.QAction(f"+ {self._config.add_cols_step} Columns", self)
        add_cols_action.triggered.connect(lambda: self._controller.add_columns())

        clear_action = QtGui.QAction("Clear All", self)
        clear_action.triggered.connect(self.clear_all)

        toolbar = self.addToolBar("Sheet")
        toolbar.setMovable(False)
        for action in (self._undo_action, self._redo_action):
            toolbar.addAction(action)
        toolbar.addSeparator()
        for action in (copy_all_action, paste_action, export_action):
            toolbar.addAction(action)
        toolbar.addSeparator()
        for action in (add_rows_action, add_cols_action):
            toolbar.addAction(action)
        toolbar.addSeparator()
        toolbar.addAction(clear_action)

        menu_bar = self.menuBar()
        edit_menu = menu_bar.addMenu("Edit")
        for action in (self._undo_action, self._redo_action, find_action, copy_all_action, paste_action):
            edit_menu.addAction(action)
        sheet_menu = menu_bar.addMenu("Sheet")
        for action in (add_rows_action, add_cols_action, export_action, clear_action):
            sheet_menu.addAction(action)
        view_menu = menu_bar.addMenu("View")
        theme_group = QtGui.QActionGroup(self)
        for name in THEMES:
            theme_action = QtGui.QAction(f"{name.title()} Theme", self)
            theme_action.setCheckable(True)
            theme_action.setChecked(name == self._theme_name)
            theme_action.triggered.connect(lambda _, n=name: self._set_theme(n))
            theme_group.addAction(theme_action)
            view_menu.addAction(theme_action)

        for action in (self._undo_action, self._redo_action, find_action, export_action):
            action.setShortcutContext(QtCore.Qt.ShortcutContext.ApplicationShortcut)
            action.setShortcutVisibleInContextMenu(True)
            self.addAction(action)

    def _set_theme(self, name: str) -> None:
        if name not in THEMES or name == self._theme_name:
            return
        self._theme_name = name
        self._settings.setValue("theme", name)
        self._apply_theme(name)

    def _apply_theme(self, name: str) -> None:
        app = QtWidgets.QApplication.instance()
        if not app:
            return
        apply_theme(app, name)

    def copy_all(self) -> None:
        try:
            text = self._controller.copy_all()
        except EmptySelection as exc:
            self._show_message(str(exc))
            return
        self._controller.copy_to_clipboard(text)

    def export_csv(self) -> None:
        path, _ = QtWidgets.QFileDialog.getSaveFileName(
            self,
            "Export CSV",
            self._config.export_filename,
            "CSV Files (*.csv)",
        )
        if not path:
            return
        try:
            self._controller.export_to_file(path)
        except OSError as exc:
            logger.warning("Export to %s failed: %s", path, exc)
            QtWidgets.QMessageBox.warning(self, "Export failed", str(exc))

    def clear_all(self) -> None:
        result = QtWidgets.QMessageBox.question(
            self,
            "Clear All",
            "Are you sure you want to clear all data?",
            QtWidgets.QMessageBox.StandardButton.Yes | QtWidgets.QMessageBox.StandardButton.No,
        )
        if result == QtWidgets.QMessageBox.StandardButton.Yes:
            self._controller.clear()

    def _show_message(self, text: str) -> None:
        self._status_bar.showMessage(text, 3000)

    def _update_status(self) -> None:
        self._undo_action.setEnabled(self._controller.can_undo())
        self._redo_action.setEnabled(self._controller.can_redo())
        rows, cols = self._controller.grid.dimensions()
        try:
            region = self._controller.selected_region()
            selected = region.row_span * region.col_span
        except EmptySelection:
            selected = 0
        parts = [f"Rows: {rows}", f"Cols: {cols}", f"Selected: {selected}"]
        row_filter = self._controller.row_filter
        if row_filter is not None:
            parts.append(f"Showing {len(row_filter)} matching row(s)")
        self._status_bar.showMessage(" | ".join(parts))
