"""
test_controller.py - GridController orchestration.

Covers:
  - edit / undo / redo scenarios and no-op suppression
  - copy with explicit descriptors and with the stored selection
  - paste anchoring, clipping, history accounting and stale generations
  - delete-selection, resize, clear
  - search filter and rebasing of filtered-view coordinates
  - clipboard bridge failures leaving state untouched
"""
import pytest
from PyQt6 import QtCore

from gridsheet.clipboard import ClipboardBridge
from gridsheet.config import GridConfig
from gridsheet.controller import GridController
from gridsheet.errors import ClipboardUnavailable, EmptySelection, OutOfBounds
from gridsheet.models import Grid, GridTableModel
from gridsheet.selection import Column, Empty, InteractionContext, Region, RowRange, SelectionDescriptor


class FakeClipboard:
    def __init__(self, text=""):
        self._text = text

    def text(self):
        return self._text

    def setText(self, text):
        self._text = text


class BrokenClipboard:
    def text(self):
        raise RuntimeError("no clipboard")

    def setText(self, text):
        raise RuntimeError("no clipboard")


def _controller(rows=3, cols=3, clipboard=None, **overrides):
    config = GridConfig(default_rows=rows, default_cols=cols, **overrides)
    return GridController(config, ClipboardBridge(clipboard or FakeClipboard()))


def test_default_grid_is_25_by_15():
    controller = GridController(clipboard=ClipboardBridge(FakeClipboard()))
    assert controller.grid.dimensions() == (25, 15)
    assert len(controller.history) == 1


def test_edit_undo_redo_scenario():
    controller = _controller(2, 2)
    controller.edit_cell(0, 0, "X")
    controller.edit_cell(0, 1, "Y")

    assert controller.undo()
    assert controller.grid.value(0, 1) == ""
    assert controller.grid.value(0, 0) == "X"
    assert controller.undo()
    assert controller.grid == Grid.empty(2, 2)

    assert controller.redo()
    assert controller.redo()
    assert controller.grid.values() == [["X", "Y"], ["", ""]]


def test_undo_redo_at_boundaries_are_noops():
    controller = _controller()
    before = controller.grid
    generation = controller.generation
    assert not controller.undo()
    assert not controller.redo()
    assert controller.grid is before
    assert controller.generation == generation


def test_noop_edit_records_nothing():
    controller = _controller()
    assert not controller.edit_cell(1, 1, "")
    assert len(controller.history) == 1
    assert controller.generation == 0


def test_edit_out_of_bounds_raises_and_keeps_state():
    controller = _controller()
    with pytest.raises(OutOfBounds):
        controller.edit_cell(5, 0, "x")
    assert len(controller.history) == 1


def test_grid_changed_signal_fires_on_commit():
    controller = _controller()
    seen = []
    controller.grid_changed.connect(lambda: seen.append(controller.generation))
    controller.edit_cell(0, 0, "a")
    controller.undo()
    assert seen == [1, 2]


def test_copy_region_with_descriptor():
    controller = _controller(2, 2)
    controller.edit_cell(0, 0, "a,b")
    controller.edit_cell(1, 1, 'He said "hi"')
    text = controller.copy_region(SelectionDescriptor.of_cells([(0, 0), (1, 1)]), InteractionContext.cell())
    assert text == '"a,b"\t\n\t"He said ""hi"""'


def test_copy_column_vs_row_from_same_span():
    controller = _controller(3, 3)
    controller.paste_region("a\tb\tc\nd\te\tf\ng\th\ti", anchor=(0, 0))
    span = SelectionDescriptor.span(2, 2)
    assert controller.copy_region(span, InteractionContext.column_header("C")) == "c\nf\ni"
    assert controller.copy_region(span, InteractionContext.row_header(2)) == "g\th\ti"


def test_copy_region_descriptor_uses_view_rows_under_filter():
    controller = _controller(4, 2)
    controller.paste_region("a\tb\nc\td\ne\tf\ng\th", anchor=(0, 0))
    controller.edit_cell(1, 1, "hit")
    controller.edit_cell(3, 0, "hit")
    controller.search("hit")
    assert controller.visible_rows() == [1, 3]
    assert controller.copy_region(SelectionDescriptor.of_cells([(1, 0)]), InteractionContext.cell()) == "hit"
    assert controller.copy_region(SelectionDescriptor.span(0, 0), InteractionContext.row_header(0)) == "c\thit"
    span = SelectionDescriptor.span(1, 1)
    assert controller.copy_region(span, InteractionContext.column_header("B")) == "b\nhit\nf\nh"


def test_copy_without_selection_raises():
    controller = _controller()
    with pytest.raises(EmptySelection):
        controller.copy_region()
    with pytest.raises(EmptySelection):
        controller.copy_to_clipboard()


def test_copy_to_clipboard_uses_stored_selection():
    system = FakeClipboard()
    controller = _controller(clipboard=system)
    controller.edit_cell(1, 0, "v")
    controller.select(SelectionDescriptor.span(1, 1), InteractionContext.row_header(1))
    assert controller.copy_to_clipboard()
    assert system.text() == "v\t\t"


def test_copy_falls_back_to_in_app_buffer():
    controller = _controller(clipboard=BrokenClipboard())
    controller.edit_cell(0, 0, "kept")
    messages = []
    controller.message.connect(messages.append)
    controller.select_all()
    assert not controller.copy_to_clipboard()
    assert messages and "within the app" in messages[0]
    generation = controller.generation
    controller.clear_selection()
    controller.edit_cell(0, 0, "")
    assert controller.paste_from_clipboard()
    assert controller.grid.value(0, 0) == "kept"
    assert controller.generation > generation


def test_paste_into_empty_grid_scenario():
    controller = _controller(3, 3)
    assert controller.paste_region("X\tY\nZ\tW", anchor=(0, 0))
    assert controller.grid.values() == [["X", "Y", ""], ["Z", "W", ""], ["", "", ""]]
    assert len(controller.history) == 2


def test_paste_defaults_to_origin_without_selection():
    controller = _controller()
    controller.paste_region("a,b")
    assert controller.grid.values()[0] == ["a", "b", ""]


def test_paste_anchors_at_selection_top_left():
    controller = _controller(4, 4)
    controller.select(SelectionDescriptor.of_cells([(2, 1), (3, 3)]), InteractionContext.cell())
    controller.paste_region("p\tq")
    assert controller.grid.value(2, 1) == "p"
    assert controller.grid.value(2, 2) == "q"


def test_paste_clips_overflow():
    controller = _controller(2, 2)
    controller.paste_region("a\tb\tc\nd\te\tf\ng\th\ti", anchor=(1, 1))
    assert controller.grid.values() == [["", ""], ["", "a"]]
    assert controller.grid.dimensions() == (2, 2)


def test_paste_tolerates_ragged_rows():
    controller = _controller(3, 3)
    controller.paste_region("a\tb\tc\nd", anchor=(0, 0))
    assert controller.grid.values()[:2] == [["a", "b", "c"], ["d", "", ""]]


def test_paste_outside_anchor_raises():
    controller = _controller()
    with pytest.raises(OutOfBounds):
        controller.paste_region("x", anchor=(9, 9))


def test_stale_paste_is_discarded():
    controller = _controller()
    token = controller.begin_clipboard_read()
    controller.edit_cell(0, 0, "newer")
    assert not controller.paste_region("older", generation=token)
    assert controller.grid.value(0, 0) == "newer"
    assert len(controller.history) == 2


def test_paste_with_unavailable_clipboard_changes_nothing():
    controller = _controller(clipboard=BrokenClipboard())
    with pytest.raises(ClipboardUnavailable):
        controller.paste_from_clipboard()
    assert len(controller.history) == 1
    assert controller.generation == 0


def test_paste_from_system_clipboard():
    controller = _controller(clipboard=FakeClipboard("1,2\n3,4\n"))
    assert controller.paste_from_clipboard()
    assert controller.grid.values()[:2] == [["1", "2", ""], ["3", "4", ""]]


def test_delete_selection_blanks_region():
    controller = _controller(3, 3)
    controller.paste_region("a\tb\tc\nd\te\tf", anchor=(0, 0))
    controller.select(SelectionDescriptor.span(0, 0), InteractionContext.column_header("B"))
    assert isinstance(controller.selection, Column)
    assert controller.delete_selection()
    assert controller.grid.values()[:2] == [["a", "", "c"], ["d", "", "f"]]


def test_delete_without_selection_raises():
    controller = _controller()
    with pytest.raises(EmptySelection):
        controller.delete_selection()


def test_select_empty_cell_list_clears_selection():
    controller = _controller()
    controller.select_all()
    controller.select(SelectionDescriptor.of_cells([]))
    assert controller.selection is Empty


def test_select_all_and_clear_selection():
    controller = _controller(3, 2)
    assert controller.select_all() == RowRange(0, 2)
    assert controller.selected_region() == Region(0, 2, 0, 1)
    controller.clear_selection()
    with pytest.raises(EmptySelection):
        controller.selected_region()


def test_resize_and_step_defaults():
    controller = _controller(2, 2, add_rows_step=10, add_cols_step=5)
    assert controller.add_rows()
    assert controller.grid.dimensions() == (12, 2)
    assert controller.add_columns()
    assert controller.grid.dimensions() == (12, 7)
    assert controller.resize(1, 1)
    assert controller.grid.dimensions() == (13, 8)
    assert not controller.resize(0, 0)
    assert len(controller.history) == 4


def test_undo_resize_drops_selection_outside_grid():
    controller = _controller(2, 2)
    controller.add_rows(3)
    controller.select(SelectionDescriptor.span(4, 4), InteractionContext.row_header(4))
    controller.undo()
    assert controller.selection is Empty


def test_clear_restores_default_grid_and_is_undoable():
    controller = _controller(2, 2)
    controller.edit_cell(0, 0, "x")
    controller.add_columns(2)
    assert controller.clear()
    assert controller.grid == Grid.empty(2, 2)
    assert controller.undo()
    assert controller.grid.value(0, 0) == "x"


def test_search_sets_filter_and_labels():
    controller = _controller(4, 2)
    controller.edit_cell(1, 1, "Jane Smith")
    controller.edit_cell(3, 0, "smithy")
    generation = controller.generation
    results = controller.search("smith")
    assert [(r.row, r.col) for r in results] == [(1, 1), (3, 0)]
    assert controller.visible_rows() == [1, 3]
    assert controller.row_labels() == ["2", "4"]
    assert controller.generation == generation
    assert len(controller.history) == 3


def test_blank_search_resets_filter():
    controller = _controller()
    controller.edit_cell(0, 0, "x")
    controller.search("x")
    assert controller.row_filter is not None
    assert controller.search("  ") == []
    assert controller.row_filter is None
    assert controller.visible_rows() == [0, 1, 2]


def test_search_without_matches_hides_all_rows():
    controller = _controller()
    controller.search("nothing")
    assert controller.search_results == []
    assert controller.visible_rows() == []


def test_filtered_edit_uses_underlying_row():
    controller = _controller(5, 2)
    controller.edit_cell(3, 0, "target")
    controller.search("target")
    controller.edit_view_cell(0, 1, "beside")
    assert controller.grid.value(3, 1) == "beside"
    assert controller.grid.value(0, 1) == ""


def test_filtered_selection_is_rebased_before_paste():
    controller = _controller(5, 2)
    controller.edit_cell(4, 0, "hit")
    controller.search("hit")
    view_selection = SelectionDescriptor.of_cells([(0, 0)])
    controller.select(controller.rebase_descriptor(view_selection), InteractionContext.cell())
    assert controller.paste_anchor() == (4, 0)
    controller.paste_region("P")
    assert controller.grid.value(4, 0) == "P"
    assert controller.grid.value(0, 0) == ""


def test_filter_follows_grid_changes():
    controller = _controller(3, 1)
    controller.edit_cell(0, 0, "apple")
    controller.search("apple")
    controller.edit_cell(2, 0, "pineapple")
    assert controller.visible_rows() == [0, 2]
    controller.undo()
    assert controller.visible_rows() == [0]


def test_view_row_outside_filter_raises():
    controller = _controller()
    controller.edit_cell(0, 0, "x")
    controller.search("x")
    with pytest.raises(OutOfBounds):
        controller.edit_view_cell(1, 0, "y")


def test_export_csv(tmp_path):
    controller = _controller(2, 2, export_filename="spreadsheet-data.csv")
    controller.edit_cell(0, 0, "a,b")
    assert controller.export_csv() == '"a,b",\n,'
    path = controller.export_to_file(str(tmp_path / "out.csv"))
    with open(path, encoding="utf-8") as handle:
        assert handle.read() == '"a,b",\n,'


def test_table_model_shows_filtered_rows_with_original_labels():
    controller = _controller(4, 2)
    controller.edit_cell(2, 1, "needle")
    model = GridTableModel(controller)
    assert model.rowCount() == 4
    controller.search("needle")
    assert model.rowCount() == 1
    assert model.columnCount() == 2
    assert model.data(model.index(0, 1)) == "needle"
    assert model.headerData(0, QtCore.Qt.Orientation.Vertical) == "3"
    assert model.headerData(1, QtCore.Qt.Orientation.Horizontal) == "B"
    model.setData(model.index(0, 0), "edited")
    assert controller.grid.value(2, 0) == "edited"
