"""Spreadsheet clipboard interchange.

Copied text uses tabs between cells and newlines between rows; a cell
holding a comma or a double quote is wrapped in quotes with inner quotes
doubled. Pasted text may be tab- or comma-delimited, and unquoting is
shallow: one surrounding pair of quotes is removed and doubled inner
quotes are kept as they are.
"""

import logging
import re
from typing import List, Optional

from PyQt6 import QtCore, QtGui

from gridsheet.errors import ClipboardUnavailable
from gridsheet.models import Cell, Grid
from gridsheet.selection import Region

logger = logging.getLogger(__name__)

_LINE_SPLIT = re.compile(r"\r?\n")


def encode_field(value: str) -> str:
    if "," in value or '"' in value:
        return '"' + value.replace('"', '""') + '"'
    return value


def encode_region(grid: Grid, region: Region) -> str:
    lines = []
    for row in grid.region_values(region):
        lines.append("\t".join(encode_field(value) for value in row))
    return "\n".join(lines)


def decode_field(field: str) -> str:
    if len(field) >= 2 and field.startswith('"') and field.endswith('"'):
        field = field[1:-1]
    return field.strip()


def decode_text(text: str) -> List[List[Cell]]:
    """Parse pasted text into rows of cells.

    Trailing blank lines are dropped. A blank line in the middle decodes to
    an empty row so later rows keep their offsets. Rows keep whatever field
    count their source line had.
    """
    lines = _LINE_SPLIT.split(text)
    while lines and lines[-1] == "":
        lines.pop()
    rows: List[List[Cell]] = []
    for line in lines:
        if not line:
            rows.append([])
            continue
        fields = line.split("\t") if "\t" in line else line.split(",")
        rows.append([Cell(decode_field(field)) for field in fields])
    return rows


def export_csv(grid: Grid) -> str:
    lines = []
    for row in grid.rows:
        fields = []
        for cell in row:
            value = cell.value
            if "," in value:
                value = '"' + value.replace('"', '""') + '"'
            fields.append(value)
        lines.append(",".join(fields))
    return "\n".join(lines)


def write_csv_file(grid: Grid, path: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as handle:
        handle.write(export_csv(grid))
    logger.info("Exported %dx%d grid to %s", grid.row_count, grid.column_count, path)


class ClipboardBridge:
    """System clipboard access with an in-process fallback buffer.

    ``clipboard`` is anything with ``text()`` and ``setText()``; by default
    the running Qt application's clipboard is used.
    """

    def __init__(self, clipboard=None) -> None:
        self._clipboard = clipboard
        self._fallback: Optional[str] = None

    @property
    def fallback_text(self) -> Optional[str]:
        return self._fallback

    def _system(self):
        if self._clipboard is not None:
            return self._clipboard
        if not isinstance(QtCore.QCoreApplication.instance(), QtGui.QGuiApplication):
            return None
        return QtGui.QGuiApplication.clipboard()

    def write_text(self, text: str) -> bool:
        """Store ``text``; returns False when only the fallback buffer took it."""
        self._fallback = text
        system = self._system()
        if system is None:
            logger.warning("No system clipboard; keeping copied text in memory.")
            return False
        try:
            system.setText(text)
        except (RuntimeError, OSError) as exc:
            logger.warning("Clipboard write failed: %s", exc)
            return False
        return True

    def read_text(self) -> str:
        system = self._system()
        if system is not None:
            try:
                text = system.text()
            except (RuntimeError, OSError) as exc:
                logger.warning("Clipboard read failed: %s", exc)
                text = ""
            if text:
                return text
        if self._fallback:
            logger.debug("Reading pasted text from the in-memory buffer.")
            return self._fallback
        raise ClipboardUnavailable("Clipboard is empty or unavailable.")
