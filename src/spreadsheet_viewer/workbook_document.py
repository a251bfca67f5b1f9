"""Dataclasses representing a parsed workbook and its sheet layout."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class WorkbookFormat(str, Enum):
    """Workbook container formats the viewer can parse."""

    XLSX = "xlsx"
    XLS = "xls"


@dataclass(frozen=True)
class CellValue:
    """A single non-empty cell: parsed value plus optional display text."""

    raw: Any
    text: str | None = None

    def display(self) -> str:
        """Return the formatted text, falling back to the raw value."""
        if self.text is not None:
            return self.text
        if self.raw is None:
            return ""
        return str(self.raw)


@dataclass(frozen=True)
class SheetRange:
    """Occupied rectangle of a sheet. Zero-based and inclusive."""

    min_row: int
    min_col: int
    max_row: int
    max_col: int

    @property
    def is_well_formed(self) -> bool:
        return (
            self.min_row >= 0
            and self.min_col >= 0
            and self.min_row <= self.max_row
            and self.min_col <= self.max_col
        )

    @property
    def row_count(self) -> int:
        return self.max_row - self.min_row + 1

    @property
    def column_count(self) -> int:
        return self.max_col - self.min_col + 1


SparseCells = dict[tuple[int, int], CellValue]


@dataclass
class SparseSheet:
    """One worksheet as a sparse cell store plus its declared range."""

    name: str
    cells: SparseCells = field(default_factory=dict)
    cell_range: SheetRange | None = None


@dataclass
class WorkbookData:
    """A parsed workbook with its sheets in workbook order."""

    filename: str
    format: WorkbookFormat
    sheet_names: list[str]
    sheets: dict[str, SparseSheet]

    def get_sheet(self, name: str) -> SparseSheet | None:
        return self.sheets.get(name)


@dataclass(frozen=True)
class SheetLayout:
    """Where titles, row labels and data sit inside a dense grid.

    The defaults describe sheets with column titles in row 1, a row label in
    column B and data from column C onwards.
    """

    header_row_index: int = 0
    label_column_index: int = 1
    data_start_column_index: int = 2


@dataclass
class SheetTable:
    """Headers and fill-down rows extracted from one sheet."""

    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.headers and not self.rows
