"""Test fixtures and helpers for building workbooks in memory.

Example usage:
    from tests.fixtures import build_xlsx_bytes, make_sparse_sheet

    content = build_xlsx_bytes({"Q1": [["", "", "Jan", "Feb"], ["", "Sales", 10, 12]]})
    sheet = make_sparse_sheet([["a", None], [None, "b"]])
"""

import io
from typing import Any

from openpyxl import Workbook

from spreadsheet_viewer.workbook_document import (
    CellValue,
    SheetRange,
    SparseCells,
    SparseSheet,
    WorkbookData,
    WorkbookFormat,
)

QUARTERLY_ROWS: list[list[Any]] = [
    [None, None, "Q1", "Q2", "Q3"],
    [None, "Learning and Development", 10, None, 30],
    [None, None, None, 25, None],
    [None, "Team Collaboration", 7, None, None],
]


def build_xlsx_bytes(sheets: dict[str, list[list[Any]]]) -> bytes:
    """Build an .xlsx workbook and return its bytes.

    Args:
        sheets: Sheet name to rows of values; None leaves a cell unset.

    Returns:
        The saved workbook content.
    """
    wb = Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(name)
        for r, row in enumerate(rows, start=1):
            for c, value in enumerate(row, start=1):
                if value is not None:
                    ws.cell(row=r, column=c, value=value)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def make_sparse_sheet(
    grid: list[list[Any]], name: str = "Sheet1", anchor_at_origin: bool = True
) -> SparseSheet:
    """Build a SparseSheet from a grid, skipping None and empty strings."""
    cells: SparseCells = {}
    for r, row in enumerate(grid):
        for c, value in enumerate(row):
            if value is None or value == "":
                continue
            cells[(r, c)] = CellValue(raw=value, text=str(value))
    if not cells:
        return SparseSheet(name=name)
    rows = [r for r, _ in cells]
    cols = [c for _, c in cells]
    cell_range = SheetRange(
        min_row=0 if anchor_at_origin else min(rows),
        min_col=0 if anchor_at_origin else min(cols),
        max_row=max(rows),
        max_col=max(cols),
    )
    return SparseSheet(name=name, cells=cells, cell_range=cell_range)


def make_workbook(
    sheets: dict[str, list[list[Any]]], filename: str = "book.xlsx"
) -> WorkbookData:
    """Build WorkbookData directly from grids."""
    sparse = {name: make_sparse_sheet(grid, name=name) for name, grid in sheets.items()}
    return WorkbookData(
        filename=filename,
        format=WorkbookFormat.XLSX,
        sheet_names=list(sheets),
        sheets=sparse,
    )
