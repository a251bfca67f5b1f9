"""Dense grid reconstruction and fill-down normalization.

A worksheet arrives as a sparse mapping of ``(row, col)`` to cell values plus
the rectangle it declares as occupied. This module rebuilds a rectangular
grid of display strings from it, splits the grid into column titles and
labelled data rows according to a :class:`SheetLayout`, and fills blank cells
from the value above them.
"""

from __future__ import annotations

from collections.abc import Sequence

from spreadsheet_viewer.utils.exceptions import InvalidRangeError
from spreadsheet_viewer.utils.logging import get_logger, timed_operation
from spreadsheet_viewer.workbook_document import (
    SheetLayout,
    SheetRange,
    SheetTable,
    SparseCells,
    SparseSheet,
)

logger = get_logger(__name__)

DEFAULT_LAYOUT = SheetLayout()


def build_dense_grid(
    cells: SparseCells, cell_range: SheetRange | None
) -> list[list[str]]:
    """Rebuild a rectangular grid of display strings from sparse cells.

    Args:
        cells: Sparse cell store keyed by zero-based ``(row, col)``.
        cell_range: Declared occupied range, or None for a sheet without one.

    Returns:
        Grid of ``cell_range.row_count`` rows by ``cell_range.column_count``
        columns, where index 0 maps to ``min_row``/``min_col``. Missing cells
        are empty strings. An empty list when there is no range.

    Raises:
        InvalidRangeError: If the range has negative or inverted bounds.
    """
    if cell_range is None:
        return []
    if not cell_range.is_well_formed:
        raise InvalidRangeError(
            f"Malformed sheet range: {cell_range}",
            details={
                "min_row": cell_range.min_row,
                "min_col": cell_range.min_col,
                "max_row": cell_range.max_row,
                "max_col": cell_range.max_col,
            },
        )

    grid: list[list[str]] = []
    for r in range(cell_range.min_row, cell_range.max_row + 1):
        row: list[str] = []
        for c in range(cell_range.min_col, cell_range.max_col + 1):
            cell = cells.get((r, c))
            row.append(cell.display() if cell is not None else "")
        grid.append(row)
    return grid


def extract_headers_and_rows(
    grid: Sequence[Sequence[str]], layout: SheetLayout = DEFAULT_LAYOUT
) -> tuple[list[str], list[list[str]]]:
    """Split a dense grid into column titles and labelled data rows.

    Titles come from ``layout.header_row_index`` starting at
    ``layout.data_start_column_index``. Every row after the title row becomes
    ``[label] + data`` where the label is the value at
    ``layout.label_column_index`` (empty when the row is too short to have
    one, in which case no data columns are appended either).

    Grids that do not follow the layout produce misaligned output.
    """
    data_start = layout.data_start_column_index
    label_col = layout.label_column_index
    header_row = layout.header_row_index

    headers: list[str] = []
    if header_row < len(grid):
        title_row = grid[header_row]
        if len(title_row) > data_start:
            headers = list(title_row[data_start:])

    rows: list[list[str]] = []
    for source in grid[header_row + 1 :]:
        if len(source) <= label_col:
            rows.append([""])
            continue
        rows.append([source[label_col], *source[data_start:]])

    return headers, rows


def _is_blank(value: str | None) -> bool:
    return value is None or value == ""


def fill_down(rows: Sequence[Sequence[str | None]]) -> list[list[str]]:
    """Replace blank cells with the filled value above them.

    Each row is only filled within its own length; rows are never padded or
    truncated. The comparison row for the next iteration is the filled row,
    so values carry down through any number of consecutive blanks.
    """
    if not rows:
        return []

    filled: list[list[str]] = []
    previous: list[str] = []
    for row in rows:
        current: list[str] = []
        for j, value in enumerate(row or []):
            if _is_blank(value):
                current.append(previous[j] if j < len(previous) else "")
            else:
                current.append(str(value))
        filled.append(current)
        previous = current
    return filled


def normalize_sheet(
    sheet: SparseSheet | None, layout: SheetLayout = DEFAULT_LAYOUT
) -> SheetTable:
    """Produce display headers and fill-down rows for one worksheet.

    A missing sheet or one without an occupied range yields an empty table
    and a warning, never an exception.
    """
    if sheet is None or sheet.cell_range is None:
        logger.warning(
            "Sheet is empty or invalid",
            sheet=sheet.name if sheet is not None else None,
        )
        return SheetTable()

    with timed_operation(logger, "normalize_sheet") as metrics:
        grid = build_dense_grid(sheet.cells, sheet.cell_range)
        headers, rows = extract_headers_and_rows(grid, layout)
        table = SheetTable(headers=headers, rows=fill_down(rows))
        metrics.cells = len(sheet.cells)
        metrics.rows = len(table.rows)
        metrics.columns = len(table.headers)
        metrics.custom_metrics["sheet"] = sheet.name

    return table
