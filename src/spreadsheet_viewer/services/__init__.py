"""Services for the spreadsheet viewer."""

from spreadsheet_viewer.services.format_detector import FormatDetector
from spreadsheet_viewer.services.grid_normalizer import (
    build_dense_grid,
    extract_headers_and_rows,
    fill_down,
    normalize_sheet,
)
from spreadsheet_viewer.services.view_state import ViewController, ViewState, ViewStatus
from spreadsheet_viewer.services.workbook_reader import (
    WorkbookReader,
    WorkbookReadOptions,
)

__all__ = [
    "FormatDetector",
    "ViewController",
    "ViewState",
    "ViewStatus",
    "WorkbookReadOptions",
    "WorkbookReader",
    "build_dense_grid",
    "extract_headers_and_rows",
    "fill_down",
    "normalize_sheet",
]
