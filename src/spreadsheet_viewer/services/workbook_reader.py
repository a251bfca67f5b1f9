"""Workbook parsing into sparse cell stores.

``.xlsx``/``.xlsm`` files are read with openpyxl and legacy ``.xls`` files
with xlrd. Either way the result is a :class:`WorkbookData` whose sheets only
hold the cells that have content, keyed by zero-based ``(row, col)``.
"""

from __future__ import annotations

import io
import re
import zipfile
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any

import xlrd
from openpyxl import load_workbook
from openpyxl.chartsheet import Chartsheet
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet
from xlrd.compdoc import CompDocError

from spreadsheet_viewer.services.format_detector import FormatDetector
from spreadsheet_viewer.utils.exceptions import WorkbookParseError
from spreadsheet_viewer.utils.logging import get_logger
from spreadsheet_viewer.workbook_document import (
    CellValue,
    SheetRange,
    SparseCells,
    SparseSheet,
    WorkbookData,
    WorkbookFormat,
)

logger = get_logger(__name__)

_PERCENT_FORMAT = re.compile(r"0(?:\.(0+))?%")


@dataclass
class WorkbookReadOptions:
    """Options controlling how much of each sheet is read."""

    max_rows: int | None = None
    max_columns: int | None = None
    anchor_at_origin: bool = True


def format_cell_text(value: Any, number_format: str | None = None) -> str | None:
    """Render a parsed cell value the way a spreadsheet displays it.

    Returns None for values that have no display form.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ", timespec="seconds")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return str(value)
    if isinstance(value, (int, float)):
        if number_format and "%" in number_format:
            match = _PERCENT_FORMAT.search(number_format)
            decimals = len(match.group(1)) if match and match.group(1) else 0
            return f"{value * 100:.{decimals}f}%"
        if isinstance(value, float):
            return str(int(value)) if value.is_integer() else repr(value)
        return str(value)
    return str(value)


def occupied_range(cells: SparseCells, anchor_at_origin: bool) -> SheetRange | None:
    """Bounding rectangle of the sparse cells, or None when there are none."""
    if not cells:
        return None
    rows = [r for r, _ in cells]
    cols = [c for _, c in cells]
    return SheetRange(
        min_row=0 if anchor_at_origin else min(rows),
        min_col=0 if anchor_at_origin else min(cols),
        max_row=max(rows),
        max_col=max(cols),
    )


class WorkbookReader:
    """Parse uploaded workbook bytes into sparse sheets."""

    def __init__(self, format_detector: FormatDetector | None = None) -> None:
        self._format_detector = format_detector or FormatDetector()

    def read(
        self,
        content: bytes,
        filename: str,
        options: WorkbookReadOptions | None = None,
    ) -> WorkbookData:
        """Detect the format of ``content`` and parse every sheet.

        Args:
            content: Raw uploaded bytes.
            filename: Original filename, used to confirm the format.
            options: Read limits and range anchoring.

        Returns:
            Parsed workbook with sheets in workbook order.

        Raises:
            UnsupportedFormatError: If the content is not a workbook.
            WorkbookParseError: If the parsing library rejects the content.
        """
        opts = options or WorkbookReadOptions()
        fmt = self._format_detector.detect(content, filename)

        if fmt is WorkbookFormat.XLS:
            sheets = self._read_xls(content, filename, opts)
        else:
            sheets = self._read_xlsx(content, filename, opts)

        logger.info(
            "Workbook parsed",
            filename=filename,
            format=fmt.value,
            sheets=len(sheets),
        )
        return WorkbookData(
            filename=filename,
            format=fmt,
            sheet_names=[sheet.name for sheet in sheets],
            sheets={sheet.name: sheet for sheet in sheets},
        )

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _read_xlsx(
        self, content: bytes, filename: str, opts: WorkbookReadOptions
    ) -> list[SparseSheet]:
        try:
            workbook = load_workbook(
                filename=io.BytesIO(content), data_only=True, read_only=False
            )
        except (
            InvalidFileException,
            zipfile.BadZipFile,
            KeyError,
            TypeError,
            ValueError,
            SyntaxError,
        ) as e:
            # xml.etree and lxml parse errors both derive from SyntaxError
            raise WorkbookParseError(
                f"Could not read workbook: {e}",
                filename=filename,
                details={"parser": "openpyxl", "error_type": type(e).__name__},
            ) from e

        try:
            return [
                self._sparse_from_sheet(workbook[name], opts)
                for name in workbook.sheetnames
            ]
        finally:
            workbook.close()

    @staticmethod
    def _sparse_from_sheet(
        sheet: Worksheet | Chartsheet, opts: WorkbookReadOptions
    ) -> SparseSheet:
        if not isinstance(sheet, Worksheet):
            # Chart sheets have no cells; list them as empty sheets
            return SparseSheet(name=sheet.title)

        cells: SparseCells = {}
        for row in sheet.iter_rows(max_row=opts.max_rows, max_col=opts.max_columns):
            for cell in row:
                if cell.value is None:
                    continue
                # openpyxl coordinates are 1-based
                cells[(cell.row - 1, cell.column - 1)] = CellValue(
                    raw=cell.value,
                    text=format_cell_text(cell.value, cell.number_format),
                )
        return SparseSheet(
            name=sheet.title,
            cells=cells,
            cell_range=occupied_range(cells, opts.anchor_at_origin),
        )

    def _read_xls(
        self, content: bytes, filename: str, opts: WorkbookReadOptions
    ) -> list[SparseSheet]:
        try:
            book = xlrd.open_workbook(file_contents=content, formatting_info=True)
        except (xlrd.XLRDError, CompDocError, ValueError) as e:
            raise WorkbookParseError(
                f"Could not read workbook: {e}",
                filename=filename,
                details={"parser": "xlrd", "error_type": type(e).__name__},
            ) from e

        try:
            return [
                self._sparse_from_xlrd_sheet(book, book.sheet_by_name(name), opts)
                for name in book.sheet_names()
            ]
        finally:
            book.release_resources()

    @staticmethod
    def _sparse_from_xlrd_sheet(
        book: xlrd.book.Book, sheet: xlrd.sheet.Sheet, opts: WorkbookReadOptions
    ) -> SparseSheet:
        nrows = sheet.nrows if opts.max_rows is None else min(sheet.nrows, opts.max_rows)
        ncols = (
            sheet.ncols
            if opts.max_columns is None
            else min(sheet.ncols, opts.max_columns)
        )

        cells: SparseCells = {}
        for r in range(nrows):
            for c in range(min(ncols, sheet.row_len(r))):
                ctype = sheet.cell_type(r, c)
                if ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
                    continue
                value = sheet.cell_value(r, c)
                if ctype == xlrd.XL_CELL_DATE:
                    value = xlrd.xldate_as_datetime(value, book.datemode)
                elif ctype == xlrd.XL_CELL_BOOLEAN:
                    value = bool(value)
                elif ctype == xlrd.XL_CELL_ERROR:
                    value = xlrd.error_text_from_code.get(value, "#ERR")
                cells[(r, c)] = CellValue(
                    raw=value,
                    text=format_cell_text(
                        value, _xls_number_format(book, sheet, r, c)
                    ),
                )

        return SparseSheet(
            name=sheet.name,
            cells=cells,
            cell_range=occupied_range(cells, opts.anchor_at_origin),
        )


def _xls_number_format(
    book: xlrd.book.Book, sheet: xlrd.sheet.Sheet, row: int, col: int
) -> str | None:
    """Number format string applied to an xlrd cell, if any."""
    xf = book.xf_list[sheet.cell_xf_index(row, col)]
    fmt = book.format_map.get(xf.format_key)
    return fmt.format_str if fmt is not None else None
