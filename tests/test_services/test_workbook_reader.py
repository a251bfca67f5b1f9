"""Tests for the openpyxl/xlrd workbook reader."""

from __future__ import annotations

import io
import zipfile
from datetime import date, datetime, time
from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
import xlrd
from openpyxl import Workbook

from spreadsheet_viewer.services.workbook_reader import (
    WorkbookReader,
    WorkbookReadOptions,
    format_cell_text,
    occupied_range,
)
from spreadsheet_viewer.utils.exceptions import (
    UnsupportedFormatError,
    WorkbookParseError,
)
from spreadsheet_viewer.workbook_document import (
    CellValue,
    SheetRange,
    WorkbookFormat,
)
from tests.fixtures import build_xlsx_bytes


class _FakeXlrdSheet:
    """Minimal stand-in for xlrd.sheet.Sheet."""

    def __init__(
        self,
        name: str,
        rows: list[list[tuple[int, Any]]],
        xf_indexes: dict[tuple[int, int], int] | None = None,
    ) -> None:
        self.name = name
        self._rows = rows
        self._xf_indexes = xf_indexes or {}
        self.nrows = len(rows)
        self.ncols = max((len(r) for r in rows), default=0)

    def row_len(self, r: int) -> int:
        return len(self._rows[r])

    def cell_type(self, r: int, c: int) -> int:
        return self._rows[r][c][0]

    def cell_value(self, r: int, c: int) -> Any:
        return self._rows[r][c][1]

    def cell_xf_index(self, r: int, c: int) -> int:
        return self._xf_indexes.get((r, c), 0)


def _replace_part(content: bytes, part: str, data: bytes) -> bytes:
    """Rewrite one member of a zip container, keeping entry order."""
    source = zipfile.ZipFile(io.BytesIO(content))
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as target:
        for info in source.infolist():
            payload = data if info.filename == part else source.read(info)
            target.writestr(info, payload)
    return buffer.getvalue()


def _fake_book(sheets: list[_FakeXlrdSheet]) -> MagicMock:
    book = MagicMock()
    book.datemode = 0
    # xf 0 uses the General format, xf 1 the built-in "0%" and xf 2 "0.00%"
    book.xf_list = [SimpleNamespace(format_key=key) for key in (0, 9, 10)]
    book.format_map = {
        0: SimpleNamespace(format_str="General"),
        9: SimpleNamespace(format_str="0%"),
        10: SimpleNamespace(format_str="0.00%"),
    }
    book.sheet_names.return_value = [s.name for s in sheets]
    book.sheet_by_name.side_effect = {s.name: s for s in sheets}.__getitem__
    return book


@pytest.fixture
def reader() -> WorkbookReader:
    return WorkbookReader()


class TestFormatCellText:
    """Tests for display text of parsed values."""

    @pytest.mark.parametrize(
        ("value", "number_format", "expected"),
        [
            (None, None, None),
            (True, None, "TRUE"),
            (False, None, "FALSE"),
            (10, "General", "10"),
            (10.0, "General", "10"),
            (0.5, "General", "0.5"),
            (0.1234, "0.00%", "12.34%"),
            (0.25, "0%", "25%"),
            (datetime(2024, 1, 15), "yyyy-mm-dd", "2024-01-15"),
            (datetime(2024, 1, 15, 13, 45), "yyyy-mm-dd h:mm", "2024-01-15 13:45:00"),
            (date(2024, 2, 1), None, "2024-02-01"),
            (time(9, 30), None, "09:30:00"),
            ("Learning", "@", "Learning"),
        ],
    )
    def test_display_text(
        self, value: Any, number_format: str | None, expected: str | None
    ) -> None:
        assert format_cell_text(value, number_format) == expected


class TestOccupiedRange:
    """Tests for deriving the declared range from sparse cells."""

    def test_no_cells_has_no_range(self) -> None:
        assert occupied_range({}, anchor_at_origin=True) is None

    def test_bounding_rectangle(self) -> None:
        cells = {(2, 3): CellValue(raw=1), (5, 1): CellValue(raw=2)}

        assert occupied_range(cells, anchor_at_origin=False) == SheetRange(2, 1, 5, 3)
        assert occupied_range(cells, anchor_at_origin=True) == SheetRange(0, 0, 5, 3)


class TestReadXlsx:
    """Tests for .xlsx parsing with openpyxl."""

    def test_reads_sheets_in_order(
        self, reader: WorkbookReader, quarterly_xlsx: bytes
    ) -> None:
        workbook = reader.read(quarterly_xlsx, "report.xlsx")

        assert workbook.filename == "report.xlsx"
        assert workbook.format is WorkbookFormat.XLSX
        assert workbook.sheet_names == ["Quarterly", "Summary"]

    def test_sparse_cells_are_zero_based(
        self, reader: WorkbookReader, quarterly_xlsx: bytes
    ) -> None:
        sheet = reader.read(quarterly_xlsx, "report.xlsx").sheets["Quarterly"]

        assert sheet.cells[(0, 2)].display() == "Q1"
        assert sheet.cells[(1, 1)].display() == "Learning and Development"
        assert sheet.cells[(1, 2)].raw == 10
        assert (0, 0) not in sheet.cells
        assert sheet.cell_range == SheetRange(0, 0, 3, 4)

    def test_range_without_anchor(self, reader: WorkbookReader) -> None:
        content = build_xlsx_bytes({"Offset": [[None], [None, None, "x", "y"]]})
        workbook = reader.read(
            content, "offset.xlsx", WorkbookReadOptions(anchor_at_origin=False)
        )

        assert workbook.sheets["Offset"].cell_range == SheetRange(1, 2, 1, 3)

    def test_blank_sheet_has_no_range(self, reader: WorkbookReader) -> None:
        content = build_xlsx_bytes({"Data": [["a"]], "Blank": []})
        workbook = reader.read(content, "blank.xlsx")

        assert workbook.sheets["Blank"].cell_range is None
        assert workbook.sheets["Blank"].cells == {}

    def test_read_caps(self, reader: WorkbookReader) -> None:
        rows = [[f"r{r}c{c}" for c in range(5)] for r in range(5)]
        content = build_xlsx_bytes({"Big": rows})
        sheet = reader.read(
            content, "big.xlsx", WorkbookReadOptions(max_rows=2, max_columns=3)
        ).sheets["Big"]

        assert sheet.cell_range == SheetRange(0, 0, 1, 2)
        assert len(sheet.cells) == 6

    def test_percent_and_dates_are_formatted(self, reader: WorkbookReader) -> None:
        wb = Workbook()
        ws = wb.active
        ws.title = "Formats"
        ws["A1"] = 0.5
        ws["A1"].number_format = "0%"
        ws["B1"] = datetime(2024, 3, 1)
        buffer = io.BytesIO()
        wb.save(buffer)

        sheet = reader.read(buffer.getvalue(), "formats.xlsx").sheets["Formats"]

        assert sheet.cells[(0, 0)].display() == "50%"
        assert sheet.cells[(0, 1)].display() == "2024-03-01"

    def test_formula_without_cached_value_is_empty(
        self, reader: WorkbookReader
    ) -> None:
        content = build_xlsx_bytes({"Calc": [[1, 2, "=A1+B1"]]})
        sheet = reader.read(content, "calc.xlsx").sheets["Calc"]

        assert (0, 2) not in sheet.cells

    def test_zip_that_is_not_a_workbook(self, reader: WorkbookReader) -> None:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr("hello.txt", "not a workbook")

        with pytest.raises(WorkbookParseError) as exc_info:
            reader.read(buffer.getvalue(), "fake.xlsx")

        assert exc_info.value.details["parser"] == "openpyxl"
        assert exc_info.value.http_status == 422

    def test_corrupt_workbook_part_raises_parse_error(
        self, reader: WorkbookReader, quarterly_xlsx: bytes
    ) -> None:
        content = _replace_part(quarterly_xlsx, "xl/workbook.xml", b"<not xml")

        with pytest.raises(WorkbookParseError) as exc_info:
            reader.read(content, "corrupt.xlsx")

        assert exc_info.value.details["parser"] == "openpyxl"
        assert exc_info.value.http_status == 422

    def test_chart_sheet_is_listed_as_empty(self, reader: WorkbookReader) -> None:
        wb = Workbook()
        ws = wb.active
        ws.title = "Data"
        ws["B2"] = "Sales"
        ws["C2"] = 10
        wb.create_chartsheet("Chart")
        buffer = io.BytesIO()
        wb.save(buffer)

        workbook = reader.read(buffer.getvalue(), "charts.xlsx")

        assert workbook.sheet_names == ["Data", "Chart"]
        assert workbook.sheets["Chart"].cells == {}
        assert workbook.sheets["Chart"].cell_range is None
        assert workbook.sheets["Data"].cells[(1, 2)].display() == "10"

    def test_text_file_is_rejected(self, reader: WorkbookReader) -> None:
        with pytest.raises(UnsupportedFormatError):
            reader.read(b"just,some,csv\n1,2,3\n", "data.csv")


class TestReadXls:
    """Tests for .xls parsing through xlrd."""

    @pytest.fixture
    def xls_reader(self) -> WorkbookReader:
        detector = MagicMock()
        detector.detect.return_value = WorkbookFormat.XLS
        return WorkbookReader(format_detector=detector)

    def test_cell_types_are_converted(self, xls_reader: WorkbookReader) -> None:
        sheet = _FakeXlrdSheet(
            "Legacy",
            [
                [
                    (xlrd.XL_CELL_EMPTY, ""),
                    (xlrd.XL_CELL_TEXT, "Label"),
                    (xlrd.XL_CELL_NUMBER, 3.0),
                ],
                [
                    (xlrd.XL_CELL_BLANK, ""),
                    (xlrd.XL_CELL_BOOLEAN, 1),
                    (xlrd.XL_CELL_DATE, 45306.0),
                ],
                [(xlrd.XL_CELL_ERROR, 0x07)],
            ],
        )
        with patch(
            "spreadsheet_viewer.services.workbook_reader.xlrd.open_workbook",
            return_value=_fake_book([sheet]),
        ):
            workbook = xls_reader.read(b"\xd0\xcf\x11\xe0", "legacy.xls")

        parsed = workbook.sheets["Legacy"]
        assert workbook.format is WorkbookFormat.XLS
        assert (0, 0) not in parsed.cells
        assert (1, 0) not in parsed.cells
        assert parsed.cells[(0, 1)].display() == "Label"
        assert parsed.cells[(0, 2)].display() == "3"
        assert parsed.cells[(1, 1)].display() == "TRUE"
        assert parsed.cells[(1, 2)].display() == "2024-01-15"
        assert parsed.cells[(2, 0)].display() == "#DIV/0!"
        assert parsed.cell_range == SheetRange(0, 0, 2, 2)

    def test_percent_format_is_applied(self, xls_reader: WorkbookReader) -> None:
        sheet = _FakeXlrdSheet(
            "Rates",
            [
                [
                    (xlrd.XL_CELL_NUMBER, 0.25),
                    (xlrd.XL_CELL_NUMBER, 0.125),
                    (xlrd.XL_CELL_NUMBER, 0.25),
                ]
            ],
            xf_indexes={(0, 0): 1, (0, 1): 2},
        )
        with patch(
            "spreadsheet_viewer.services.workbook_reader.xlrd.open_workbook",
            return_value=_fake_book([sheet]),
        ) as open_workbook:
            workbook = xls_reader.read(b"\xd0\xcf\x11\xe0", "rates.xls")

        cells = workbook.sheets["Rates"].cells
        assert cells[(0, 0)].display() == "25%"
        assert cells[(0, 1)].display() == "12.50%"
        assert cells[(0, 2)].display() == "0.25"
        assert open_workbook.call_args.kwargs["formatting_info"] is True

    def test_xlrd_failure_raises_parse_error(self, xls_reader: WorkbookReader) -> None:
        with (
            patch(
                "spreadsheet_viewer.services.workbook_reader.xlrd.open_workbook",
                side_effect=xlrd.XLRDError("Unsupported format, or corrupt file"),
            ),
            pytest.raises(WorkbookParseError) as exc_info,
        ):
            xls_reader.read(b"\xd0\xcf\x11\xe0", "broken.xls")

        assert exc_info.value.details["parser"] == "xlrd"
