from __future__ import annotations

from collections.abc import Iterator

import pytest

from spreadsheet_viewer.services.session_store import reset_session_store
from spreadsheet_viewer.utils.logging import clear_context
from spreadsheet_viewer.workbook_document import SparseSheet, WorkbookData
from tests.fixtures import (
    QUARTERLY_ROWS,
    build_xlsx_bytes,
    make_sparse_sheet,
    make_workbook,
)


@pytest.fixture(autouse=True)
def _clean_global_state() -> Iterator[None]:
    """Reset logging context and the global session store between tests."""
    clear_context()
    yield
    clear_context()
    reset_session_store()


@pytest.fixture
def quarterly_sheet() -> SparseSheet:
    return make_sparse_sheet(QUARTERLY_ROWS, name="Quarterly")


@pytest.fixture
def two_sheet_workbook() -> WorkbookData:
    return make_workbook(
        {
            "Quarterly": QUARTERLY_ROWS,
            "Summary": [
                ["_", "_", "Total"],
                ["_", "All teams", "72"],
            ],
        }
    )


@pytest.fixture
def quarterly_xlsx() -> bytes:
    return build_xlsx_bytes(
        {
            "Quarterly": QUARTERLY_ROWS,
            "Summary": [["_", "_", "Total"], ["_", "All teams", 72]],
        }
    )
