"""View state and the controller that moves it between states.

A view moves through ``no_file -> file_loaded -> sheet_selected``. Uploading
a workbook auto-selects its first sheet; choosing another sheet recomputes
headers and rows from scratch. Every upload takes a generation token before
the file is parsed, and only the newest token may apply its workbook, so a
slow parse cannot overwrite a later upload.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from spreadsheet_viewer.services.grid_normalizer import DEFAULT_LAYOUT, normalize_sheet
from spreadsheet_viewer.utils.exceptions import (
    NoWorkbookLoadedError,
    SheetNotFoundError,
)
from spreadsheet_viewer.utils.logging import get_logger
from spreadsheet_viewer.workbook_document import SheetLayout, WorkbookData

logger = get_logger(__name__)


class ViewStatus(str, Enum):
    """Where a view is in its upload/selection lifecycle."""

    NO_FILE = "no_file"
    FILE_LOADED = "file_loaded"
    SHEET_SELECTED = "sheet_selected"


@dataclass
class ViewState:
    """Everything the page needs to render one view."""

    status: ViewStatus = ViewStatus.NO_FILE
    workbook: WorkbookData | None = None
    sheet_names: list[str] = field(default_factory=list)
    selected_sheet: str | None = None
    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)
    generation: int = 0

    @property
    def filename(self) -> str | None:
        return self.workbook.filename if self.workbook is not None else None

    @property
    def is_empty_selection(self) -> bool:
        """True when a loaded sheet produced neither headers nor rows."""
        return (
            self.workbook is not None
            and bool(self.selected_sheet)
            and not self.headers
            and not self.rows
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a serializable dictionary (the workbook is omitted)."""
        return {
            "status": self.status.value,
            "filename": self.filename,
            "sheet_names": list(self.sheet_names),
            "selected_sheet": self.selected_sheet,
            "headers": list(self.headers),
            "rows": [list(row) for row in self.rows],
            "generation": self.generation,
        }


class ViewController:
    """Single owner of a :class:`ViewState`.

    All transitions hold a lock, so callers on different threads see each
    transition applied atomically.
    """

    def __init__(self, layout: SheetLayout = DEFAULT_LAYOUT) -> None:
        self.layout = layout
        self._state = ViewState()
        self._lock = threading.RLock()

    @property
    def state(self) -> ViewState:
        return self._state

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return self._state.to_dict()

    def begin_upload(self) -> int:
        """Reserve a generation token for a new upload.

        Any upload holding an older token is superseded from this point on.
        """
        with self._lock:
            self._state.generation += 1
            logger.debug("Upload started", generation=self._state.generation)
            return self._state.generation

    def apply_workbook(self, workbook: WorkbookData, generation: int) -> bool:
        """Install a parsed workbook if its upload is still the newest.

        Returns:
            False when a newer upload superseded this one and the workbook was
            discarded, True otherwise.
        """
        with self._lock:
            if generation != self._state.generation:
                logger.info(
                    "Discarding superseded workbook",
                    filename=workbook.filename,
                    generation=generation,
                    current_generation=self._state.generation,
                )
                return False

            self._state.workbook = workbook
            self._state.sheet_names = list(workbook.sheet_names)

            if not workbook.sheet_names:
                logger.warning("Workbook has no sheets", filename=workbook.filename)
                self._state.status = ViewStatus.FILE_LOADED
                self._state.selected_sheet = None
                self._state.headers = []
                self._state.rows = []
                return True

            self._load_sheet(workbook.sheet_names[0])
            return True

    def select_sheet(self, sheet_name: str) -> ViewState:
        """Switch the view to another sheet of the loaded workbook.

        Raises:
            NoWorkbookLoadedError: If nothing has been uploaded yet.
            SheetNotFoundError: If the workbook has no sheet of that name.
        """
        with self._lock:
            if self._state.workbook is None:
                raise NoWorkbookLoadedError(sheet_name=sheet_name)
            if sheet_name not in self._state.sheet_names:
                raise SheetNotFoundError(
                    sheet_name, available=list(self._state.sheet_names)
                )
            self._load_sheet(sheet_name)
            return self._state

    def reset(self) -> None:
        """Return to the initial state, superseding any upload in flight."""
        with self._lock:
            generation = self._state.generation + 1
            self._state = ViewState(generation=generation)
            logger.info("View reset")

    def _load_sheet(self, sheet_name: str) -> None:
        workbook = self._state.workbook
        assert workbook is not None
        table = normalize_sheet(workbook.get_sheet(sheet_name), self.layout)
        self._state.selected_sheet = sheet_name
        self._state.headers = table.headers
        self._state.rows = table.rows
        self._state.status = ViewStatus.SHEET_SELECTED
        logger.info(
            "Sheet selected",
            sheet=sheet_name,
            headers=len(table.headers),
            rows=len(table.rows),
        )
