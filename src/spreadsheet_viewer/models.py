"""Pydantic models for API requests and responses."""

from typing import Any

from pydantic import BaseModel, Field

from spreadsheet_viewer.services.view_state import ViewStatus
from spreadsheet_viewer.utils.exceptions import ErrorCode


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    timestamp: str
    version: str


class SelectSheetRequest(BaseModel):
    """Request body for switching the selected sheet."""

    sheet_name: str = Field(..., description="Name of the sheet to display")


class ViewStateResponse(BaseModel):
    """Serialized view state of one session."""

    session_id: str = Field(..., description="View session identifier")
    status: ViewStatus = Field(..., description="Lifecycle state of the view")
    filename: str | None = Field(
        default=None, description="Name of the loaded workbook file"
    )
    sheet_names: list[str] = Field(
        default_factory=list, description="Sheets in workbook order"
    )
    selected_sheet: str | None = Field(
        default=None, description="Sheet currently displayed"
    )
    headers: list[str] = Field(
        default_factory=list, description="Column titles of the selected sheet"
    )
    rows: list[list[str]] = Field(
        default_factory=list,
        description="Label plus data values per row, after fill-down",
    )
    generation: int = Field(..., description="Upload generation of this view")

    @classmethod
    def from_state(cls, session_id: str, state: dict[str, Any]) -> "ViewStateResponse":
        """Build a response from ``ViewState.to_dict()`` output."""
        return cls(session_id=session_id, **state)


class ErrorDetail(BaseModel):
    """Error detail model for API error responses."""

    detail: str = Field(..., description="Human-readable error message")
    error_code: str | None = Field(
        default=None,
        description="Machine-readable error code (e.g., 'E1001')",
    )
    details: dict[str, Any] | None = Field(
        default=None,
        description="Additional error details for debugging",
    )
    request_id: str | None = Field(
        default=None,
        description="Request ID for error correlation",
    )

    @classmethod
    def from_error_code(
        cls,
        error_code: ErrorCode,
        detail: str,
        details: dict[str, Any] | None = None,
        request_id: str | None = None,
    ) -> "ErrorDetail":
        """Create an ErrorDetail from an ErrorCode enum value."""
        return cls(
            detail=detail,
            error_code=error_code.value,
            details=details,
            request_id=request_id,
        )
