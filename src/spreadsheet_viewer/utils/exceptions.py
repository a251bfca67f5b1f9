"""Centralized exception classes for the spreadsheet viewer.

This module provides a hierarchy of custom exceptions with error codes,
HTTP status code mapping, and structured error details for consistent
error handling throughout the application.

Exception Hierarchy:
    ViewerError (base)
    ├── FileError
    │   ├── FileTooLargeError
    │   ├── UnsupportedFormatError
    │   └── WorkbookParseError
    ├── SheetError
    │   ├── SheetNotFoundError
    │   ├── InvalidRangeError
    │   └── NoWorkbookLoadedError
    ├── SessionError
    │   ├── SessionNotFoundError
    │   └── SessionExpiredError
    └── ValidationError

Error Codes:
    All errors have a unique error code (e.g., "E1001") that can be used
    for programmatic error handling and documentation.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Enumeration of all error codes used in the application.

    Error codes are grouped by category:
    - E1xxx: File/workbook errors
    - E2xxx: Sheet errors
    - E3xxx: Session errors
    - E9xxx: Internal/unexpected errors
    """

    # File errors (E1xxx)
    FILE_TOO_LARGE = "E1001"
    UNSUPPORTED_FORMAT = "E1002"
    FILE_READ_ERROR = "E1003"
    WORKBOOK_PARSE_FAILED = "E1004"

    # Sheet errors (E2xxx)
    SHEET_NOT_FOUND = "E2001"
    INVALID_RANGE = "E2002"
    NO_WORKBOOK_LOADED = "E2003"

    # Session errors (E3xxx)
    SESSION_NOT_FOUND = "E3001"
    SESSION_EXPIRED = "E3002"

    # Input validation (E4xxx)
    VALIDATION_FAILED = "E4001"

    # Internal errors (E9xxx)
    INTERNAL_ERROR = "E9001"
    CONFIGURATION_ERROR = "E9002"


class HTTPStatusMixin:
    """Mixin that provides HTTP status code for exceptions.

    Subclasses should set the `http_status` class attribute.
    """

    http_status: int = 500

    def get_http_status(self) -> int:
        """Get the HTTP status code for this exception.

        Returns:
            HTTP status code appropriate for this error.
        """
        return self.http_status


class ViewerError(Exception, HTTPStatusMixin):
    """Base exception for all spreadsheet viewer errors.

    Attributes:
        message: Human-readable error message.
        error_code: Unique error code from ErrorCode enum.
        details: Optional dictionary with additional error details.
        http_status: HTTP status code for API responses (default 500).
    """

    http_status: int = 500

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Error code from ErrorCode enum.
            details: Optional additional details about the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary for API responses.

        Returns:
            Dictionary with error information.
        """
        result: dict[str, Any] = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code.value}] {self.message}"


# =============================================================================
# File Errors (E1xxx)
# =============================================================================


class FileError(ViewerError):
    """Base class for uploaded file errors."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.FILE_READ_ERROR,
        filename: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with filename information.

        Args:
            message: Error message.
            error_code: Error code.
            filename: Name of the problematic file.
            details: Additional details.
        """
        details = details or {}
        if filename:
            details["filename"] = filename
        super().__init__(message, error_code, details)
        self.filename = filename


class FileTooLargeError(FileError):
    """Raised when an upload exceeds the maximum allowed size."""

    http_status: int = 413

    def __init__(
        self,
        file_size: int,
        max_size: int,
        filename: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with size information.

        Args:
            file_size: Actual file size in bytes.
            max_size: Maximum allowed size in bytes.
            filename: Optional file name.
            details: Additional details.
        """
        details = details or {}
        details["file_size_bytes"] = file_size
        details["max_size_bytes"] = max_size
        message = (
            f"File size ({file_size} bytes) exceeds maximum "
            f"allowed size ({max_size} bytes)"
        )
        super().__init__(
            message=message,
            error_code=ErrorCode.FILE_TOO_LARGE,
            filename=filename,
            details=details,
        )
        self.file_size = file_size
        self.max_size = max_size


class UnsupportedFormatError(FileError):
    """Raised when an upload is not a supported workbook format."""

    def __init__(
        self,
        message: str,
        detected_mime: str | None = None,
        filename: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with format information.

        Args:
            message: Error message.
            detected_mime: MIME type that was detected.
            filename: Optional file name.
            details: Additional details.
        """
        details = details or {}
        if detected_mime:
            details["detected_mime_type"] = detected_mime
        super().__init__(
            message=message,
            error_code=ErrorCode.UNSUPPORTED_FORMAT,
            filename=filename,
            details=details,
        )
        self.detected_mime = detected_mime


class WorkbookParseError(FileError):
    """Raised when the parsing library cannot read the workbook."""

    http_status: int = 422

    def __init__(
        self,
        message: str,
        filename: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the parser failure.

        Args:
            message: Error message.
            filename: Optional file name.
            details: Additional details.
        """
        super().__init__(
            message=message,
            error_code=ErrorCode.WORKBOOK_PARSE_FAILED,
            filename=filename,
            details=details,
        )


# =============================================================================
# Sheet Errors (E2xxx)
# =============================================================================


class SheetError(ViewerError):
    """Base class for sheet selection and layout errors."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.SHEET_NOT_FOUND,
        sheet_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with sheet name.

        Args:
            message: Error message.
            error_code: Error code.
            sheet_name: Name of the affected sheet.
            details: Additional details.
        """
        details = details or {}
        if sheet_name is not None:
            details["sheet_name"] = sheet_name
        super().__init__(message, error_code, details)
        self.sheet_name = sheet_name


class SheetNotFoundError(SheetError):
    """Raised when a sheet name is not part of the loaded workbook."""

    http_status: int = 404

    def __init__(
        self,
        sheet_name: str,
        available: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the requested sheet name.

        Args:
            sheet_name: The sheet that was not found.
            available: Sheet names that do exist.
            details: Additional details.
        """
        details = details or {}
        if available is not None:
            details["available_sheets"] = available
        super().__init__(
            message=f"Sheet not found: {sheet_name}",
            error_code=ErrorCode.SHEET_NOT_FOUND,
            sheet_name=sheet_name,
            details=details,
        )


class InvalidRangeError(SheetError):
    """Raised when an occupied range is malformed."""

    def __init__(
        self,
        message: str,
        sheet_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with range details.

        Args:
            message: Error message.
            sheet_name: Optional sheet name.
            details: Additional details.
        """
        super().__init__(
            message=message,
            error_code=ErrorCode.INVALID_RANGE,
            sheet_name=sheet_name,
            details=details,
        )


class NoWorkbookLoadedError(SheetError):
    """Raised when a sheet is selected before any workbook was uploaded."""

    http_status: int = 409

    def __init__(
        self,
        sheet_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the sheet the caller tried to select.

        Args:
            sheet_name: Requested sheet name.
            details: Additional details.
        """
        super().__init__(
            message="No workbook loaded. Upload a file first.",
            error_code=ErrorCode.NO_WORKBOOK_LOADED,
            sheet_name=sheet_name,
            details=details,
        )


# =============================================================================
# Session Errors (E3xxx)
# =============================================================================


class SessionError(ViewerError):
    """Base class for view session errors."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.SESSION_NOT_FOUND,
        session_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with session ID.

        Args:
            message: Error message.
            error_code: Error code.
            session_id: ID of the affected session.
            details: Additional details.
        """
        details = details or {}
        if session_id:
            details["session_id"] = session_id
        super().__init__(message, error_code, details)
        self.session_id = session_id


class SessionNotFoundError(SessionError):
    """Raised when a session is not found."""

    http_status: int = 404

    def __init__(self, session_id: str, details: dict[str, Any] | None = None) -> None:
        """Initialize with session ID.

        Args:
            session_id: The session ID that was not found.
            details: Additional details.
        """
        super().__init__(
            message=f"Session not found: {session_id}",
            error_code=ErrorCode.SESSION_NOT_FOUND,
            session_id=session_id,
            details=details,
        )


class SessionExpiredError(SessionError):
    """Raised when a session has been idle longer than its TTL."""

    http_status: int = 410

    def __init__(
        self,
        session_id: str,
        ttl_seconds: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with session ID and TTL.

        Args:
            session_id: The expired session ID.
            ttl_seconds: The TTL in seconds.
            details: Additional details.
        """
        details = details or {}
        if ttl_seconds:
            details["ttl_seconds"] = ttl_seconds
        super().__init__(
            message=f"Session has expired: {session_id}",
            error_code=ErrorCode.SESSION_EXPIRED,
            session_id=session_id,
            details=details,
        )


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(ViewerError):
    """General validation error for request input."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        field: str | None = None,
        errors: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with validation details.

        Args:
            message: Main error message.
            field: Field that failed validation.
            errors: List of validation errors.
            details: Additional details.
        """
        details = details or {}
        if field:
            details["field"] = field
        if errors:
            details["validation_errors"] = errors
        super().__init__(
            message=message,
            error_code=ErrorCode.VALIDATION_FAILED,
            details=details,
        )
