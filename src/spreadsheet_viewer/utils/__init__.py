"""Utilities package for the spreadsheet viewer.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
"""

from spreadsheet_viewer.utils.exceptions import (
    ErrorCode,
    FileError,
    FileTooLargeError,
    HTTPStatusMixin,
    InvalidRangeError,
    NoWorkbookLoadedError,
    SessionError,
    SessionExpiredError,
    SessionNotFoundError,
    SheetError,
    SheetNotFoundError,
    UnsupportedFormatError,
    ValidationError,
    ViewerError,
    WorkbookParseError,
)
from spreadsheet_viewer.utils.logging import (
    LogContext,
    StructuredLogger,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Exceptions
    "ErrorCode",
    "FileError",
    "FileTooLargeError",
    "HTTPStatusMixin",
    "InvalidRangeError",
    "NoWorkbookLoadedError",
    "SessionError",
    "SessionExpiredError",
    "SessionNotFoundError",
    "SheetError",
    "SheetNotFoundError",
    "UnsupportedFormatError",
    "ValidationError",
    "ViewerError",
    "WorkbookParseError",
    # Logging
    "LogContext",
    "StructuredLogger",
    "get_logger",
    "get_request_id",
    "set_request_id",
]
