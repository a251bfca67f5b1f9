"""Workbook format detection.

Uses magic bytes (file content signatures) and the uploaded file's extension
to decide whether an upload is an Office Open XML workbook or a legacy
binary Excel workbook.
"""

from pathlib import Path

import magic

from spreadsheet_viewer.utils.exceptions import UnsupportedFormatError
from spreadsheet_viewer.utils.logging import get_logger
from spreadsheet_viewer.workbook_document import WorkbookFormat

logger = get_logger(__name__)

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLSM_MIME = "application/vnd.ms-excel.sheet.macroEnabled.12"
XLS_MIME = "application/vnd.ms-excel"

EXTENSION_TO_MIME: dict[str, str] = {
    ".xlsx": XLSX_MIME,
    ".xlsm": XLSM_MIME,
    ".xls": XLS_MIME,
}

MIME_TO_FORMAT: dict[str, WorkbookFormat] = {
    XLSX_MIME: WorkbookFormat.XLSX,
    XLSM_MIME: WorkbookFormat.XLSX,
    XLS_MIME: WorkbookFormat.XLS,
}

# Generic containers libmagic reports for workbooks it cannot look inside.
# The extension decides which workbook format the container holds.
CONTAINER_MIME_TYPES: dict[str, set[WorkbookFormat]] = {
    "application/zip": {WorkbookFormat.XLSX},
    "application/x-zip-compressed": {WorkbookFormat.XLSX},
    "application/x-ole-storage": {WorkbookFormat.XLS},
    "application/CDFV2": {WorkbookFormat.XLS},
    "application/octet-stream": {WorkbookFormat.XLSX, WorkbookFormat.XLS},
}

SUPPORTED_MIME_TYPES: set[str] = set(MIME_TO_FORMAT.keys())


class FormatDetector:
    """Detects the workbook format of uploaded content."""

    def __init__(self) -> None:
        """Initialize the format detector with a magic instance."""
        self._magic = magic.Magic(mime=True)

    def detect(self, content: bytes, filename: str | None = None) -> WorkbookFormat:
        """Detect the workbook format from content bytes.

        Priority:
        1. A supported workbook MIME type found in the content.
        2. A generic container type confirmed by the file extension.

        Args:
            content: File content as bytes.
            filename: Optional filename for extension-based confirmation.

        Returns:
            The detected WorkbookFormat.

        Raises:
            UnsupportedFormatError: If the content is not a supported workbook.
        """
        extension = Path(filename).suffix.lower() if filename else ""
        mime_from_extension = EXTENSION_TO_MIME.get(extension)
        detected_mime = self._detect_mime_from_content(content)

        if detected_mime in SUPPORTED_MIME_TYPES:
            fmt = MIME_TO_FORMAT[detected_mime]
            if mime_from_extension and MIME_TO_FORMAT[mime_from_extension] != fmt:
                logger.warning(
                    "File extension does not match detected MIME type",
                    extension=extension,
                    detected_mime=detected_mime,
                )
            return fmt

        if detected_mime in CONTAINER_MIME_TYPES and mime_from_extension:
            fmt = MIME_TO_FORMAT[mime_from_extension]
            if fmt in CONTAINER_MIME_TYPES[detected_mime]:
                logger.debug(
                    "Workbook format taken from extension",
                    extension=extension,
                    detected_mime=detected_mime,
                )
                return fmt

        if detected_mime:
            raise UnsupportedFormatError(
                f"Unsupported file format: {detected_mime}. "
                f"Upload one of: {', '.join(self.get_supported_extensions())}",
                detected_mime=detected_mime,
                filename=filename,
            )
        raise UnsupportedFormatError(
            "Unable to detect file format. The upload is empty or unreadable.",
            filename=filename,
        )

    def _detect_mime_from_content(self, content: bytes) -> str | None:
        """Detect MIME type from file content using magic bytes.

        Args:
            content: File content as bytes.

        Returns:
            Detected MIME type or None if detection fails.
        """
        if not content:
            return None

        try:
            detected: str = self._magic.from_buffer(content)
        except magic.MagicException as e:
            logger.warning(
                "Magic detection failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return None
        return detected

    @staticmethod
    def get_supported_extensions() -> list[str]:
        """Get list of supported file extensions (with dots)."""
        return sorted(EXTENSION_TO_MIME.keys())
