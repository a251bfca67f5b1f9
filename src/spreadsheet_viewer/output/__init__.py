"""Output rendering for the spreadsheet viewer."""

from spreadsheet_viewer.output.html_renderer import (
    EMPTY_SHEET_MESSAGE,
    HtmlRenderer,
    render_page,
)

__all__ = ["EMPTY_SHEET_MESSAGE", "HtmlRenderer", "render_page"]
