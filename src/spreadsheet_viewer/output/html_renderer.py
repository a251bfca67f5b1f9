"""HTML page rendering for the viewer.

Builds the single page the browser sees: an upload form, a sheet picker
when the workbook has more than one sheet, and the selected sheet as a
table. All workbook-provided text is escaped.
"""

from html import escape

from spreadsheet_viewer.services.view_state import ViewState

PAGE_TITLE = "Excel File Viewer"
EMPTY_SHEET_MESSAGE = (
    "No data found for the selected sheet, or the sheet is empty/invalid."
)

_STYLE = """
body { font-family: sans-serif; padding: 20px; }
.sheet-picker { margin-top: 15px; }
.error { margin-top: 15px; color: #a40000; }
table { margin-top: 20px; border-collapse: collapse; }
th, td { border: 1px solid #999; padding: 10px; }
.empty { margin-top: 20px; }
"""


class HtmlRenderer:
    """Render a :class:`ViewState` as a complete HTML document."""

    def __init__(
        self,
        upload_action: str = "/upload",
        select_action: str = "/select",
        reset_action: str = "/reset",
    ) -> None:
        self.upload_action = upload_action
        self.select_action = select_action
        self.reset_action = reset_action

    def render_page(self, state: ViewState, *, error: str | None = None) -> str:
        """Render the full page for ``state``.

        Args:
            state: View state to display.
            error: Optional message shown above the table.

        Returns:
            HTML document as a string.
        """
        parts = [
            "<!DOCTYPE html>",
            '<html lang="en">',
            "<head>",
            '<meta charset="utf-8">',
            f"<title>{PAGE_TITLE}</title>",
            f"<style>{_STYLE}</style>",
            "</head>",
            "<body>",
            f"<h2>{PAGE_TITLE}</h2>",
            self.render_upload_form(state),
        ]
        if error:
            parts.append(f'<p class="error" role="alert">{escape(error)}</p>')
        if len(state.sheet_names) > 1:
            parts.append(self.render_sheet_picker(state))
        if state.rows:
            parts.append(self.render_table(state.headers, state.rows))
        if state.is_empty_selection:
            parts.append(f'<p class="empty">{EMPTY_SHEET_MESSAGE}</p>')
        parts.extend(["</body>", "</html>"])
        return "\n".join(parts)

    def render_upload_form(self, state: ViewState) -> str:
        loaded = ""
        if state.filename:
            loaded = (
                f' <span class="filename">{escape(state.filename)}</span>'
                f' <button type="submit" formaction="{self.reset_action}"'
                ' formnovalidate>Clear</button>'
            )
        return (
            f'<form method="post" action="{self.upload_action}"'
            ' enctype="multipart/form-data">'
            '<input type="file" name="file" accept=".xlsx, .xls" required>'
            ' <button type="submit">Upload</button>'
            f"{loaded}"
            "</form>"
        )

    def render_sheet_picker(self, state: ViewState) -> str:
        options = []
        for name in state.sheet_names:
            selected = " selected" if name == state.selected_sheet else ""
            options.append(
                f'<option value="{escape(name)}"{selected}>{escape(name)}</option>'
            )
        return (
            f'<form class="sheet-picker" method="post" action="{self.select_action}">'
            '<label for="sheet_name">Select Sheet:&nbsp;</label>'
            '<select id="sheet_name" name="sheet_name"'
            ' onchange="this.form.submit()">'
            f"{''.join(options)}"
            "</select>"
            "<noscript> <button type=\"submit\">Show</button></noscript>"
            "</form>"
        )

    @staticmethod
    def render_table(headers: list[str], rows: list[list[str]]) -> str:
        """Render headers and rows; the first header cell is left blank
        because the first column holds row labels."""
        head = "".join(f"<th>{escape(h)}</th>" for h in headers)
        body = "".join(
            "<tr>" + "".join(f"<td>{escape(cell)}</td>" for cell in row) + "</tr>"
            for row in rows
        )
        return (
            "<table>"
            f"<thead><tr><th></th>{head}</tr></thead>"
            f"<tbody>{body}</tbody>"
            "</table>"
        )


_default_renderer = HtmlRenderer()


def render_page(state: ViewState, *, error: str | None = None) -> str:
    """Render ``state`` with the default form actions."""
    return _default_renderer.render_page(state, error=error)
