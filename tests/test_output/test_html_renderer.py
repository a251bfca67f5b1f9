"""Tests for the HTML page renderer."""

import pytest

from spreadsheet_viewer.output.html_renderer import (
    EMPTY_SHEET_MESSAGE,
    PAGE_TITLE,
    HtmlRenderer,
    render_page,
)
from spreadsheet_viewer.services.view_state import ViewController, ViewState
from spreadsheet_viewer.workbook_document import WorkbookData
from tests.fixtures import make_workbook


def _loaded(workbook: WorkbookData) -> ViewState:
    controller = ViewController()
    controller.apply_workbook(workbook, controller.begin_upload())
    return controller.state


@pytest.fixture
def loaded_state(two_sheet_workbook: WorkbookData) -> ViewState:
    return _loaded(two_sheet_workbook)


class TestEmptyView:
    """Tests for the page before any upload."""

    def test_shows_upload_form_only(self) -> None:
        html = render_page(ViewState())

        assert f"<title>{PAGE_TITLE}</title>" in html
        assert 'action="/upload"' in html
        assert 'enctype="multipart/form-data"' in html
        assert 'accept=".xlsx, .xls"' in html
        assert "<select" not in html
        assert "<table>" not in html
        assert EMPTY_SHEET_MESSAGE not in html
        assert "Clear" not in html


class TestLoadedView:
    """Tests for the page with a workbook loaded."""

    def test_sheet_picker_lists_sheets_with_selection(
        self, loaded_state: ViewState
    ) -> None:
        html = render_page(loaded_state)

        assert '<select id="sheet_name" name="sheet_name"' in html
        assert '<option value="Quarterly" selected>Quarterly</option>' in html
        assert '<option value="Summary">Summary</option>' in html
        assert 'action="/select"' in html

    def test_table_has_blank_corner_then_headers(
        self, loaded_state: ViewState
    ) -> None:
        html = render_page(loaded_state)

        assert (
            "<thead><tr><th></th><th>Q1</th><th>Q2</th><th>Q3</th></tr></thead>"
            in html
        )
        assert (
            "<tr><td>Team Collaboration</td><td>7</td><td>25</td><td>30</td></tr>"
            in html
        )

    def test_clear_button_shown_with_filename(self, loaded_state: ViewState) -> None:
        html = render_page(loaded_state)

        assert 'formaction="/reset"' in html
        assert loaded_state.filename is not None
        assert loaded_state.filename in html

    def test_single_sheet_has_no_picker(self) -> None:
        state = _loaded(make_workbook({"Only": [["", "", "H"], ["", "a", "1"]]}))

        html = render_page(state)

        assert "<select" not in html
        assert "<table>" in html

    def test_empty_sheet_message(self) -> None:
        state = _loaded(make_workbook({"Blank": [], "Other": [["x"]]}))

        html = render_page(state)

        assert EMPTY_SHEET_MESSAGE in html
        assert "<table>" not in html

    def test_headers_without_rows_render_no_table(self) -> None:
        state = _loaded(make_workbook({"Header": [["", "", "Q1"]]}))

        html = render_page(state)

        assert "<table>" not in html
        assert EMPTY_SHEET_MESSAGE not in html


class TestEscaping:
    """Tests that workbook-provided text cannot inject markup."""

    def test_cell_sheet_and_file_names_are_escaped(self) -> None:
        workbook = make_workbook(
            {
                "<b>One</b>": [["", "", "<script>x</script>"], ["", "a&b", '"q"']],
                "Two": [["x"]],
            },
            filename="<img>.xlsx",
        )
        html = render_page(_loaded(workbook))

        assert "<script>x</script>" not in html
        assert "&lt;script&gt;x&lt;/script&gt;" in html
        assert "a&amp;b" in html
        assert "&quot;q&quot;" in html
        assert "&lt;b&gt;One&lt;/b&gt;" in html
        assert "&lt;img&gt;.xlsx" in html

    def test_error_message_is_escaped(self) -> None:
        html = render_page(ViewState(), error="Bad <file>")

        assert '<p class="error" role="alert">Bad &lt;file&gt;</p>' in html


class TestCustomActions:
    """Tests for renderer form targets."""

    def test_actions_can_be_mounted_elsewhere(self, loaded_state: ViewState) -> None:
        renderer = HtmlRenderer(
            upload_action="/viewer/upload",
            select_action="/viewer/select",
            reset_action="/viewer/reset",
        )

        html = renderer.render_page(loaded_state)

        assert 'action="/viewer/upload"' in html
        assert 'action="/viewer/select"' in html
        assert 'formaction="/viewer/reset"' in html

    def test_render_table_static(self) -> None:
        html = HtmlRenderer.render_table(["A"], [["label", "1"]])

        assert html == (
            "<table><thead><tr><th></th><th>A</th></tr></thead>"
            "<tbody><tr><td>label</td><td>1</td></tr></tbody></table>"
        )
