"""Spreadsheet Viewer - browse Excel workbooks as HTML tables."""

__version__ = "0.1.0"

from spreadsheet_viewer.api import app, create_app  # noqa: E402

__all__ = ["app", "create_app"]


def main() -> None:
    """Run the FastAPI server using uvicorn."""
    import uvicorn

    from spreadsheet_viewer.config import settings

    uvicorn.run(
        "spreadsheet_viewer.api:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
    )
