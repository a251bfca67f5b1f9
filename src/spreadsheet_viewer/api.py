"""FastAPI application for the spreadsheet viewer."""

import uuid
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response

from spreadsheet_viewer import __version__
from spreadsheet_viewer.config import settings, validate_settings_on_startup
from spreadsheet_viewer.models import (
    ErrorDetail,
    HealthResponse,
    SelectSheetRequest,
    ViewStateResponse,
)
from spreadsheet_viewer.output.html_renderer import render_page
from spreadsheet_viewer.services.session_store import (
    SessionStore,
    ViewSession,
    get_session_store,
    reset_session_store,
)
from spreadsheet_viewer.services.workbook_reader import (
    WorkbookReader,
    WorkbookReadOptions,
)
from spreadsheet_viewer.utils.exceptions import (
    ErrorCode,
    FileTooLargeError,
    ValidationError,
    ViewerError,
)
from spreadsheet_viewer.utils.logging import (
    clear_context,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
    set_session_id,
)

configure_logging(
    level=settings.log_level_int,
    use_structured_formatter=True,
)
logger = get_logger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> Any:
        app.state.session_store = get_session_store()
        try:
            yield
        finally:
            reset_session_store()
            app.state.session_store = None

    app = FastAPI(
        title="Spreadsheet Viewer",
        description=(
            "Upload an Excel workbook, pick a sheet and view it as a table with "
            "blank cells filled from the rows above."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    validate_settings_on_startup(settings)

    reader = WorkbookReader()

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next: Any) -> Any:
        """Assign a request ID, expose it in the response and clear the
        logging context afterwards."""
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        set_request_id(request_id)
        request.state.request_id = request_id

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_context()

    @app.exception_handler(ViewerError)
    async def viewer_exception_handler(
        request: Request, exc: ViewerError
    ) -> JSONResponse:
        """Return coded viewer errors as structured JSON."""
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.error(
            f"Viewer Error: {exc.message}",
            error_code=exc.error_code.value,
            http_status=exc.http_status,
        )
        return JSONResponse(
            status_code=exc.http_status,
            content=ErrorDetail(
                detail=exc.message,
                error_code=exc.error_code.value,
                details=exc.details if exc.details else None,
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        """Custom exception handler for HTTP exceptions."""
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.warning(
            f"HTTP Error: {exc.detail}",
            status_code=exc.status_code,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorDetail(
                detail=str(exc.detail),
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Log unexpected errors and return a generic response."""
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.exception(
            f"Unexpected error: {type(exc).__name__}",
            error_type=type(exc).__name__,
        )
        if settings.debug:
            detail = f"Internal server error: {type(exc).__name__}: {exc}"
        else:
            detail = "Internal server error. Please try again later."

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorDetail(
                detail=detail,
                error_code=ErrorCode.INTERNAL_ERROR.value,
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    # ------------------------------------------------------------------ #
    # Session helpers
    # ------------------------------------------------------------------ #

    def resolve_session(request: Request) -> ViewSession:
        store: SessionStore = request.app.state.session_store
        session = store.get_or_create(
            request.cookies.get(settings.session_cookie_name)
        )
        set_session_id(session.session_id)
        return session

    def attach_session(response: Response, session: ViewSession) -> Response:
        response.set_cookie(
            settings.session_cookie_name,
            session.session_id,
            max_age=settings.session_ttl_seconds,
            httponly=True,
            samesite="lax",
        )
        return response

    def view_response(session: ViewSession) -> ViewStateResponse:
        return ViewStateResponse.from_state(
            session.session_id, session.controller.snapshot()
        )

    async def load_upload(session: ViewSession, file: UploadFile) -> bool:
        """Run the upload transition for ``file``.

        The generation token is taken before the body is read, so an upload
        that finishes after a newer one is discarded.

        Returns:
            Whether the parsed workbook was applied to the view.
        """
        generation = session.controller.begin_upload()

        if file.filename is None or file.filename == "":
            logger.warning("Upload request missing file")
            raise ValidationError(
                message="A workbook file must be provided",
                field="file",
            )

        content = await file.read()
        file_size = len(content)
        if file_size > settings.max_file_size_bytes:
            logger.warning(
                "File too large",
                file_size=file_size,
                max_size=settings.max_file_size_bytes,
            )
            raise FileTooLargeError(
                file_size=file_size,
                max_size=settings.max_file_size_bytes,
                filename=file.filename,
            )

        options = WorkbookReadOptions(
            max_rows=settings.max_rows,
            max_columns=settings.max_columns,
            anchor_at_origin=settings.anchor_range_at_origin,
        )
        workbook = await run_in_threadpool(
            reader.read, content, file.filename, options
        )
        applied = session.controller.apply_workbook(workbook, generation)

        logger.info(
            "Workbook uploaded",
            filename=file.filename,
            file_size=file_size,
            applied=applied,
        )
        return applied

    def error_page(session: ViewSession, exc: ViewerError) -> Response:
        logger.warning(
            f"Viewer Error: {exc.message}",
            error_code=exc.error_code.value,
            http_status=exc.http_status,
        )
        response = HTMLResponse(
            render_page(session.controller.state, error=exc.message),
            status_code=exc.http_status,
        )
        return attach_session(response, session)

    def redirect_home(session: ViewSession) -> Response:
        response = RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)
        return attach_session(response, session)

    # ------------------------------------------------------------------ #
    # Routes
    # ------------------------------------------------------------------ #

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> dict[str, Any]:
        """Check the health status of the service."""
        logger.debug("Health check requested")
        return {
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "version": __version__,
        }

    @app.get("/", response_class=HTMLResponse, tags=["Viewer"])
    async def view_page(request: Request) -> Response:
        """Render the viewer page for the caller's session."""
        session = resolve_session(request)
        response = HTMLResponse(render_page(session.controller.state))
        return attach_session(response, session)

    @app.post("/upload", tags=["Viewer"])
    async def upload_page(
        request: Request,
        file: Annotated[UploadFile, File(description="Workbook to display")],
    ) -> Response:
        """Load an uploaded workbook and show its first sheet."""
        session = resolve_session(request)
        try:
            await load_upload(session, file)
        except ViewerError as exc:
            return error_page(session, exc)
        return redirect_home(session)

    @app.post("/select", tags=["Viewer"])
    async def select_page(
        request: Request,
        sheet_name: Annotated[str, Form(description="Sheet to display")],
    ) -> Response:
        """Switch the displayed sheet."""
        session = resolve_session(request)
        try:
            session.controller.select_sheet(sheet_name)
        except ViewerError as exc:
            return error_page(session, exc)
        return redirect_home(session)

    @app.post("/reset", tags=["Viewer"])
    async def reset_page(request: Request) -> Response:
        """Clear the loaded workbook from the caller's view."""
        session = resolve_session(request)
        session.controller.reset()
        return redirect_home(session)

    @app.get("/api/state", response_model=ViewStateResponse, tags=["API"])
    async def get_state(request: Request, response: Response) -> ViewStateResponse:
        """Return the caller's view state."""
        session = resolve_session(request)
        attach_session(response, session)
        return view_response(session)

    @app.post(
        "/api/upload",
        response_model=ViewStateResponse,
        tags=["API"],
        responses={
            400: {"model": ErrorDetail, "description": "Unsupported file"},
            413: {"model": ErrorDetail, "description": "File too large"},
            422: {"model": ErrorDetail, "description": "Unreadable workbook"},
        },
    )
    async def upload_api(
        request: Request,
        response: Response,
        file: Annotated[UploadFile, File(description="Workbook to display")],
    ) -> ViewStateResponse:
        """Load an uploaded workbook and return the resulting view state."""
        session = resolve_session(request)
        attach_session(response, session)
        await load_upload(session, file)
        return view_response(session)

    @app.post(
        "/api/select",
        response_model=ViewStateResponse,
        tags=["API"],
        responses={
            404: {"model": ErrorDetail, "description": "Sheet not found"},
            409: {"model": ErrorDetail, "description": "No workbook loaded"},
        },
    )
    async def select_api(
        request: Request, response: Response, body: SelectSheetRequest
    ) -> ViewStateResponse:
        """Switch the selected sheet and return the resulting view state."""
        session = resolve_session(request)
        attach_session(response, session)
        session.controller.select_sheet(body.sheet_name)
        return view_response(session)

    logger.info("FastAPI application created successfully")
    return app


app = create_app()
