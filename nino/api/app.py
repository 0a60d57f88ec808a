"""FastAPI application exposing graph rendering, plots, workspace files and tool execution."""

from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from nino import __version__
from nino.api.routes.execute import router as execute_router
from nino.api.routes.files import router as files_router
from nino.api.routes.health import router as health_router
from nino.api.routes.schema import router as schema_router
from nino.config import NinoSettings
from nino.exceptions import (
    DiscoveryError,
    FileConflictError,
    InvalidRequestError,
    NinoException,
    NotFoundError,
    PlotError,
    RenderError,
    ToolExecutionError,
    ToolTimeoutError,
    WorkspaceError,
)
from nino.state import ProjectStore
from nino.utils.logging import logger

# Most specific first
STATUS_CODES = [
    (ToolTimeoutError, status.HTTP_504_GATEWAY_TIMEOUT),
    (ToolExecutionError, status.HTTP_502_BAD_GATEWAY),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (PlotError, status.HTTP_404_NOT_FOUND),
    (InvalidRequestError, status.HTTP_400_BAD_REQUEST),
    (FileConflictError, status.HTTP_409_CONFLICT),
    (DiscoveryError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (RenderError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (WorkspaceError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_for(exc: NinoException) -> int:
    for exc_type, code in STATUS_CODES:
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def nino_exception_handler(request: Request, exc: NinoException) -> JSONResponse:
    code = status_for(exc)
    if code >= 500:
        logger.error("Request failed", path=request.url.path, error=str(exc))
    else:
        logger.warning("Request rejected", path=request.url.path, status=code, error=str(exc))
    return JSONResponse(
        status_code=code,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Validation error", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Invalid request format",
            "invalid_fields": [str(err["loc"][-1]) for err in exc.errors()],
        },
    )


def create_app(store: ProjectStore, settings: Optional[NinoSettings] = None) -> FastAPI:
    """Build the application around an already loaded ProjectStore."""
    app = FastAPI(title="NINO API", version=__version__)
    app.state.store = store
    app.state.settings = settings or NinoSettings()

    app.add_exception_handler(NinoException, nino_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.include_router(health_router)
    app.include_router(schema_router, prefix="/api")
    app.include_router(files_router, prefix="/api")
    app.include_router(execute_router, prefix="/api")
    return app
