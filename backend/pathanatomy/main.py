"""FastAPI app factory."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pathanatomy.config import settings
from pathanatomy.errors import (
    EmptySourceError,
    FatalConstructionError,
    PathAnatomyError,
    PerformanceWarning,
    SceneNotFoundError,
    StructuralMismatch,
    UserInputError,
)
from pathanatomy.models.responses import ErrorResponse

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.pathanatomy_log_level.upper(), logging.DEBUG),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

logger = logging.getLogger(__name__)

# Most specific first
_STATUS: list[tuple[type[PathAnatomyError], int]] = [
    (SceneNotFoundError, 404),
    (EmptySourceError, 422),
    (UserInputError, 400),
    (PerformanceWarning, 409),
    (StructuralMismatch, 409),
    (FatalConstructionError, 500),
]


def status_for(error: PathAnatomyError) -> int:
    for cls, status in _STATUS:
        if isinstance(error, cls):
            return status
    return 500


async def _operation_error(request: Request, exc: PathAnatomyError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    content = ErrorResponse(error=type(exc).__name__, detail=str(exc)).model_dump()
    if isinstance(exc, PerformanceWarning):
        content["vertex_count"] = exc.vertex_count
        content["threshold"] = exc.threshold
    return JSONResponse(status_code=status, content=content)


def create_app() -> FastAPI:
    app = FastAPI(
        title="PathAnatomy",
        description="Procedural anatomy overlays and reveal choreography for vector paths",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(PathAnatomyError, _operation_error)

    # Import all constructor modules to trigger registration
    from pathanatomy.engine.pipeline import load_constructors

    load_constructors()

    from pathanatomy.api.router import api_router

    app.include_router(api_router)

    return app


app = create_app()
