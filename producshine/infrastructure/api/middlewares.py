from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from producshine.application.dtos.common_dto import ErrorResponse
from producshine.domain.errors import (
    AuthRequiredError,
    BackendError,
    BackendTimeoutError,
    NotFoundError,
    PermissionDeniedError,
    UniqueViolationError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def add_default_middlewares(app: FastAPI) -> None:
    # CORS configuration
    # Development and staging allow the local frontend dev servers
    env = os.getenv("ENV", "development")

    if env in ("development", "staging"):
        allowed_origins = [
            "http://localhost:3000",
            "http://localhost:5173",  # Vite default
            "http://localhost:8080",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
            "http://127.0.0.1:8080",
        ]
    else:
        allowed_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _error(status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(detail=detail).model_dump())


def add_exception_handlers(app: FastAPI) -> None:
    """Map the domain error taxonomy onto HTTP responses."""

    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return _error(400, str(exc))

    @app.exception_handler(AuthRequiredError)
    async def auth_required(request: Request, exc: AuthRequiredError) -> JSONResponse:
        return _error(401, str(exc))

    @app.exception_handler(PermissionDeniedError)
    async def permission_denied(request: Request, exc: PermissionDeniedError) -> JSONResponse:
        return _error(403, str(exc))

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return _error(404, str(exc))

    @app.exception_handler(UniqueViolationError)
    async def conflict(request: Request, exc: UniqueViolationError) -> JSONResponse:
        logger.warning("Conflict on %s %s: %s", request.method, request.url.path, exc)
        return _error(409, "Resource already exists")

    @app.exception_handler(BackendTimeoutError)
    async def timeout(request: Request, exc: BackendTimeoutError) -> JSONResponse:
        return _error(504, "The request took too long. Please try again.")

    @app.exception_handler(BackendError)
    async def backend_error(request: Request, exc: BackendError) -> JSONResponse:
        logger.error("Backend failure on %s %s: %s", request.method, request.url.path, exc)
        return _error(500, "Internal server error")
