from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from producshine.application.dtos.common_dto import HealthResponse, RootResponse
from producshine.infrastructure.api.middlewares import add_default_middlewares, add_exception_handlers
from producshine.infrastructure.api.routes.auth_routes import router as auth_router
from producshine.infrastructure.api.routes.profile_routes import router as profile_router
from producshine.infrastructure.api.routes.tool_routes import router as tool_router
from producshine.infrastructure.database.postgres_client import close_postgres_client


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    close_postgres_client()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        lifespan=lifespan,
        title="Producshine Backend",
        version="0.1.0",
        description="""
        ## Producshine Backend API

        Product discovery backend: users submit tools, browse, search and filter
        them, and upvote their favorites. Supabase provides auth, the database
        and file storage.

        ### Features
        - **Authentication**: Supabase access tokens; profiles are provisioned on first sign-in
        - **Profiles**: Public profiles with username, tagline, bio and avatar
        - **Tools**: Submit tools with an optional logo, browse, search, filter and sort them
        - **Upvotes**: One upvote per user and tool, toggled on and off

        ### Authentication
        Write endpoints require a Bearer token in the Authorization header:
        ```
        Authorization: Bearer your-jwt-token
        ```
        Read endpoints accept one optionally to report `is_upvoted`.

        ### Error Responses
        - **400 Bad Request**: Invalid input such as a missing field or a bad logo
        - **401 Unauthorized**: Missing or invalid authentication token
        - **403 Forbidden**: Changing something owned by another user
        - **404 Not Found**: Requested resource does not exist
        - **409 Conflict**: Resource already exists
        - **500 Internal Server Error**: The backend rejected the request
        - **504 Gateway Timeout**: A listing query took too long
        """,
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )
    add_default_middlewares(app)
    add_exception_handlers(app)

    @app.get(
        "/",
        response_model=RootResponse,
        summary="API Root",
        description="Get basic information about the Producshine API",
        response_description="API information including status and version",
    )
    def root():
        """Get API root information."""
        return {"status": "ok", "service": "producshine-backend", "version": app.version}

    @app.get(
        "/health",
        response_model=HealthResponse,
        summary="Health Check",
        description="Check if the API service is running and healthy",
        response_description="Health status of the API service",
    )
    def health():
        """Check API health status."""
        return {"status": "healthy"}

    @app.get(
        "/api/health",
        response_model=HealthResponse,
        summary="Profile API Health Check",
        description="Health endpoint of the profile REST surface",
        include_in_schema=False,
    )
    def api_health():
        return {"status": "ok", "message": "API server running"}

    app.include_router(auth_router)
    app.include_router(profile_router)
    app.include_router(tool_router)
    return app


app = create_app()
