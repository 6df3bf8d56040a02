"""
FastAPI application factory and API package.

Run with:
    uvicorn reqlint.api:app --port 8000

Or via the CLI:
    python -m reqlint serve
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from reqlint.config import get_settings
from reqlint.api.routes import health_router, lint_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Application factory — create and configure the FastAPI instance."""
    settings = get_settings()

    application = FastAPI(
        title="Requirement Annotation Linter API",
        description="Lints requirement annotations in guideline Markdown documents",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS — allow the docs site build (adjust origins in production)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    application.include_router(health_router, tags=["Health"])
    application.include_router(lint_router, prefix="/api", tags=["Lint"])

    logger.debug(f"Created {settings.app_name} API")
    return application


# Module-level instance for `uvicorn reqlint.api:app`
app = create_app()
