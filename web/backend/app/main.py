"""FastAPI application for the CivicHub community platform.

Provides REST API endpoints wrapping the civichub package for:
- Resource submission intake and admin review
- Content flags and automated rule matching
- Bulk moderation actions and the moderation history
- Community posts and user notifications
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from civichub import __version__
from civichub.config import get_settings
from civichub.errors import CivicHubError
from web.backend.app.routers import (
    auth,
    flags,
    moderation,
    notifications,
    posts,
    resources,
    rules,
    submissions,
)

settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="CivicHub API",
    description=(
        "REST API for the CivicHub community platform. "
        "Provides endpoints for resource submissions, content moderation, "
        "community posts and notifications."
    ),
    version=__version__,
)

# ---------------------------------------------------------------------------
# CORS middleware
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------


@app.exception_handler(CivicHubError)
async def civichub_error_handler(request: Request, exc: CivicHubError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = "; ".join(
        f"{'.'.join(str(p) for p in e.get('loc', ())[1:])}: {e.get('msg')}" for e in errors
    )
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": detail or "Invalid request"},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error"},
    )


# ---------------------------------------------------------------------------
# Include routers
# ---------------------------------------------------------------------------
app.include_router(auth.router)
app.include_router(submissions.router)
app.include_router(resources.router)
app.include_router(flags.router)
app.include_router(moderation.router)
app.include_router(rules.router)
app.include_router(posts.router)
app.include_router(notifications.router)


# ---------------------------------------------------------------------------
# Root and health-check endpoints
# ---------------------------------------------------------------------------


@app.get("/", tags=["meta"])
async def root():
    """Return basic API information."""
    return {
        "name": "CivicHub API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


@app.get("/health", tags=["meta"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
