# ============================================================================
# Portal Resources - FastAPI Application Entry Point
# ============================================================================
"""
Main FastAPI application module for the Portal Resources API.

This module sets up the FastAPI application with:
- CORS middleware configuration for the portal frontend
- Logging configuration (debug flag raises the level)
- Error handling for request validation and unexpected errors
- API router integration under /api/v1

Usage:
    Direct: python -m portal_resources.main
    Server: uvicorn portal_resources.main:app --host 0.0.0.0 --port 8000
"""

import logging
from datetime import datetime
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.v1 import api_router
from .config import settings
from .core.models.resource_models import ServiceResult

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("portal_resources.main")

# ============================================================================
# APPLICATION INITIALIZATION
# ============================================================================

app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description=(
        "Portal Resources API\n\n"
        "Learning resources filed under the Batch / Term / Domain / Subject "
        "taxonomy, with their files stored in Google Drive and their records "
        "in a Google Sheets tab."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# ============================================================================
# MIDDLEWARE CONFIGURATION
# ============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


@app.on_event("startup")
def startup_event() -> None:
    logger.info(f"Starting {settings.api_title} {settings.api_version}")
    logger.info(f"Storage backend: {settings.storage_backend}")
    if settings.use_google and not settings.spreadsheet_id:
        logger.warning("SPREADSHEET_ID is not set; it must come from config.yml")


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies get the same envelope as core validation failures."""
    result = ServiceResult.fail(str(exc), "Validation")
    return JSONResponse(status_code=422, content=result.model_dump())


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for errors raised outside the service boundary (e.g. wiring)."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    detail = str(exc) if settings.debug else "An unexpected error occurred"
    return JSONResponse(status_code=500, content=ServiceResult.fail(detail).model_dump())


# ============================================================================
# ROUTER CONFIGURATION
# ============================================================================

app.include_router(api_router, prefix="/api/v1")


@app.get("/", tags=["root"])
def root() -> Dict[str, Any]:
    return {
        "name": settings.api_title,
        "version": settings.api_version,
        "status": "running",
        "docs_url": "/docs",
        "health_check": "/api/v1/system/health",
        "timestamp": datetime.now(),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "portal_resources.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level="info",
    )
