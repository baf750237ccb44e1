"""
IT Asset Management: FastAPI Application.

This is the entry point for the application.
All routers and error handlers are registered here, and the
process-wide permission cache is created once and shared by
every request through app.state.
"""

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

import itam.models  # noqa: F401  registers every table on Base.metadata
from itam.config import get_settings
from itam.errors import (
    ConflictError,
    Forbidden,
    ImmutableRecordError,
    ItamError,
    NotFound,
    StorageFailure,
    Unauthenticated,
    ValidationError,
)
from itam.models.base import SessionLocal
from itam.services.permission_service import PermissionCache, session_loader
from itam.api.health import router as health_router
from itam.api.modules import router as modules_router
from itam.api.permissions import router as permissions_router
from itam.api.audit import router as audit_router
from itam.api.employees import router as employees_router
from itam.api.assets import router as assets_router
from itam.api.fingerprints import router as fingerprints_router

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="IT asset management: permissions, audit trail, sequential IDs",
)

app.state.permission_cache = PermissionCache(
    loader=session_loader(SessionLocal),
    ttl_seconds=settings.PERMISSION_CACHE_TTL_SECONDS,
)

# Register routers
app.include_router(health_router)
app.include_router(modules_router)
app.include_router(permissions_router)
app.include_router(audit_router)
app.include_router(employees_router)
app.include_router(assets_router)
app.include_router(fingerprints_router)


STATUS_BY_ERROR: dict[type[ItamError], int] = {
    Unauthenticated: 401,
    Forbidden: 403,
    ValidationError: 400,
    NotFound: 404,
    ConflictError: 409,
    ImmutableRecordError: 409,
    StorageFailure: 503,
}


@app.exception_handler(ItamError)
async def itam_error_handler(request: Request, exc: ItamError):
    status_code = 500
    for error_type, code in STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            status_code = code
            break

    if isinstance(exc, StorageFailure):
        logger.error("Storage failure on %s %s: %s",
                     request.method, request.url.path, exc)
        detail = "The data store is unavailable, try again later."
    else:
        detail = str(exc)

    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.kind, "detail": detail},
        headers=headers,
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("Integrity error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=409,
        content={"error": "conflict", "detail": "A record with this key already exists."},
    )


@app.exception_handler(Exception)
async def general_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception on %s %s:\n%s",
                 request.method, request.url.path, traceback.format_exc())
    return JSONResponse(
        status_code=500,
        content={"error": "internal_error", "detail": "An unexpected error occurred."},
    )
