"""
Attendance Audit Backend - Main Application Entry Point
"""
from urllib.parse import urlparse, urlunparse

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException
from sqlalchemy.exc import OperationalError

from attendance_audit.api.router import api_router
from attendance_audit.core.config import settings
from attendance_audit.core.errors import (
    attendance_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)
from attendance_audit.core.exceptions import AttendanceError
from attendance_audit.core.logging import setup_logging, get_logger
from attendance_audit.db.init_db import init_db
from attendance_audit.db.session import SessionLocal

# Setup logging first
setup_logging()
logger = get_logger(__name__)


def _mask_database_url(url: str) -> str:
    """Mask password in DATABASE_URL for safe logging; show full path for sqlite."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return "***"
    if parsed.scheme.startswith("sqlite"):
        return url
    if parsed.password:
        netloc = f"{parsed.username}:****@{parsed.hostname or ''}"
        if parsed.port:
            netloc += f":{parsed.port}"
        return urlunparse(parsed._replace(netloc=netloc))
    return url


app = FastAPI(
    title="Attendance Audit Backend",
    description="Append-only attendance adjustments, effective-state reconstruction and audit trails",
    version=settings.VERSION or "1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
app.add_exception_handler(AttendanceError, attendance_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include all API routes under /api/v1
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup_log_config() -> None:
    """Log DATABASE_URL at startup so it can be verified against Alembic."""
    logger.info("DATABASE_URL (app): %s", _mask_database_url(settings.DATABASE_URL))


@app.on_event("startup")
def bootstrap_platform_owner() -> None:
    """Create the initial platform owner if none exists."""
    db = SessionLocal()
    try:
        init_db(db)
    except OperationalError as e:
        db.rollback()
        # Tables might not exist yet (migrations not run)
        if "no such table" in str(e).lower():
            logger.warning("Database tables not ready yet, skipping initial bootstrap")
        else:
            logger.error("Database error during platform owner bootstrap: %s", e)
    finally:
        db.close()
