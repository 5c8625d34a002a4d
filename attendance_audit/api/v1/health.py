"""
Health check endpoint
"""
from fastapi import APIRouter
from attendance_audit.core.config import settings
from attendance_audit.core.constants import SERVICE_NAME

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "version": settings.VERSION or "1.0.0",
    }
