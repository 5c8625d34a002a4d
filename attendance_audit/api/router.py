"""
Main API router
"""
from fastapi import APIRouter

from attendance_audit.api.v1 import health, auth, attendance

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(attendance.router, prefix="/attendance", tags=["attendance"])
