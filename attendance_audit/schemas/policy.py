"""
Organization attendance policy schemas
"""
from typing import Optional
from pydantic import BaseModel, Field


class AdjustmentPolicy(BaseModel):
    """Effective adjustment policy for an organization (stored row or configured defaults)"""
    organization_id: Optional[int] = None
    adjustment_window_days: int
    late_minutes_cap: int


class PolicyUpdateRequest(BaseModel):
    organization_id: Optional[int] = Field(None, description="Target organization (platform owners only; defaults to your own)")
    adjustment_window_days: int = Field(..., ge=0, le=3650, description="Days back an occurrence may be adjusted")
    late_minutes_cap: int = Field(..., ge=1, le=180, description="Max late minutes for a LATE adjustment")
