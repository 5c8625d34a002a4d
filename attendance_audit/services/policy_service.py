"""
Organization attendance policy service
"""
import logging
from typing import Optional
from sqlalchemy.orm import Session

from attendance_audit.core.config import settings
from attendance_audit.core.constants import LATE_MINUTES_MAX
from attendance_audit.core.exceptions import PermissionDenied, CrossOrgForbidden
from attendance_audit.models.policy import OrganizationPolicy
from attendance_audit.schemas.policy import AdjustmentPolicy
from attendance_audit.services.audit_service import log_audit
from attendance_audit.services.membership_service import can_access_organization
from attendance_audit.utils.permissions import can_manage_settings
from attendance_audit.utils.roles import role_name

logger = logging.getLogger(__name__)


def get_adjustment_policy(db: Session, organization_id: Optional[int]) -> AdjustmentPolicy:
    """
    Get the effective adjustment policy for an organization
    
    Falls back to the configured defaults when the organization has no
    policy row. The late-minutes cap never exceeds the global maximum.
    
    Args:
        db: Database session
        organization_id: Organization ID
    
    Returns:
        AdjustmentPolicy
    """
    global_cap = min(settings.MAX_LATE_MINUTES, LATE_MINUTES_MAX)
    policy = None
    if organization_id is not None:
        policy = db.query(OrganizationPolicy).filter(
            OrganizationPolicy.organization_id == organization_id
        ).first()
    
    if not policy:
        return AdjustmentPolicy(
            organization_id=organization_id,
            adjustment_window_days=settings.DEFAULT_ADJUSTMENT_WINDOW_DAYS,
            late_minutes_cap=global_cap,
        )
    
    return AdjustmentPolicy(
        organization_id=organization_id,
        adjustment_window_days=policy.adjustment_window_days,
        late_minutes_cap=min(policy.late_minutes_cap, global_cap),
    )


def update_adjustment_policy(
    db: Session,
    actor,
    organization_id: int,
    adjustment_window_days: int,
    late_minutes_cap: int,
) -> AdjustmentPolicy:
    """
    Create or update an organization's adjustment policy
    
    Raises:
        PermissionDenied: If the actor cannot manage attendance settings
        CrossOrgForbidden: If the organization is not the actor's
    """
    if not can_manage_settings(actor.role):
        raise PermissionDenied("You do not have permission to change attendance settings")
    if not can_access_organization(actor, organization_id):
        raise CrossOrgForbidden()
    
    policy = db.query(OrganizationPolicy).filter(
        OrganizationPolicy.organization_id == organization_id
    ).first()
    old_values = None
    if policy:
        old_values = {
            "adjustment_window_days": policy.adjustment_window_days,
            "late_minutes_cap": policy.late_minutes_cap,
        }
        policy.adjustment_window_days = adjustment_window_days
        policy.late_minutes_cap = late_minutes_cap
    else:
        policy = OrganizationPolicy(
            organization_id=organization_id,
            adjustment_window_days=adjustment_window_days,
            late_minutes_cap=late_minutes_cap,
        )
        db.add(policy)
    db.flush()
    
    log_audit(
        db=db,
        actor_id=actor.id,
        action="POLICY_UPDATE",
        entity_type="organization_policy",
        entity_id=policy.id,
        organization_id=organization_id,
        meta={
            "old": old_values,
            "new": {
                "adjustment_window_days": adjustment_window_days,
                "late_minutes_cap": late_minutes_cap,
            },
            "actor_role": role_name(actor.role),
        },
    )
    logger.info(
        "Adjustment policy for org %s set to window=%s cap=%s by user %s",
        organization_id, adjustment_window_days, late_minutes_cap, actor.id,
    )
    return get_adjustment_policy(db, organization_id)
