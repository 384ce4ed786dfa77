"""Audit trail for admin actions."""

from typing import Optional

from services.shop_service.models import AuditEntityType, ShopAuditLog
from sqlalchemy.ext.asyncio import AsyncSession


def log_audit(
    db: AsyncSession,
    entity_type: AuditEntityType,
    entity_id: int,
    action: str,
    performed_by: int,
    old_value: Optional[dict] = None,
    new_value: Optional[dict] = None,
    notes: Optional[str] = None,
) -> ShopAuditLog:
    """Stage an audit row in the caller's transaction."""
    audit_log = ShopAuditLog(
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        old_value=old_value,
        new_value=new_value,
        performed_by=performed_by,
        notes=notes,
    )
    db.add(audit_log)
    return audit_log
