from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from hotelhub.models.audit_log import AuditLog
from hotelhub.services.auth import Actor
from hotelhub.services.workflow import Transition


def record_transition(db: AsyncSession, actor: Actor, hotel_id: int, transition: Transition) -> AuditLog:
    """Stage the audit row; it commits or rolls back with the transition itself."""
    entry = AuditLog(
        actor_account_id=actor.account_id,
        actor_role=actor.role,
        action=f"hotel.{transition.action.value}",
        hotel_id=hotel_id,
        from_status=transition.from_status,
        to_status=transition.to_status,
        reason=transition.reason,
    )
    db.add(entry)
    return entry
