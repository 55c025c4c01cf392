from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from pastelaria.core.money import Money
from pastelaria.crud.events import jsonable
from pastelaria.models import AuditAction, AuditEntry, User
from pastelaria.utils.dates import utcnow


def record(
    db: Session,
    action: AuditAction,
    actor: User,
    shift_id: Optional[str] = None,
    movement_id: Optional[str] = None,
    previous_divergence: Optional[Money] = None,
    divergence: Optional[Money] = None,
    reason: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> AuditEntry:
    entry = AuditEntry(
        action=action,
        actor_id=actor.id,
        created_at=utcnow(),
        shift_id=shift_id,
        movement_id=movement_id,
        previous_divergence=previous_divergence.amount if previous_divergence is not None else None,
        divergence=divergence.amount if divergence is not None else None,
        reason=reason,
        details=jsonable(details) if details else None,
    )
    db.add(entry)
    return entry


def list_entries(db: Session, shift_id: Optional[str] = None, limit: int = 100) -> List[AuditEntry]:
    query = db.query(AuditEntry)
    if shift_id:
        query = query.filter(AuditEntry.shift_id == shift_id)
    return query.order_by(AuditEntry.id.desc()).limit(limit).all()
