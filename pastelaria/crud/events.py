import enum
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from pastelaria.core.money import Money
from pastelaria.models import DomainEvent
from pastelaria.utils.dates import utcnow


def jsonable(value: Any) -> Any:
    if isinstance(value, Money):
        return str(value.amount)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {(k.value if isinstance(k, enum.Enum) else str(k)): jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(v) for v in value]
    if isinstance(value, enum.Enum):
        return value.value
    return value


def emit(
    db: Session,
    event_type: str,
    payload: Dict[str, Any],
    entity_id: Optional[str] = None,
    shift_id: Optional[str] = None,
) -> DomainEvent:
    """Grava o evento na outbox. Não faz commit: vai junto com a transação do chamador."""
    event = DomainEvent(
        event_type=event_type,
        entity_id=entity_id,
        shift_id=shift_id,
        payload=jsonable(payload),
        created_at=utcnow(),
    )
    db.add(event)
    return event


def list_events(db: Session, after: int = 0, limit: int = 100) -> List[DomainEvent]:
    return (
        db.query(DomainEvent)
        .filter(DomainEvent.id > after)
        .order_by(DomainEvent.id)
        .limit(limit)
        .all()
    )
