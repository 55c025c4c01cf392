# pastelaria/routers/events.py
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pastelaria.crud import events as crud_events
from pastelaria.database import get_db
from pastelaria.models import User
from pastelaria.schemas.reports import EventRead
from pastelaria.security import require_admin

router = APIRouter()


@router.get("/", response_model=List[EventRead])
def list_events(
    after: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Feed da outbox para a camada de tempo real: eventos com id > after."""
    return crud_events.list_events(db, after, limit)
