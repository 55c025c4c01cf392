from pydantic import BaseModel
from typing import Dict, Optional, Any
from decimal import Decimal
from datetime import date, datetime

from pastelaria.models.audit import AuditAction


class DailySummary(BaseModel):
    day: date
    shifts_count: int
    sales_cash: Decimal
    pix: Decimal
    cards_real: Dict[str, Decimal]
    total_digital: Decimal
    total_revenue: Decimal
    total_withdrawals: Decimal
    total_divergence: Decimal


class AuditEntryRead(BaseModel):
    id: int
    action: AuditAction
    actor_id: int
    created_at: datetime
    shift_id: Optional[str] = None
    movement_id: Optional[str] = None
    previous_divergence: Optional[Decimal] = None
    divergence: Optional[Decimal] = None
    reason: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True


class EventRead(BaseModel):
    id: int
    event_type: str
    entity_id: Optional[str] = None
    shift_id: Optional[str] = None
    payload: Dict[str, Any]
    created_at: datetime

    class Config:
        from_attributes = True
