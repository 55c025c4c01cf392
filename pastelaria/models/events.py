from sqlalchemy import Column, Integer, String, DateTime, JSON
from pastelaria.database import Base

SHIFT_OPENED = "shift.opened"
SHIFT_CLOSED = "shift.closed"
SHIFT_CORRECTED = "shift.corrected"
WITHDRAWAL_RECORDED = "withdrawal.recorded"
WITHDRAWAL_RETRACTED = "withdrawal.retracted"
SALES_RECORD_CREATED = "sales_record.created"
SALES_RECORD_DELETED = "sales_record.deleted"
FINANCIAL_MOVEMENT_CREATED = "financial_movement.created"


class DomainEvent(Base):
    """Outbox: gravado na mesma transação da mudança, lido pela camada de tempo real."""
    __tablename__ = "domain_events"

    id = Column(Integer, primary_key=True, index=True)
    event_type = Column(String, nullable=False, index=True)
    entity_id = Column(String(32), nullable=True)
    shift_id = Column(String(32), nullable=True, index=True)
    payload = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
