import enum
from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, Enum, Text, JSON
from pastelaria.database import Base


class AuditAction(str, enum.Enum):
    SHIFT_CLOSED = "shift_closed"
    SHIFT_CORRECTED = "shift_corrected"
    ENVELOPE_CONFIRMED = "envelope_confirmed"
    EXPENSE_REGISTERED = "expense_registered"


class AuditEntry(Base):
    """Trilha de auditoria: só inserção, nunca alterada nem apagada."""
    __tablename__ = "audit_trail"

    id = Column(Integer, primary_key=True, index=True)
    action = Column(Enum(AuditAction), nullable=False, index=True)
    actor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    shift_id = Column(String(32), ForeignKey("shifts.id"), nullable=True, index=True)
    movement_id = Column(String(32), nullable=True)

    previous_divergence = Column(Numeric(10, 2), nullable=True)
    divergence = Column(Numeric(10, 2), nullable=True)
    reason = Column(Text, nullable=True)
    details = Column(JSON, nullable=True)
