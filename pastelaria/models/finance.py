import enum
from sqlalchemy import Column, String, DateTime, Numeric, ForeignKey, Enum, Integer
from pastelaria.database import Base
from pastelaria.models.shifts import new_id


class MovementType(str, enum.Enum):
    ENTRY = "entry"
    EXIT = "exit"


# --- Movimento do cofre (separado das gavetas dos turnos) ---
class FinancialMovement(Base):
    __tablename__ = "financial_movements"

    id = Column(String(32), primary_key=True, default=new_id)
    movement_type = Column(Enum(MovementType), nullable=False)
    category = Column(String, nullable=False)      # faturamento, fornecedores, ...
    description = Column(String, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    date = Column(DateTime(timezone=True), nullable=False, index=True)

    # Envelope de fechamento: turno de origem
    shift_id = Column(String(32), ForeignKey("shifts.id"), nullable=True, unique=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
