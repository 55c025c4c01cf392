# pastelaria/models/__init__.py

# 1. Base declarativa
from pastelaria.database import Base

# 2. Usuários e catálogo
from .users import User, Role
from .products import Product

# 3. Turnos e sub-registros
from .shifts import (
    Shift,
    ShiftStatus,
    ClosingState,
    CardSettlement,
    Withdrawal,
    SalesRecord,
    RecordType,
    PaymentMethod,
    TeamMember,
)

# 4. Cofre, auditoria e eventos
from .finance import FinancialMovement, MovementType
from .audit import AuditEntry, AuditAction
from .events import DomainEvent
