from pydantic import BaseModel
from typing import Optional
from decimal import Decimal
from datetime import datetime

from pastelaria.models.finance import MovementType


class ExpenseCreate(BaseModel):
    description: str
    amount: Decimal
    category: str = "fornecedores"


class MovementRead(BaseModel):
    id: str
    movement_type: MovementType
    category: str
    description: str
    amount: Decimal
    date: datetime
    shift_id: Optional[str] = None

    class Config:
        from_attributes = True


class BalanceRead(BaseModel):
    balance: Decimal
    entries: Decimal
    exits: Decimal
