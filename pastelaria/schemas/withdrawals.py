from pydantic import BaseModel
from typing import Optional
from decimal import Decimal
from datetime import datetime


class WithdrawalCreate(BaseModel):
    amount: Decimal
    reason: str = ""
    # Id gerado pelo cliente para deduplicar reenvios
    id: Optional[str] = None


class WithdrawalRead(BaseModel):
    id: str
    shift_id: str
    amount: Decimal
    reason: str
    created_at: datetime
    user_id: Optional[int] = None

    class Config:
        from_attributes = True
