from pydantic import BaseModel
from typing import Literal, Optional, Union
from decimal import Decimal
from datetime import datetime

from pastelaria.models.shifts import PaymentMethod, RecordType


# --- Variantes de criação (discriminadas por "type") ---

class SaleRecordCreate(BaseModel):
    type: Literal["sale"]
    payment_method: PaymentMethod
    product_id: int
    quantity: int = 1
    id: Optional[str] = None


class ConsumptionRecordCreate(BaseModel):
    type: Literal["consumption"]
    product_id: int
    quantity: int = 1
    consumer_id: int
    id: Optional[str] = None


SalesRecordCreate = Union[SaleRecordCreate, ConsumptionRecordCreate]


class SalesRecordRead(BaseModel):
    id: str
    shift_id: str
    record_type: RecordType
    payment_method: Optional[PaymentMethod] = None
    product_id: Optional[int] = None
    product_name: str
    unit_price: Decimal
    quantity: int
    total: Decimal
    consumer_id: Optional[int] = None
    consumer_name: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
