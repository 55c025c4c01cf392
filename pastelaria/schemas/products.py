from pydantic import BaseModel
from typing import Optional
from decimal import Decimal


class ProductRead(BaseModel):
    id: int
    name: str
    category: Optional[str] = None
    price: Decimal

    class Config:
        from_attributes = True
