from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from pastelaria.database import get_db
from pastelaria.models import Product, User
from pastelaria.schemas.products import ProductRead
from pastelaria.security import get_current_user

router = APIRouter()


@router.get("/", response_model=List[ProductRead])
def list_products(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Catálogo ativo para o PDV (somente leitura)."""
    return db.query(Product).filter(Product.is_active == True).order_by(Product.category, Product.name).all()
