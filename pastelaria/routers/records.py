# pastelaria/routers/records.py
from typing import Annotated, List, Optional
from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from pastelaria.crud import sales as crud_sales
from pastelaria.database import get_db
from pastelaria.models import User
from pastelaria.schemas.records import SalesRecordCreate, SalesRecordRead
from pastelaria.security import get_current_user

router = APIRouter()


@router.get("/{shift_id}/records", response_model=List[SalesRecordRead])
def list_records(
    shift_id: str,
    consumer_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return crud_sales.list_records(db, current_user, shift_id, consumer_id)


@router.post("/{shift_id}/records", response_model=SalesRecordRead)
def record_sale(
    shift_id: str,
    record_in: Annotated[SalesRecordCreate, Body(discriminator="type")],
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Registra venda (type=sale, com forma de pagamento) ou consumo interno
    (type=consumption, com o colaborador). Preço e nome vêm do catálogo.
    """
    return crud_sales.record_sale(db, current_user, shift_id, record_in, record_id=record_in.id)


@router.delete("/{shift_id}/records/{record_id}")
def retract_sale(
    shift_id: str,
    record_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Exclui o registro. Venda em dinheiro sai do total do caixa automaticamente."""
    crud_sales.retract_sale(db, current_user, shift_id, record_id)
    return {"success": True}
