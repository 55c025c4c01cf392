# pastelaria/routers/finance.py
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pastelaria.crud import finance as crud_finance
from pastelaria.database import get_db
from pastelaria.models import User
from pastelaria.schemas.finance import BalanceRead, ExpenseCreate, MovementRead
from pastelaria.schemas.shifts import ShiftRead
from pastelaria.security import require_admin

router = APIRouter()


@router.get("/balance", response_model=BalanceRead)
def get_balance(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    totals = crud_finance.totals_by_type(db)
    return {
        "balance": crud_finance.balance(db).amount,
        "entries": totals["entry"].amount,
        "exits": totals["exit"].amount,
    }


@router.get("/movements", response_model=List[MovementRead])
def list_movements(
    limit: int = 50,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return crud_finance.list_movements(db, limit)


@router.get("/envelopes/pending", response_model=List[ShiftRead])
def pending_envelopes(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Turnos fechados cujo envelope ainda não foi conferido."""
    return crud_finance.pending_envelopes(db)


@router.post("/envelopes/{shift_id}/confirm", response_model=MovementRead)
def confirm_envelope(
    shift_id: str,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return crud_finance.confirm_envelope(db, admin, shift_id)


@router.post("/expenses", response_model=MovementRead)
def register_expense(
    expense_in: ExpenseCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return crud_finance.register_expense(
        db, admin,
        description=expense_in.description,
        amount=expense_in.amount,
        category=expense_in.category,
    )
