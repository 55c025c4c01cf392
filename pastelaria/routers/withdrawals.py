# pastelaria/routers/withdrawals.py
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pastelaria.crud import withdrawals as ledger
from pastelaria.database import get_db
from pastelaria.models import User
from pastelaria.schemas.withdrawals import WithdrawalCreate, WithdrawalRead
from pastelaria.security import get_current_user

router = APIRouter()


@router.get("/{shift_id}/withdrawals", response_model=List[WithdrawalRead])
def list_withdrawals(
    shift_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Sangrias do turno, mais recentes primeiro."""
    return ledger.list_withdrawals(db, current_user, shift_id)


@router.post("/{shift_id}/withdrawals", response_model=WithdrawalRead)
def record_withdrawal(
    shift_id: str,
    withdrawal_in: WithdrawalCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return ledger.record_withdrawal(
        db, current_user, shift_id,
        amount=withdrawal_in.amount,
        reason=withdrawal_in.reason,
        withdrawal_id=withdrawal_in.id,
    )


@router.delete("/{shift_id}/withdrawals/{withdrawal_id}")
def retract_withdrawal(
    shift_id: str,
    withdrawal_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Apaga a sangria; o valor volta para a gaveta."""
    ledger.retract_withdrawal(db, current_user, shift_id, withdrawal_id)
    return {"success": True}
