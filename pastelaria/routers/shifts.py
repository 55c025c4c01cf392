# pastelaria/routers/shifts.py
from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from datetime import date

from pastelaria.core.money import Money
from pastelaria.crud import shifts as crud_shifts
from pastelaria.database import get_db
from pastelaria.models import Shift, User
from pastelaria.schemas.shifts import (
    ClosingResult, CloseShiftRequest, InitialCashUpdate, RecomputeShiftRequest,
    ShiftMonitorRead, ShiftOpen, ShiftRead, TeamMemberCreate, TeamMemberRead,
)
from pastelaria.security import get_current_user, require_admin
from pastelaria.utils.dates import day_bounds

router = APIRouter()


def _monitor_view(shift: Shift) -> ShiftMonitorRead:
    drawer = Money.of(shift.initial_cash) + Money.of(shift.sales_cash) - Money.of(shift.total_withdrawals)
    data = ShiftRead.model_validate(shift).model_dump()
    return ShiftMonitorRead(**data, current_drawer=drawer.amount)


@router.get("/current", response_model=Optional[ShiftMonitorRead])
def get_current_shift(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Devolve o turno aberto do usuário, ou null."""
    shift = crud_shifts.current_shift(db, current_user)
    return _monitor_view(shift) if shift else None


@router.post("/open", response_model=ShiftRead)
def open_shift(
    shift_in: ShiftOpen,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return crud_shifts.open_shift(db, current_user, shift_in.initial_cash)


@router.post("/close", response_model=ClosingResult)
def close_shift(
    close_in: CloseShiftRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    summary = crud_shifts.close_shift(
        db,
        current_user,
        close_in.shift_id,
        counted_cash=close_in.final_cash_count,
        payments=close_in.payments.to_readings(),
        divergence_reason=close_in.divergence_reason,
        idempotency_key=close_in.idempotency_key,
    )
    return ClosingResult.from_summary(summary)


@router.post("/recompute", response_model=ClosingResult)
def recompute_closed_shift(
    recompute_in: RecomputeShiftRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Correção de turno fechado (admin). Sem divergenceReason mantém o motivo gravado."""
    reason = recompute_in.divergence_reason
    if "divergence_reason" not in recompute_in.model_fields_set:
        reason = crud_shifts.KEEP
    summary = crud_shifts.recompute_closed_shift(
        db,
        admin,
        recompute_in.shift_id,
        counted_cash=recompute_in.final_cash_count,
        payments=recompute_in.payments.to_readings(),
        withdrawals_override=recompute_in.withdrawals_override,
        divergence_reason=reason,
    )
    return ClosingResult.from_summary(summary)


# --- Monitor ao vivo e histórico (admin) ---

@router.get("/open", response_model=List[ShiftMonitorRead])
def list_open_shifts(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return [_monitor_view(s) for s in crud_shifts.list_open_shifts(db)]


@router.get("/history", response_model=List[ShiftRead])
def list_closed_shifts(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = 100,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    start = day_bounds(start_date)[0] if start_date else None
    end = day_bounds(end_date)[1] if end_date else None
    return crud_shifts.list_closed_shifts(db, start, end, limit)


@router.get("/{shift_id}", response_model=ShiftRead)
def read_shift(
    shift_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return crud_shifts.read_shift(db, current_user, shift_id)


@router.put("/{shift_id}/initial-cash", response_model=ShiftRead)
def update_initial_cash(
    shift_id: str,
    update_in: InitialCashUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return crud_shifts.update_initial_cash(db, admin, shift_id, update_in.initial_cash)


# --- Equipe do turno ---

@router.get("/{shift_id}/team", response_model=List[TeamMemberRead])
def list_team(
    shift_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return crud_shifts.list_team(db, current_user, shift_id)


@router.post("/{shift_id}/team", response_model=TeamMemberRead)
def add_team_member(
    shift_id: str,
    member_in: TeamMemberCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return crud_shifts.add_team_member(db, current_user, shift_id, member_in.user_id)


@router.delete("/{shift_id}/team/{user_id}")
def remove_team_member(
    shift_id: str,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    crud_shifts.remove_team_member(db, current_user, shift_id, user_id)
    return {"success": True}
