# pastelaria/routers/reports.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional

from pastelaria.crud import audit
from pastelaria.crud import reports as crud_reports
from pastelaria.database import get_db
from pastelaria.models import User
from pastelaria.schemas.reports import AuditEntryRead, DailySummary
from pastelaria.schemas.shifts import ShiftRead
from pastelaria.security import require_admin
from pastelaria.utils.dates import local_tz, utcnow

router = APIRouter()


@router.get("/daily-summary", response_model=DailySummary)
def get_daily_summary(
    target_date: Optional[date] = None,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Resumo do dia: vendas em dinheiro, PIX, cartões, sangrias e divergência."""
    day = target_date or utcnow().astimezone(local_tz()).date()
    return crud_reports.daily_summary(db, day)


@router.get("/audit/discrepancies", response_model=List[ShiftRead])
def get_cash_discrepancies(
    limit: int = 10,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Lista os últimos turnos com falta ou sobra no caixa."""
    return crud_reports.discrepancies(db, limit)


@router.get("/audit/trail", response_model=List[AuditEntryRead])
def get_audit_trail(
    shift_id: Optional[str] = None,
    limit: int = 100,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return audit.list_entries(db, shift_id, limit)
