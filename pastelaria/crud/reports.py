"""Relatórios (somente leitura) sobre turnos fechados."""
from datetime import date
from typing import List

from sqlalchemy.orm import Session

from pastelaria.core.money import Money, money_sum
from pastelaria.core.settlement import CardProcessor
from pastelaria.models import Shift, ShiftStatus
from pastelaria.utils.dates import day_bounds


def shifts_closed_on(db: Session, day: date) -> List[Shift]:
    start, end = day_bounds(day)
    return (
        db.query(Shift)
        .filter(
            Shift.status == ShiftStatus.CLOSED,
            Shift.end_time >= start,
            Shift.end_time < end,
        )
        .order_by(Shift.end_time)
        .all()
    )


def daily_summary(db: Session, day: date) -> dict:
    """Totais do dia civil local sobre os resumos gravados no fechamento."""
    shifts = shifts_closed_on(db, day)

    cards_real = {}
    for processor in CardProcessor:
        readings = [s.settlement_for(processor) for s in shifts]
        cards_real[processor.value] = money_sum(r.real for r in readings if r is not None).amount

    return {
        "day": day,
        "shifts_count": len(shifts),
        "sales_cash": money_sum(s.closing_sales_cash for s in shifts).amount,
        "pix": money_sum(s.pix_total for s in shifts).amount,
        "cards_real": cards_real,
        "total_digital": money_sum(s.total_digital for s in shifts).amount,
        "total_revenue": money_sum(s.total_revenue for s in shifts).amount,
        "total_withdrawals": money_sum(s.closing_withdrawals for s in shifts).amount,
        "total_divergence": money_sum(s.divergence for s in shifts).amount,
    }


def discrepancies(db: Session, limit: int = 10) -> List[Shift]:
    """Últimos turnos fechados com falta ou sobra no caixa."""
    return (
        db.query(Shift)
        .filter(Shift.status == ShiftStatus.CLOSED, Shift.divergence != 0)
        .order_by(Shift.end_time.desc())
        .limit(limit)
        .all()
    )
