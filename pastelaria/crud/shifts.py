"""
Abertura, fechamento e correção de turnos.

O cálculo fica em `pastelaria.core.reconciliation`; aqui ficam a leitura
do turno com lock, a busca do baseline das maquininhas, a gravação do
resumo e a trilha de auditoria. Fechamento e correção rodam numa única
transação: qualquer erro antes do commit deixa o turno como estava.
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pastelaria.config import get_settings
from pastelaria.core.money import Money
from pastelaria.core.reconciliation import (
    ClosingSummary, PaymentReadings, ShiftLedger, reconcile,
)
from pastelaria.core.settlement import CardProcessor, CardReading
from pastelaria.crud import audit, events
from pastelaria.crud.common import ensure_can_view, get_shift
from pastelaria.crud.sales import cash_sales_total, reconcile_sales_cash
from pastelaria.crud.withdrawals import ledger_amounts, reconcile_total
from pastelaria.database import transaction
from pastelaria.errors import (
    NotFoundError, PermissionDeniedError, PreconditionError, ValidationError,
)
from pastelaria.models import (
    AuditAction, CardSettlement, ClosingState, Shift, ShiftStatus, TeamMember, User,
)
from pastelaria.models.events import SHIFT_CLOSED, SHIFT_CORRECTED, SHIFT_OPENED
from pastelaria.utils.dates import local_day_start, utcnow

logger = logging.getLogger(__name__)

# Marca "argumento não informado" (None é um valor válido para o motivo)
KEEP = object()


# --- Abertura ---

def open_shift(db: Session, actor: User, initial_cash, now: Optional[datetime] = None) -> Shift:
    now = now or utcnow()
    initial = Money.of(initial_cash)
    if initial.is_negative():
        raise ValidationError("O fundo de caixa não pode ser negativo.")

    try:
        with transaction(db):
            # 1. Um turno aberto por operador
            active = db.query(Shift).filter(
                Shift.user_id == actor.id,
                Shift.status == ShiftStatus.OPEN,
            ).first()
            if active:
                raise PreconditionError("Você já tem um turno aberto.")

            # 2. Cria o turno
            shift = Shift(
                user_id=actor.id,
                status=ShiftStatus.OPEN,
                start_time=now,
                initial_cash=initial.amount,
                sales_cash=0,
                total_withdrawals=0,
                financial_confirmed=False,
            )
            db.add(shift)
            db.flush()
            events.emit(db, SHIFT_OPENED, {"user_id": actor.id, "initial_cash": initial}, entity_id=shift.id, shift_id=shift.id)
    except IntegrityError:
        # Outra abertura simultânea ganhou a corrida (índice parcial)
        if current_shift(db, actor) is not None:
            raise PreconditionError("Você já tem um turno aberto.")
        raise

    db.refresh(shift)
    logger.info("Turno %s aberto por %s com fundo %s", shift.id, actor.username, initial.amount)
    return shift


def current_shift(db: Session, actor: User) -> Optional[Shift]:
    return db.query(Shift).filter(
        Shift.user_id == actor.id,
        Shift.status == ShiftStatus.OPEN,
    ).first()


def list_open_shifts(db: Session) -> List[Shift]:
    return db.query(Shift).filter(Shift.status == ShiftStatus.OPEN).order_by(Shift.start_time).all()


def list_closed_shifts(
    db: Session,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    limit: int = 100,
) -> List[Shift]:
    query = db.query(Shift).filter(Shift.status == ShiftStatus.CLOSED)
    if start is not None:
        query = query.filter(Shift.end_time >= start)
    if end is not None:
        query = query.filter(Shift.end_time < end)
    return query.order_by(Shift.end_time.desc()).limit(limit).all()


def read_shift(db: Session, actor: User, shift_id: str) -> Shift:
    shift = get_shift(db, shift_id)
    ensure_can_view(db, shift, actor)
    return shift


def update_initial_cash(db: Session, actor: User, shift_id: str, amount) -> Shift:
    if not actor.is_admin:
        raise PermissionDeniedError("Apenas administradores podem alterar o fundo de caixa.")
    with transaction(db):
        shift = get_shift(db, shift_id, lock=True)
        if not shift.is_open:
            raise PreconditionError("Turno não está aberto.")
        value = Money.of(amount)
        if value.is_negative():
            raise ValidationError("O fundo de caixa não pode ser negativo.")
        shift.initial_cash = value.amount
    db.refresh(shift)
    return shift


# --- Baseline das maquininhas ---

def find_previous_closed_shift(db: Session, shift: Shift, now: datetime) -> Optional[Shift]:
    """Último turno fechado no mesmo dia, estritamente antes de `now`, pelo horário de término."""
    day_start = local_day_start(now)
    return (
        db.query(Shift)
        .filter(
            Shift.id != shift.id,
            Shift.status == ShiftStatus.CLOSED,
            Shift.end_time >= day_start,
            Shift.end_time < now,
        )
        .order_by(Shift.end_time.desc())
        .first()
    )


def card_baselines(db: Session, shift: Shift, now: datetime) -> Dict[CardProcessor, Money]:
    previous = find_previous_closed_shift(db, shift, now)
    if previous is None:
        return {}
    return {s.processor: Money.of(s.cumulative) for s in previous.card_settlements}


# --- Resumo gravado ---

def summary_from_shift(shift: Shift) -> ClosingSummary:
    """Reconstrói o resumo a partir das colunas gravadas no turno fechado."""
    if shift.status != ShiftStatus.CLOSED:
        raise PreconditionError("Turno não está fechado.")
    cards = []
    for processor in CardProcessor:
        row = shift.settlement_for(processor)
        if row is None:
            cards.append(CardReading(processor, Money.zero(), Money.zero(), Money.zero()))
        else:
            cards.append(CardReading(processor, Money.of(row.cumulative), Money.of(row.real), Money.of(row.baseline)))
    return ClosingSummary(
        counted_cash=Money.of(shift.final_cash_count),
        initial_cash=Money.of(shift.initial_cash),
        sales_cash=Money.of(shift.closing_sales_cash),
        total_withdrawals=Money.of(shift.closing_withdrawals),
        withdrawals_count=shift.withdrawals_count or 0,
        expected_cash=Money.of(shift.expected_cash),
        divergence=Money.of(shift.divergence),
        divergence_reason=shift.divergence_reason,
        pix=Money.of(shift.pix_total),
        cards=tuple(cards),
        total_digital=Money.of(shift.total_digital),
        total_revenue=Money.of(shift.total_revenue),
    )


def _write_summary(shift: Shift, summary: ClosingSummary) -> None:
    shift.final_cash_count = summary.counted_cash.amount
    shift.closing_withdrawals = summary.total_withdrawals.amount
    shift.withdrawals_count = summary.withdrawals_count
    shift.expected_cash = summary.expected_cash.amount
    shift.divergence = summary.divergence.amount
    shift.divergence_reason = summary.divergence_reason
    shift.closing_sales_cash = summary.sales_cash.amount
    shift.pix_total = summary.pix.amount
    shift.total_digital = summary.total_digital.amount
    shift.total_revenue = summary.total_revenue.amount

    for reading in summary.cards:
        row = shift.settlement_for(reading.processor)
        if row is None:
            # Primeiro fechamento: o baseline fica congelado para correções futuras
            row = CardSettlement(processor=reading.processor, baseline=reading.baseline.amount)
            shift.card_settlements.append(row)
        row.cumulative = reading.cumulative.amount
        row.real = reading.real.amount


def _ledger(db: Session, shift: Shift, withdrawals_override=None) -> ShiftLedger:
    # Re-soma autoritativa dos sub-livros; os contadores são só cache
    amounts = ledger_amounts(db, shift)
    total_withdrawals = reconcile_total(shift, amounts)
    sales_cash = reconcile_sales_cash(shift, cash_sales_total(db, shift))

    if withdrawals_override is not None:
        total_withdrawals = Money.of(withdrawals_override)
        if total_withdrawals.is_negative():
            raise ValidationError("O total de sangrias não pode ser negativo.")

    return ShiftLedger(
        initial_cash=Money.of(shift.initial_cash),
        sales_cash=sales_cash,
        total_withdrawals=total_withdrawals,
        withdrawals_count=len(amounts),
    )


def _summary_event(shift: Shift, summary: ClosingSummary, actor: User) -> dict:
    alert = Money.of(get_settings().large_divergence_alert)
    payload = {
        "user_id": shift.user_id,
        "actor_id": actor.id,
        "divergence": summary.divergence,
        "expected_cash": summary.expected_cash,
        "total_revenue": summary.total_revenue,
        "real_values": summary.real_values,
        "priority": "normal",
    }
    if summary.divergence.exceeds(alert):
        payload["priority"] = "high"
        logger.warning("Turno %s com divergência alta: %s", shift.id, summary.divergence.amount)
    return payload


# --- Fechamento ---

def close_shift(
    db: Session,
    actor: User,
    shift_id: str,
    counted_cash,
    payments: PaymentReadings,
    divergence_reason: Optional[str] = None,
    idempotency_key: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ClosingSummary:
    """
    Fecha o turno: re-soma sangrias e vendas em dinheiro, resolve as
    maquininhas contra o último turno fechado do dia, calcula esperado e
    divergência, aplica a regra da justificativa e grava tudo de uma vez.
    """
    now = now or utcnow()

    with transaction(db):
        # 1. Turno (com lock) e estado
        shift = get_shift(db, shift_id, lock=True)
        ensure_can_view(db, shift, actor)
        if shift.status == ShiftStatus.CLOSED:
            if idempotency_key and shift.close_idempotency_key == idempotency_key:
                # Repetição do mesmo pedido (ex.: timeout do cliente)
                logger.info("Fechamento repetido do turno %s ignorado (mesma chave)", shift.id)
                return summary_from_shift(shift)
            raise PreconditionError("Turno já está fechado.")

        # 2. Sub-livros, baseline e cálculo
        ledger = _ledger(db, shift)
        baselines = card_baselines(db, shift, now)
        summary = reconcile(ledger, counted_cash, payments, baselines, divergence_reason)

        # 3. Grava resumo e transição OPEN -> CLOSED
        _write_summary(shift, summary)
        shift.status = ShiftStatus.CLOSED
        shift.closing_state = ClosingState.FINALIZED
        shift.end_time = now
        shift.closed_by_id = actor.id
        shift.close_idempotency_key = idempotency_key

        audit.record(
            db, AuditAction.SHIFT_CLOSED, actor,
            shift_id=shift.id,
            divergence=summary.divergence,
            reason=summary.divergence_reason,
        )
        events.emit(db, SHIFT_CLOSED, _summary_event(shift, summary, actor), entity_id=shift.id, shift_id=shift.id)

    logger.info(
        "Turno %s fechado por %s: esperado %s, contado %s, divergência %s",
        shift_id, actor.username, summary.expected_cash.amount,
        summary.counted_cash.amount, summary.divergence.amount,
    )
    return summary


# --- Correção (admin) ---

def recompute_closed_shift(
    db: Session,
    actor: User,
    shift_id: str,
    counted_cash,
    payments: PaymentReadings,
    withdrawals_override=None,
    divergence_reason=KEEP,
    now: Optional[datetime] = None,
) -> ClosingSummary:
    """
    Recalcula o resumo de um turno fechado com novas entradas.

    Usa o baseline gravado no fechamento original de cada maquininha (nunca
    procura outro turno), então chamar duas vezes com as mesmas entradas
    produz o mesmo resumo. Sem `divergence_reason` o motivo gravado é mantido.
    """
    if not actor.is_admin:
        raise PermissionDeniedError("Apenas administradores podem corrigir turnos.")
    now = now or utcnow()

    with transaction(db):
        shift = get_shift(db, shift_id, lock=True)
        if shift.status != ShiftStatus.CLOSED:
            raise PreconditionError("Turno não está fechado.")

        ledger = _ledger(db, shift, withdrawals_override)
        baselines = {s.processor: Money.of(s.baseline) for s in shift.card_settlements}
        reason = shift.divergence_reason if divergence_reason is KEEP else divergence_reason
        previous_divergence = Money.of(shift.divergence)

        summary = reconcile(ledger, counted_cash, payments, baselines, reason)

        _write_summary(shift, summary)
        shift.closing_state = ClosingState.CORRECTED
        shift.corrected_at = now
        shift.corrected_by_id = actor.id

        audit.record(
            db, AuditAction.SHIFT_CORRECTED, actor,
            shift_id=shift.id,
            previous_divergence=previous_divergence,
            divergence=summary.divergence,
            reason=summary.divergence_reason,
            details={"withdrawals_override": withdrawals_override},
        )
        payload = _summary_event(shift, summary, actor)
        payload["previous_divergence"] = previous_divergence
        events.emit(db, SHIFT_CORRECTED, payload, entity_id=shift.id, shift_id=shift.id)

        if shift.financial_confirmed and previous_divergence != summary.divergence:
            logger.warning("Turno %s corrigido após o envelope já ter sido conferido", shift.id)

    logger.info(
        "Turno %s corrigido por %s: divergência %s -> %s",
        shift_id, actor.username, previous_divergence.amount, summary.divergence.amount,
    )
    return summary


# --- Equipe do turno ---

def add_team_member(db: Session, actor: User, shift_id: str, user_id: int) -> TeamMember:
    with transaction(db):
        shift = get_shift(db, shift_id)
        if not actor.is_admin and shift.user_id != actor.id:
            raise PermissionDeniedError("Apenas o operador do turno ou o admin gerencia a equipe.")
        if not shift.is_open:
            raise PreconditionError("Turno não está aberto.")
        user = db.query(User).filter(User.id == user_id, User.is_active == True).first()
        if not user:
            raise NotFoundError("Usuário não encontrado.")

        member = db.get(TeamMember, (shift.id, user.id))
        if member is None:
            member = TeamMember(
                shift_id=shift.id,
                user_id=user.id,
                name=user.display_name,
                role=user.role.value,
                added_at=utcnow(),
            )
            db.add(member)
    db.refresh(member)
    return member


def remove_team_member(db: Session, actor: User, shift_id: str, user_id: int) -> None:
    with transaction(db):
        shift = get_shift(db, shift_id)
        if not actor.is_admin and shift.user_id != actor.id:
            raise PermissionDeniedError("Apenas o operador do turno ou o admin gerencia a equipe.")
        member = db.get(TeamMember, (shift.id, user_id))
        if member is None:
            raise NotFoundError("Colaborador não está neste turno.")
        db.delete(member)


def list_team(db: Session, actor: User, shift_id: str) -> List[TeamMember]:
    shift = read_shift(db, actor, shift_id)
    return db.query(TeamMember).filter(TeamMember.shift_id == shift.id).order_by(TeamMember.added_at).all()
