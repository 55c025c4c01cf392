"""
Livro de sangrias.

O total do turno (`Shift.total_withdrawals`) é mantido de forma incremental:
cada registro soma, cada estorno subtrai, na mesma transação que grava ou
apaga a sangria. A re-soma completa só acontece no fechamento/correção.
"""
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pastelaria.core.money import Money, money_sum
from pastelaria.crud import events
from pastelaria.crud.common import ensure_can_operate, ensure_can_view, get_shift
from pastelaria.database import transaction
from pastelaria.errors import NotFoundError, PreconditionError, ValidationError
from pastelaria.models import Shift, User, Withdrawal
from pastelaria.models.events import WITHDRAWAL_RECORDED, WITHDRAWAL_RETRACTED
from pastelaria.utils.dates import utcnow

logger = logging.getLogger(__name__)


def record_withdrawal(
    db: Session,
    actor: User,
    shift_id: str,
    amount,
    reason: str,
    withdrawal_id: Optional[str] = None,
) -> Withdrawal:
    try:
        with transaction(db):
            # 1. Existência, acesso e estado
            shift = get_shift(db, shift_id, lock=True)
            ensure_can_operate(db, shift, actor)

            # Reentrega do mesmo id: devolve o que já existe sem somar de novo
            if withdrawal_id:
                existing = db.get(Withdrawal, withdrawal_id)
                if existing is not None:
                    if existing.shift_id != shift.id:
                        raise ValidationError("Id de sangria já usado em outro turno.")
                    return existing

            if not shift.is_open:
                raise PreconditionError("Turno não está aberto.")

            # 2. Regras de negócio
            value = Money.of(amount)
            if not value.is_positive():
                raise ValidationError("O valor da sangria deve ser maior que zero.")
            reason = (reason or "").strip()
            if not reason:
                raise ValidationError("Informe o motivo da sangria.")

            # 3. Grava e incrementa o total do turno
            withdrawal = Withdrawal(
                shift_id=shift.id,
                amount=value.amount,
                reason=reason,
                created_at=utcnow(),
                user_id=actor.id,
            )
            if withdrawal_id:
                withdrawal.id = withdrawal_id
            db.add(withdrawal)
            shift.total_withdrawals = (Money.of(shift.total_withdrawals) + value).amount
            db.flush()

            events.emit(
                db, WITHDRAWAL_RECORDED,
                {"amount": value, "reason": reason, "actor_id": actor.id},
                entity_id=withdrawal.id, shift_id=shift.id,
            )
    except IntegrityError:
        # Criação concorrente com o mesmo id
        existing = db.get(Withdrawal, withdrawal_id) if withdrawal_id else None
        if existing is None:
            raise
        return existing

    db.refresh(withdrawal)
    logger.info("Sangria %s de %s registrada no turno %s", withdrawal.id, value.amount, shift_id)
    return withdrawal


def retract_withdrawal(db: Session, actor: User, shift_id: str, withdrawal_id: str) -> Withdrawal:
    """Apaga a sangria e devolve o valor ao total do turno. Vale para turno fechado (correções)."""
    with transaction(db):
        shift = get_shift(db, shift_id, lock=True)
        ensure_can_operate(db, shift, actor)
        if not shift.is_open and not actor.is_admin:
            raise PreconditionError("Turno fechado: apenas o admin pode corrigir.")

        withdrawal = db.query(Withdrawal).filter(
            Withdrawal.id == withdrawal_id,
            Withdrawal.shift_id == shift.id,
        ).first()
        if not withdrawal:
            raise NotFoundError("Sangria não encontrada.")

        value = Money.of(withdrawal.amount)
        db.delete(withdrawal)
        shift.total_withdrawals = (Money.of(shift.total_withdrawals) - value).amount

        events.emit(
            db, WITHDRAWAL_RETRACTED,
            {"amount": value, "actor_id": actor.id},
            entity_id=withdrawal_id, shift_id=shift.id,
        )

    logger.info("Sangria %s estornada do turno %s", withdrawal_id, shift_id)
    return withdrawal


def list_withdrawals(db: Session, actor: User, shift_id: str) -> List[Withdrawal]:
    shift = get_shift(db, shift_id)
    ensure_can_view(db, shift, actor)
    return (
        db.query(Withdrawal)
        .filter(Withdrawal.shift_id == shift.id)
        .order_by(Withdrawal.created_at.desc())
        .all()
    )


def ledger_amounts(db: Session, shift: Shift) -> List[Money]:
    """Valores das sangrias lidas do sub-livro (fonte autoritativa)."""
    rows = db.query(Withdrawal.amount).filter(Withdrawal.shift_id == shift.id).all()
    return [Money.of(amount) for (amount,) in rows]


def reconcile_total(shift: Shift, amounts: List[Money]) -> Money:
    """Corrige o contador incremental se ele divergir da re-soma."""
    total = money_sum(amounts)
    cached = Money.of(shift.total_withdrawals)
    if cached != total:
        logger.warning(
            "Turno %s: total de sangrias em cache %s difere da soma %s; corrigindo",
            shift.id, cached.amount, total.amount,
        )
        shift.total_withdrawals = total.amount
    return total
