"""
Cofre: envelopes de fechamento (entradas) e despesas (saídas).

Movimentos nunca são alterados; o saldo é a soma de todos eles.
"""
import logging
from typing import List

from sqlalchemy.orm import Session

from pastelaria.core.money import Money, money_sum
from pastelaria.crud import audit, events
from pastelaria.crud.common import get_shift
from pastelaria.database import transaction
from pastelaria.errors import PreconditionError, ValidationError
from pastelaria.models import AuditAction, FinancialMovement, MovementType, Shift, ShiftStatus, User
from pastelaria.models.events import FINANCIAL_MOVEMENT_CREATED
from pastelaria.utils.dates import utcnow

logger = logging.getLogger(__name__)

ENVELOPE_CATEGORY = "faturamento"
DEFAULT_EXPENSE_CATEGORY = "fornecedores"


def pending_envelopes(db: Session, limit: int = 50) -> List[Shift]:
    """Turnos fechados cujo envelope ainda não entrou no cofre."""
    return (
        db.query(Shift)
        .filter(Shift.status == ShiftStatus.CLOSED, Shift.financial_confirmed == False)
        .order_by(Shift.end_time.desc())
        .limit(limit)
        .all()
    )


def confirm_envelope(db: Session, actor: User, shift_id: str) -> FinancialMovement:
    with transaction(db):
        shift = get_shift(db, shift_id, lock=True)
        if shift.status != ShiftStatus.CLOSED:
            raise PreconditionError("Turno ainda não foi fechado.")
        if shift.financial_confirmed:
            raise PreconditionError("Envelope deste turno já foi conferido.")

        # 1. Entrada no cofre com o dinheiro contado
        amount = Money.of(shift.final_cash_count)
        movement = FinancialMovement(
            movement_type=MovementType.ENTRY,
            category=ENVELOPE_CATEGORY,
            description=f"Fechamento Turno - {shift.operator_name}",
            amount=amount.amount,
            date=utcnow(),
            shift_id=shift.id,
            created_by_id=actor.id,
        )
        db.add(movement)
        db.flush()

        # 2. Marca o turno como conferido
        shift.financial_confirmed = True
        shift.financial_movement_id = movement.id

        audit.record(db, AuditAction.ENVELOPE_CONFIRMED, actor, shift_id=shift.id, movement_id=movement.id,
                     details={"amount": amount})
        events.emit(db, FINANCIAL_MOVEMENT_CREATED,
                    {"type": movement.movement_type, "category": movement.category, "amount": amount},
                    entity_id=movement.id, shift_id=shift.id)

    db.refresh(movement)
    logger.info("Envelope do turno %s conferido: %s", shift_id, amount.amount)
    return movement


def register_expense(
    db: Session,
    actor: User,
    description: str,
    amount,
    category: str = DEFAULT_EXPENSE_CATEGORY,
) -> FinancialMovement:
    value = Money.of(amount)
    if not value.is_positive():
        raise ValidationError("O valor da despesa deve ser maior que zero.")
    description = (description or "").strip()
    if not description:
        raise ValidationError("Informe a descrição da despesa.")
    category = (category or "").strip() or DEFAULT_EXPENSE_CATEGORY

    with transaction(db):
        movement = FinancialMovement(
            movement_type=MovementType.EXIT,
            category=category,
            description=description,
            amount=value.amount,
            date=utcnow(),
            created_by_id=actor.id,
        )
        db.add(movement)
        db.flush()
        audit.record(db, AuditAction.EXPENSE_REGISTERED, actor, movement_id=movement.id,
                     details={"amount": value, "category": category})
        events.emit(db, FINANCIAL_MOVEMENT_CREATED,
                    {"type": movement.movement_type, "category": category, "amount": value},
                    entity_id=movement.id)

    db.refresh(movement)
    logger.info("Despesa registrada: %s (%s)", value.amount, category)
    return movement


def list_movements(db: Session, limit: int = 50) -> List[FinancialMovement]:
    return db.query(FinancialMovement).order_by(FinancialMovement.date.desc()).limit(limit).all()


def balance(db: Session) -> Money:
    """Saldo do cofre: entradas menos saídas."""
    total = Money.zero()
    for movement_type, amount in db.query(FinancialMovement.movement_type, FinancialMovement.amount).all():
        value = Money.of(amount)
        total = total + value if movement_type == MovementType.ENTRY else total - value
    return total


def totals_by_type(db: Session) -> dict:
    rows = db.query(FinancialMovement.movement_type, FinancialMovement.amount).all()
    return {
        MovementType.ENTRY.value: money_sum(a for t, a in rows if t == MovementType.ENTRY),
        MovementType.EXIT.value: money_sum(a for t, a in rows if t == MovementType.EXIT),
    }
