"""
Registros de venda/consumo e o agregador de vendas em dinheiro.

`Shift.sales_cash` soma apenas vendas (type=sale) pagas em dinheiro. A
criação soma, a exclusão subtrai, na mesma transação do registro. Consumo
interno e vendas PIX/cartão não mexem na gaveta.
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
from pastelaria.models import PaymentMethod, Product, RecordType, SalesRecord, Shift, User
from pastelaria.models.events import SALES_RECORD_CREATED, SALES_RECORD_DELETED
from pastelaria.utils.dates import utcnow

logger = logging.getLogger(__name__)


# --- Agregador ---

def on_sale_recorded(shift: Shift, record: SalesRecord) -> None:
    if record.is_cash_sale:
        shift.sales_cash = (Money.of(shift.sales_cash) + Money.of(record.total)).amount


def on_sale_retracted(shift: Shift, record: SalesRecord) -> None:
    if record.is_cash_sale:
        shift.sales_cash = (Money.of(shift.sales_cash) - Money.of(record.total)).amount


def cash_sales_total(db: Session, shift: Shift) -> Money:
    """Re-soma as vendas em dinheiro a partir dos registros (fonte autoritativa)."""
    rows = db.query(SalesRecord.total).filter(
        SalesRecord.shift_id == shift.id,
        SalesRecord.record_type == RecordType.SALE,
        SalesRecord.payment_method == PaymentMethod.CASH,
    ).all()
    return money_sum(total for (total,) in rows)


def reconcile_sales_cash(shift: Shift, total: Money) -> Money:
    cached = Money.of(shift.sales_cash)
    if cached != total:
        logger.warning(
            "Turno %s: vendas em dinheiro em cache %s difere da soma %s; corrigindo",
            shift.id, cached.amount, total.amount,
        )
        shift.sales_cash = total.amount
    return total


# --- Registros ---

def record_sale(db: Session, actor: User, shift_id: str, record_in, record_id: Optional[str] = None) -> SalesRecord:
    """
    Registra uma venda ou consumo. `record_in` é uma das variantes
    validadas na borda (SaleRecordCreate / ConsumptionRecordCreate).

    O operador registra no próprio turno aberto; o admin também pode
    registrar em turno fechado (recriação durante correções).
    """
    try:
        with transaction(db):
            # 1. Existência, acesso, estado
            shift = get_shift(db, shift_id, lock=True)
            ensure_can_operate(db, shift, actor)

            if record_id:
                existing = db.get(SalesRecord, record_id)
                if existing is not None:
                    if existing.shift_id != shift.id:
                        raise ValidationError("Id de registro já usado em outro turno.")
                    return existing

            if not shift.is_open and not actor.is_admin:
                raise PreconditionError("Turno não está aberto.")

            # 2. Produto e preço do momento
            if record_in.quantity < 1:
                raise ValidationError("A quantidade deve ser pelo menos 1.")
            product = db.query(Product).filter(
                Product.id == record_in.product_id,
                Product.is_active == True,
            ).first()
            if not product:
                raise NotFoundError("Produto não encontrado.")

            unit_price = Money.of(product.price)
            total = unit_price * record_in.quantity

            record = SalesRecord(
                shift_id=shift.id,
                record_type=RecordType(record_in.type),
                product_id=product.id,
                product_name=product.name,
                unit_price=unit_price.amount,
                quantity=record_in.quantity,
                total=total.amount,
                created_at=utcnow(),
                created_by_id=actor.id,
            )
            if record.record_type == RecordType.SALE:
                record.payment_method = PaymentMethod(record_in.payment_method)
            else:
                consumer = db.query(User).filter(User.id == record_in.consumer_id, User.is_active == True).first()
                if not consumer:
                    raise NotFoundError("Colaborador não encontrado.")
                record.consumer_id = consumer.id
                record.consumer_name = consumer.display_name
            if record_id:
                record.id = record_id

            db.add(record)
            on_sale_recorded(shift, record)
            db.flush()

            events.emit(
                db, SALES_RECORD_CREATED,
                {
                    "type": record.record_type,
                    "payment_method": record.payment_method,
                    "product_name": record.product_name,
                    "total": total,
                },
                entity_id=record.id, shift_id=shift.id,
            )
    except IntegrityError:
        existing = db.get(SalesRecord, record_id) if record_id else None
        if existing is None:
            raise
        return existing

    db.refresh(record)
    return record


def retract_sale(db: Session, actor: User, shift_id: str, record_id: str) -> SalesRecord:
    """Exclui o registro; venda em dinheiro devolve o valor ao total do turno."""
    with transaction(db):
        shift = get_shift(db, shift_id, lock=True)
        ensure_can_operate(db, shift, actor)
        if not shift.is_open and not actor.is_admin:
            raise PreconditionError("Turno fechado: apenas o admin pode corrigir.")

        record = db.query(SalesRecord).filter(
            SalesRecord.id == record_id,
            SalesRecord.shift_id == shift.id,
        ).first()
        if not record:
            raise NotFoundError("Registro não encontrado.")

        on_sale_retracted(shift, record)
        db.delete(record)

        events.emit(
            db, SALES_RECORD_DELETED,
            {"type": record.record_type, "payment_method": record.payment_method, "total": record.total},
            entity_id=record_id, shift_id=shift.id,
        )

    logger.info("Registro %s excluído do turno %s", record_id, shift_id)
    return record


def list_records(db: Session, actor: User, shift_id: str, consumer_id: Optional[int] = None) -> List[SalesRecord]:
    shift = get_shift(db, shift_id)
    ensure_can_view(db, shift, actor)
    query = db.query(SalesRecord).filter(SalesRecord.shift_id == shift.id)
    if consumer_id is not None:
        query = query.filter(SalesRecord.consumer_id == consumer_id)
    return query.order_by(SalesRecord.created_at.desc()).all()
