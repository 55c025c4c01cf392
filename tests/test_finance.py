from decimal import Decimal

import pytest

from pastelaria.core.money import Money
from pastelaria.crud import finance as crud_finance
from pastelaria.crud import shifts as crud_shifts
from pastelaria.errors import PreconditionError, ValidationError
from pastelaria.models import AuditAction, AuditEntry, MovementType

from conftest import at, payments


@pytest.fixture()
def closed_shift(db, employee):
    shift = crud_shifts.open_shift(db, employee, "100.00", now=at(-5))
    crud_shifts.close_shift(db, employee, shift.id, "97.50", payments(), divergence_reason="moedas faltando", now=at(0))
    return shift


def test_pending_envelopes(db, employee, closed_shift):
    crud_shifts.open_shift(db, employee, "50.00", now=at(1))
    assert [s.id for s in crud_finance.pending_envelopes(db)] == [closed_shift.id]


def test_confirm_envelope(db, admin, closed_shift):
    movement = crud_finance.confirm_envelope(db, admin, closed_shift.id)

    assert movement.movement_type == MovementType.ENTRY
    assert movement.category == "faturamento"
    assert movement.amount == Decimal("97.50")
    assert movement.description == "Fechamento Turno - Caixa Manhã"
    assert movement.shift_id == closed_shift.id
    assert closed_shift.financial_confirmed is True
    assert closed_shift.financial_movement_id == movement.id
    assert crud_finance.pending_envelopes(db) == []
    assert db.query(AuditEntry).filter(AuditEntry.action == AuditAction.ENVELOPE_CONFIRMED).count() == 1


def test_envelope_is_confirmed_once(db, admin, closed_shift):
    crud_finance.confirm_envelope(db, admin, closed_shift.id)
    with pytest.raises(PreconditionError):
        crud_finance.confirm_envelope(db, admin, closed_shift.id)


def test_open_shift_has_no_envelope(db, admin, employee):
    shift = crud_shifts.open_shift(db, employee, "100.00")
    with pytest.raises(PreconditionError):
        crud_finance.confirm_envelope(db, admin, shift.id)


def test_expenses_and_balance(db, admin, closed_shift):
    crud_finance.confirm_envelope(db, admin, closed_shift.id)
    expense = crud_finance.register_expense(db, admin, "Farinha de trigo", "40.25")

    assert expense.movement_type == MovementType.EXIT
    assert expense.category == "fornecedores"
    assert crud_finance.balance(db) == Money.of("57.25")
    assert crud_finance.totals_by_type(db) == {"entry": Money.of("97.50"), "exit": Money.of("40.25")}
    assert len(crud_finance.list_movements(db)) == 2


@pytest.mark.parametrize("description, amount", [("Gás", "0"), ("Gás", "-10"), ("  ", "10.00")])
def test_invalid_expense(db, admin, description, amount):
    with pytest.raises(ValidationError):
        crud_finance.register_expense(db, admin, description, amount)
    assert crud_finance.balance(db) == Money.zero()
