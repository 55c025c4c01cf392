from decimal import Decimal

import pytest

from pastelaria.core.money import money_sum
from pastelaria.crud import shifts as crud_shifts
from pastelaria.crud import withdrawals as ledger
from pastelaria.errors import NotFoundError, PermissionDeniedError, PreconditionError, ValidationError
from pastelaria.models import DomainEvent, Withdrawal
from pastelaria.models.events import WITHDRAWAL_RECORDED, WITHDRAWAL_RETRACTED

from conftest import at, payments


@pytest.fixture()
def shift(db, employee):
    return crud_shifts.open_shift(db, employee, "100.00", now=at(-5))


def ledger_sum(db, shift):
    return money_sum(a for (a,) in db.query(Withdrawal.amount).filter(Withdrawal.shift_id == shift.id))


def test_record_increments_shift_total(db, employee, shift):
    first = ledger.record_withdrawal(db, employee, shift.id, "30.00", "troco para o cofre")
    ledger.record_withdrawal(db, employee, shift.id, Decimal("12.50"), "gelo")

    assert first.amount == Decimal("30.00")
    assert first.reason == "troco para o cofre"
    assert shift.total_withdrawals == Decimal("42.50")
    assert ledger_sum(db, shift).amount == shift.total_withdrawals
    listed = ledger.list_withdrawals(db, employee, shift.id)
    assert sorted(w.amount for w in listed) == [Decimal("12.50"), Decimal("30.00")]


def test_conservation_before_and_after_retract(db, employee, shift):
    a = ledger.record_withdrawal(db, employee, shift.id, "30.00", "cofre")
    ledger.record_withdrawal(db, employee, shift.id, "20.00", "fornecedor")
    assert ledger_sum(db, shift).amount == shift.total_withdrawals == Decimal("50.00")

    ledger.retract_withdrawal(db, employee, shift.id, a.id)
    assert ledger_sum(db, shift).amount == shift.total_withdrawals == Decimal("20.00")


@pytest.mark.parametrize("amount, reason", [("0", "cofre"), ("-5.00", "cofre"), ("10.00", ""), ("10.00", "   ")])
def test_invalid_withdrawal_is_rejected(db, employee, shift, amount, reason):
    with pytest.raises(ValidationError):
        ledger.record_withdrawal(db, employee, shift.id, amount, reason)
    assert shift.total_withdrawals == Decimal("0")
    assert db.query(Withdrawal).count() == 0


def test_same_client_id_is_recorded_once(db, employee, shift):
    first = ledger.record_withdrawal(db, employee, shift.id, "30.00", "cofre", withdrawal_id="w-1")
    again = ledger.record_withdrawal(db, employee, shift.id, "30.00", "cofre", withdrawal_id="w-1")

    assert first.id == again.id == "w-1"
    assert shift.total_withdrawals == Decimal("30.00")
    assert db.query(Withdrawal).count() == 1
    assert db.query(DomainEvent).filter(DomainEvent.event_type == WITHDRAWAL_RECORDED).count() == 1


def test_record_on_closed_shift_fails(db, employee, shift):
    crud_shifts.close_shift(db, employee, shift.id, "100.00", payments(), now=at(0))
    with pytest.raises(PreconditionError):
        ledger.record_withdrawal(db, employee, shift.id, "10.00", "cofre")


def test_stranger_cannot_record(db, other_employee, shift):
    with pytest.raises(PermissionDeniedError):
        ledger.record_withdrawal(db, other_employee, shift.id, "10.00", "cofre")


def test_unknown_shift(db, employee):
    with pytest.raises(NotFoundError):
        ledger.record_withdrawal(db, employee, "nao-existe", "10.00", "cofre")


def test_retract_on_closed_shift_is_admin_only(db, admin, employee, shift):
    w = ledger.record_withdrawal(db, employee, shift.id, "30.00", "cofre")
    crud_shifts.close_shift(db, employee, shift.id, "70.00", payments(), now=at(0))

    with pytest.raises(PreconditionError):
        ledger.retract_withdrawal(db, employee, shift.id, w.id)

    ledger.retract_withdrawal(db, admin, shift.id, w.id)
    assert shift.total_withdrawals == Decimal("0")
    assert db.query(DomainEvent).filter(DomainEvent.event_type == WITHDRAWAL_RETRACTED).count() == 1


def test_retract_unknown_withdrawal(db, employee, shift):
    with pytest.raises(NotFoundError):
        ledger.retract_withdrawal(db, employee, shift.id, "nao-existe")
