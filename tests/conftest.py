import os
from datetime import datetime, timedelta, timezone
from decimal import Decimal

# Banco em memória também para o engine padrão criado no import do app
os.environ.setdefault("PASTELARIA_DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pastelaria.core.money import Money
from pastelaria.core.reconciliation import PaymentReadings
from pastelaria.core.settlement import CardProcessor
from pastelaria.crud import users as crud_users
from pastelaria.database import Base, get_db
from pastelaria.main import app
from pastelaria.models import Product, Role
from pastelaria.security import create_access_token

# 15:00 em São Paulo
NOW = datetime(2026, 3, 10, 18, 0, tzinfo=timezone.utc)


def at(hours: float) -> datetime:
    """Horário relativo a NOW (horas negativas = antes)."""
    return NOW + timedelta(hours=hours)


def payments(pix="0", stone="0", pagbank="0") -> PaymentReadings:
    return PaymentReadings(
        pix=Money.of(pix),
        card_cumulative={
            CardProcessor.STONE: Money.of(stone),
            CardProcessor.PAGBANK: Money.of(pagbank),
        },
    )


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def admin(db):
    return crud_users.create_user(db, "admin", "1234", role=Role.ADMIN, full_name="Administrador")


@pytest.fixture()
def employee(db):
    return crud_users.create_user(db, "caixa1", "0000", role=Role.EMPLOYEE, full_name="Caixa Manhã")


@pytest.fixture()
def other_employee(db):
    return crud_users.create_user(db, "caixa2", "1111", role=Role.EMPLOYEE, full_name="Caixa Noite")


@pytest.fixture()
def products(db):
    items = [
        Product(name="Pastel de Carne", category="pastel", price=Decimal("9.00"), is_active=True),
        Product(name="Caldo de Cana 500ml", category="bebida", price=Decimal("7.00"), is_active=True),
        Product(name="Pastel de Palmito", category="pastel", price=Decimal("10.00"), is_active=False),
    ]
    db.add_all(items)
    db.commit()
    for item in items:
        db.refresh(item)
    return {"carne": items[0], "caldo": items[1], "inativo": items[2]}


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(user) -> dict:
    token = create_access_token({"sub": user.username, "role": user.role.value}, timedelta(minutes=5))
    return {"Authorization": f"Bearer {token}"}
