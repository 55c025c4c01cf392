import enum
import uuid
from sqlalchemy import (
    Boolean, Column, DateTime, Enum, ForeignKey, Index, Integer, Numeric, String, Text, UniqueConstraint, text
)
from sqlalchemy.orm import relationship
from pastelaria.database import Base
from pastelaria.core.settlement import CardProcessor


def new_id() -> str:
    return uuid.uuid4().hex


class ShiftStatus(str, enum.Enum):
    OPEN = "open"
    CLOSED = "closed"


class ClosingState(str, enum.Enum):
    # Sub-estado de auditoria; externamente ambos são CLOSED
    FINALIZED = "finalized"
    CORRECTED = "corrected"


class RecordType(str, enum.Enum):
    SALE = "sale"
    CONSUMPTION = "consumption"  # consumo interno da equipe


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    PIX = "pix"
    CARD = "card"


# --- Turno (gaveta de um operador, da abertura ao fechamento) ---
class Shift(Base):
    __tablename__ = "shifts"
    __table_args__ = (
        # Um único turno aberto por operador
        Index(
            "ix_shifts_one_open_per_user", "user_id", unique=True,
            sqlite_where=text("status = 'OPEN'"),
            postgresql_where=text("status = 'OPEN'"),
        ),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    status = Column(Enum(ShiftStatus), default=ShiftStatus.OPEN, nullable=False, index=True)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=True, index=True)

    initial_cash = Column(Numeric(10, 2), nullable=False, default=0)

    # Contadores incrementais (cache para leitura rápida do monitor)
    sales_cash = Column(Numeric(10, 2), nullable=False, default=0)
    total_withdrawals = Column(Numeric(10, 2), nullable=False, default=0)

    # --- Resumo de fechamento (closingData) ---
    closing_state = Column(Enum(ClosingState), nullable=True)
    final_cash_count = Column(Numeric(10, 2), nullable=True)
    closing_withdrawals = Column(Numeric(10, 2), nullable=True)
    withdrawals_count = Column(Integer, nullable=True)
    expected_cash = Column(Numeric(10, 2), nullable=True)
    divergence = Column(Numeric(10, 2), nullable=True)
    divergence_reason = Column(Text, nullable=True)

    # --- payments / financialSummary ---
    closing_sales_cash = Column(Numeric(10, 2), nullable=True)
    pix_total = Column(Numeric(10, 2), nullable=True)
    total_digital = Column(Numeric(10, 2), nullable=True)
    total_revenue = Column(Numeric(10, 2), nullable=True)

    close_idempotency_key = Column(String(64), nullable=True)
    closed_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    corrected_at = Column(DateTime(timezone=True), nullable=True)
    corrected_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Envelope conferido no cofre
    financial_confirmed = Column(Boolean, default=False, nullable=False)
    financial_movement_id = Column(String(32), nullable=True)

    # Compare-and-set: toda atualização do ORM confere a versão
    version = Column(Integer, nullable=False)
    __mapper_args__ = {"version_id_col": version}

    user = relationship("User", foreign_keys=[user_id])
    withdrawals = relationship(
        "Withdrawal", back_populates="shift", cascade="all, delete-orphan",
        order_by="desc(Withdrawal.created_at)",
    )
    records = relationship(
        "SalesRecord", back_populates="shift", cascade="all, delete-orphan",
        order_by="desc(SalesRecord.created_at)",
    )
    team = relationship("TeamMember", back_populates="shift", cascade="all, delete-orphan")
    card_settlements = relationship(
        "CardSettlement", back_populates="shift", cascade="all, delete-orphan",
        order_by="CardSettlement.processor",
    )

    @property
    def is_open(self) -> bool:
        return self.status == ShiftStatus.OPEN

    @property
    def operator_name(self) -> str:
        return self.user.display_name if self.user else ""

    def settlement_for(self, processor: CardProcessor):
        for s in self.card_settlements:
            if s.processor == processor:
                return s
        return None


# --- Leitura de maquininha gravada no fechamento ---
class CardSettlement(Base):
    __tablename__ = "card_settlements"
    __table_args__ = (UniqueConstraint("shift_id", "processor"),)

    id = Column(Integer, primary_key=True, index=True)
    shift_id = Column(String(32), ForeignKey("shifts.id"), nullable=False, index=True)
    processor = Column(Enum(CardProcessor), nullable=False)

    cumulative = Column(Numeric(12, 2), nullable=False)  # display da maquininha
    real = Column(Numeric(12, 2), nullable=False)        # valor do turno
    baseline = Column(Numeric(12, 2), nullable=False)    # baseline do fechamento original

    shift = relationship("Shift", back_populates="card_settlements")


# --- Sangria ---
class Withdrawal(Base):
    __tablename__ = "withdrawals"

    id = Column(String(32), primary_key=True, default=new_id)
    shift_id = Column(String(32), ForeignKey("shifts.id"), nullable=False, index=True)

    amount = Column(Numeric(10, 2), nullable=False)
    reason = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    shift = relationship("Shift", back_populates="withdrawals")
    user = relationship("User")


# --- Venda ou consumo interno ---
class SalesRecord(Base):
    __tablename__ = "sales_records"

    id = Column(String(32), primary_key=True, default=new_id)
    shift_id = Column(String(32), ForeignKey("shifts.id"), nullable=False, index=True)

    record_type = Column(Enum(RecordType), nullable=False)
    payment_method = Column(Enum(PaymentMethod), nullable=True)  # só para SALE

    product_id = Column(Integer, ForeignKey("products.id"), nullable=True)
    product_name = Column(String, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    total = Column(Numeric(10, 2), nullable=False)

    consumer_id = Column(Integer, ForeignKey("users.id"), nullable=True)  # só para CONSUMPTION
    consumer_name = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    shift = relationship("Shift", back_populates="records")

    @property
    def is_cash_sale(self) -> bool:
        return self.record_type == RecordType.SALE and self.payment_method == PaymentMethod.CASH


# --- Colaborador dividindo o turno ---
class TeamMember(Base):
    __tablename__ = "shift_team"

    shift_id = Column(String(32), ForeignKey("shifts.id"), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    name = Column(String, nullable=False)
    role = Column(String, nullable=True)
    added_at = Column(DateTime(timezone=True), nullable=False)

    shift = relationship("Shift", back_populates="team")
