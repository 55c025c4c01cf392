from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Dict, List, Optional
from decimal import Decimal
from datetime import datetime

from pastelaria.core.money import Money
from pastelaria.core.reconciliation import ClosingSummary, PaymentReadings
from pastelaria.core.settlement import CardProcessor
from pastelaria.models.shifts import ClosingState, ShiftStatus


class ShiftOpen(BaseModel):
    initial_cash: Decimal


class InitialCashUpdate(BaseModel):
    initial_cash: Decimal


# --- Contrato de fechamento / correção ---

class PaymentsInput(BaseModel):
    # Informativo: o sistema usa a soma dos registros de venda em dinheiro
    cash: Optional[Decimal] = None
    pix: Decimal = Decimal("0")
    stone_cumulative: Decimal = Decimal("0")
    pagbank_cumulative: Decimal = Decimal("0")

    def to_readings(self) -> PaymentReadings:
        return PaymentReadings(
            pix=Money.of(self.pix),
            card_cumulative={
                CardProcessor.STONE: Money.of(self.stone_cumulative),
                CardProcessor.PAGBANK: Money.of(self.pagbank_cumulative),
            },
        )


class CloseShiftRequest(BaseModel):
    shift_id: str
    final_cash_count: Decimal
    divergence_reason: Optional[str] = None
    payments: PaymentsInput = Field(default_factory=PaymentsInput)
    idempotency_key: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class RecomputeShiftRequest(BaseModel):
    shift_id: str
    final_cash_count: Decimal
    payments: PaymentsInput = Field(default_factory=PaymentsInput)
    divergence_reason: Optional[str] = None
    withdrawals_override: Optional[Decimal] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ClosingResult(BaseModel):
    success: bool = True
    divergence: float
    real_values: Dict[str, float]
    total_withdrawals: float
    expected_cash: float
    total_digital: float
    total_revenue: float

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @classmethod
    def from_summary(cls, summary: ClosingSummary) -> "ClosingResult":
        return cls(
            divergence=float(summary.divergence.amount),
            real_values={k: float(v.amount) for k, v in summary.real_values.items()},
            total_withdrawals=float(summary.total_withdrawals.amount),
            expected_cash=float(summary.expected_cash.amount),
            total_digital=float(summary.total_digital.amount),
            total_revenue=float(summary.total_revenue.amount),
        )


# --- Leitura ---

class CardSettlementRead(BaseModel):
    processor: CardProcessor
    cumulative: Decimal
    real: Decimal
    baseline: Decimal

    class Config:
        from_attributes = True


class ShiftRead(BaseModel):
    id: str
    user_id: int
    operator_name: str
    status: ShiftStatus
    start_time: datetime
    end_time: Optional[datetime] = None

    initial_cash: Decimal
    sales_cash: Decimal = Decimal(0)
    total_withdrawals: Decimal = Decimal(0)

    # Dados de fechamento
    closing_state: Optional[ClosingState] = None
    final_cash_count: Optional[Decimal] = None
    closing_withdrawals: Optional[Decimal] = None
    withdrawals_count: Optional[int] = None
    expected_cash: Optional[Decimal] = None
    divergence: Optional[Decimal] = None
    divergence_reason: Optional[str] = None
    closing_sales_cash: Optional[Decimal] = None
    pix_total: Optional[Decimal] = None
    total_digital: Optional[Decimal] = None
    total_revenue: Optional[Decimal] = None
    card_settlements: List[CardSettlementRead] = []

    financial_confirmed: bool = False
    financial_movement_id: Optional[str] = None

    class Config:
        from_attributes = True


class ShiftMonitorRead(ShiftRead):
    # Gaveta atual: fundo + vendas em dinheiro - sangrias
    current_drawer: Decimal


class TeamMemberCreate(BaseModel):
    user_id: int


class TeamMemberRead(BaseModel):
    user_id: int
    name: str
    role: Optional[str] = None
    added_at: datetime

    class Config:
        from_attributes = True
