"""
Motor de conciliação de turno.

Funções puras: recebem o estado do turno (fundo inicial, vendas em
dinheiro, sangrias), a contagem física e as leituras de PIX/maquininhas, e
devolvem o resumo de fechamento. Não tocam no banco; o mesmo cálculo serve
para o fechamento e para a correção feita pelo admin, o que garante que
recalcular duas vezes com as mesmas entradas produz o mesmo resumo.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

from pastelaria.core.money import DIVERGENCE_TOLERANCE, Money, money_sum
from pastelaria.core.settlement import CardProcessor, CardReading, resolve_card
from pastelaria.errors import ValidationError

logger = logging.getLogger(__name__)

JUSTIFICATION_REQUIRED = "Divergência maior que R$ 1,00 requer justificativa."


@dataclass(frozen=True)
class ShiftLedger:
    """Fotografia do turno no momento do fechamento/correção."""
    initial_cash: Money
    sales_cash: Money
    total_withdrawals: Money
    withdrawals_count: int = 0


@dataclass(frozen=True)
class PaymentReadings:
    pix: Money
    card_cumulative: Mapping[CardProcessor, Money] = field(default_factory=dict)

    def cumulative(self, processor: CardProcessor) -> Money:
        return Money.of(self.card_cumulative.get(processor, Money.zero()))


@dataclass(frozen=True)
class ClosingSummary:
    counted_cash: Money
    initial_cash: Money
    sales_cash: Money
    total_withdrawals: Money
    withdrawals_count: int
    expected_cash: Money
    divergence: Money
    divergence_reason: Optional[str]
    pix: Money
    cards: Tuple[CardReading, ...]
    total_digital: Money
    total_revenue: Money

    def card(self, processor: CardProcessor) -> CardReading:
        for reading in self.cards:
            if reading.processor == processor:
                return reading
        raise KeyError(processor)

    @property
    def real_values(self) -> Dict[str, Money]:
        return {r.processor.value: r.real for r in self.cards}


def normalize_reason(reason: Optional[str]) -> Optional[str]:
    if reason is None:
        return None
    reason = reason.strip()
    return reason or None


def expected_cash(initial_cash: Money, sales_cash: Money, total_withdrawals: Money) -> Money:
    # Esperado = Fundo + Vendas em dinheiro - Sangrias
    return Money.of(initial_cash) + sales_cash - total_withdrawals


def reconcile(
    ledger: ShiftLedger,
    counted_cash,
    payments: PaymentReadings,
    baselines: Mapping[CardProcessor, Money],
    divergence_reason: Optional[str] = None,
) -> ClosingSummary:
    """
    Calcula o resumo de fechamento.

    `baselines` traz, por maquininha, o acumulado de referência: no
    fechamento vem do último turno fechado no dia; na correção vem do
    baseline gravado no fechamento original.

    Levanta ValidationError se |divergência| > R$ 1,00 sem justificativa.
    """
    counted_cash = Money.of(counted_cash)
    if counted_cash.is_negative():
        raise ValidationError("A contagem de caixa não pode ser negativa.")
    pix = Money.of(payments.pix)
    if pix.is_negative():
        raise ValidationError("O total de PIX não pode ser negativo.")

    # 1. Maquininhas (acumulado -> real), cada uma independente
    cards = []
    for processor in CardProcessor:
        cumulative = payments.cumulative(processor)
        if cumulative.is_negative():
            raise ValidationError(f"Acumulado da {processor.value} não pode ser negativo.")
        cards.append(resolve_card(processor, cumulative, baselines.get(processor, Money.zero())))

    # 2. Totais digitais
    total_digital = pix + money_sum(r.real for r in cards)

    # 3. Esperado e divergência
    expected = expected_cash(ledger.initial_cash, ledger.sales_cash, ledger.total_withdrawals)
    divergence = counted_cash - expected

    # 4. Justificativa obrigatória acima da tolerância
    reason = normalize_reason(divergence_reason)
    if divergence.exceeds(DIVERGENCE_TOLERANCE) and reason is None:
        logger.info("Fechamento recusado: divergência %s sem justificativa", divergence.amount)
        raise ValidationError(JUSTIFICATION_REQUIRED)

    return ClosingSummary(
        counted_cash=counted_cash,
        initial_cash=ledger.initial_cash,
        sales_cash=ledger.sales_cash,
        total_withdrawals=ledger.total_withdrawals,
        withdrawals_count=ledger.withdrawals_count,
        expected_cash=expected,
        divergence=divergence,
        divergence_reason=reason,
        pix=pix,
        cards=tuple(cards),
        total_digital=total_digital,
        total_revenue=total_digital + ledger.sales_cash,
    )
