"""
Resolução das maquininhas de cartão.

O display das maquininhas (Stone, PagBank) mostra um acumulado desde uma
época desconhecida. O valor real do turno é o acumulado atual menos o
acumulado do turno anterior (baseline). Se o acumulado atual for menor que
o baseline a maquininha foi zerada: o baseline passa a valer 0.
"""
import enum
from dataclasses import dataclass

from pastelaria.core.money import Money


class CardProcessor(str, enum.Enum):
    STONE = "stone"
    PAGBANK = "pagbank"


@dataclass(frozen=True)
class CardReading:
    processor: CardProcessor
    cumulative: Money
    real: Money
    # Baseline efetivo usado no fechamento original (cumulative - real)
    baseline: Money


def effective_baseline(cumulative: Money, baseline: Money) -> Money:
    if cumulative < baseline:
        return Money.zero()
    return baseline


def resolve_card(processor: CardProcessor, cumulative, baseline) -> CardReading:
    cumulative = Money.of(cumulative)
    used = effective_baseline(cumulative, Money.of(baseline))
    return CardReading(
        processor=processor,
        cumulative=cumulative,
        real=cumulative - used,
        baseline=used,
    )


def stored_baseline(cumulative, real) -> Money:
    """Baseline derivado de um par (acumulado, real) já gravado."""
    return Money.of(cumulative) - Money.of(real)
