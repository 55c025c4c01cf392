"""
Valor monetário em centavos inteiros.

Toda a aritmética do caixa passa por aqui. Internamente guardamos um int de
centavos, de modo que somas e subtrações repetidas nunca acumulam erro de
ponto flutuante. Entradas e saídas públicas são Decimal com 2 casas,
arredondadas "half away from zero" (ROUND_HALF_UP do módulo decimal).
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Union

from pastelaria.errors import ValidationError

CENT = Decimal("0.01")
# Maior valor que cabe nas colunas Numeric(10, 2)
MAX_AMOUNT = Decimal("99999999.99")

Numeric = Union["Money", Decimal, int, float, str]


def to_decimal(value) -> Decimal:
    """Converte para Decimal arredondado a centavos."""
    if isinstance(value, Money):
        return value.amount
    if isinstance(value, bool):
        raise ValidationError("Valor monetário inválido.")
    try:
        # float passa por str() para não herdar a representação binária
        dec = value if isinstance(value, Decimal) else Decimal(str(value).strip())
        if not dec.is_finite():
            raise ValidationError(f"Valor monetário inválido: {value!r}")
        dec = dec.quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Valor monetário inválido: {value!r}")
    if abs(dec) > MAX_AMOUNT:
        raise ValidationError(f"Valor monetário fora do limite: {value!r}")
    return dec


@dataclass(frozen=True, order=True)
class Money:
    cents: int = 0

    @classmethod
    def of(cls, value: Numeric) -> "Money":
        if isinstance(value, Money):
            return value
        if value is None:
            return cls(0)
        return cls(int(to_decimal(value) * 100))

    @classmethod
    def zero(cls) -> "Money":
        return cls(0)

    @property
    def amount(self) -> Decimal:
        return (Decimal(self.cents) / 100).quantize(CENT)

    def __add__(self, other: Numeric) -> "Money":
        return Money(self.cents + Money.of(other).cents)

    __radd__ = __add__

    def __sub__(self, other: Numeric) -> "Money":
        return Money(self.cents - Money.of(other).cents)

    def __rsub__(self, other: Numeric) -> "Money":
        return Money(Money.of(other).cents - self.cents)

    def __mul__(self, factor: Union[int, Decimal, str]) -> "Money":
        if isinstance(factor, Money):
            raise TypeError("Não é possível multiplicar dinheiro por dinheiro")
        product = Decimal(self.cents) * Decimal(str(factor))
        return Money(int(product.quantize(Decimal(1), rounding=ROUND_HALF_UP)))

    __rmul__ = __mul__

    def __neg__(self) -> "Money":
        return Money(-self.cents)

    def __abs__(self) -> "Money":
        return Money(abs(self.cents))

    def __bool__(self) -> bool:
        return self.cents != 0

    def is_positive(self) -> bool:
        return self.cents > 0

    def is_negative(self) -> bool:
        return self.cents < 0

    def exceeds(self, limit: "Money") -> bool:
        """True se |self| > limit."""
        return abs(self.cents) > limit.cents

    def __str__(self) -> str:
        return f"R$ {self.amount}"


# Tolerância fixa de divergência de caixa
DIVERGENCE_TOLERANCE = Money.of("1.00")


def money_sum(values: Iterable[Numeric]) -> Money:
    total = Money.zero()
    for v in values:
        total = total + v
    return total
