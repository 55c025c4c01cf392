# Núcleo puro (sem banco): dinheiro, maquininhas e conciliação de turno
from .money import DIVERGENCE_TOLERANCE, Money, money_sum
from .settlement import CardProcessor, CardReading, resolve_card, stored_baseline
from .reconciliation import ClosingSummary, PaymentReadings, ShiftLedger, reconcile
