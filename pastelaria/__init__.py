"""Pastelaria 24h: controle de turnos, sangrias e fechamento de caixa."""

__version__ = "1.0.0"
