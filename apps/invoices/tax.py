"""
IVA (value-added tax) helpers for the invoice form.

Amounts are rounded half-up to whole units, since CLP has no decimals.
Nothing here is persisted: invoices store only `monto_total`.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Tuple, Union

from constants.currencies import IVA_RATE

Number = Union[Decimal, int, float, str]

_UNIT = Decimal("1")


def _rate(tasa: Optional[Number]) -> Decimal:
    return Decimal(str(tasa)) if tasa is not None else Decimal(IVA_RATE)


def _round(value: Decimal) -> Decimal:
    return value.quantize(_UNIT, rounding=ROUND_HALF_UP)


def calcular_iva(monto_neto: Number, tasa: Optional[Number] = None) -> Tuple[Decimal, Decimal]:
    """
    Return (iva, total) for a net amount. Both are rounded independently,
    as the invoice form does, so total == neto + iva only up to rounding.
    """
    neto = Decimal(str(monto_neto))
    if neto < 0:
        raise ValueError("El monto neto no puede ser negativo")
    rate = _rate(tasa)
    iva = neto * rate
    return _round(iva), _round(neto + iva)


def monto_neto_desde_total(monto_total: Number, tasa: Optional[Number] = None) -> Decimal:
    """Net amount contained in a tax-inclusive total (e.g. an order's total)."""
    total = Decimal(str(monto_total))
    if total < 0:
        raise ValueError("El monto total no puede ser negativo")
    return _round(total / (1 + _rate(tasa)))
