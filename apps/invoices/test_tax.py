from decimal import Decimal

import pytest

from apps.invoices.tax import calcular_iva, monto_neto_desde_total


def test_iva_default_rate():
    iva, total = calcular_iva(100000)
    assert iva == Decimal("19000")
    assert total == Decimal("119000")


def test_iva_rounds_half_up():
    iva, total = calcular_iva("1050")
    # 1050 * 0.19 = 199.5
    assert iva == Decimal("200")
    assert total == Decimal("1250")


def test_iva_custom_rate():
    iva, total = calcular_iva(Decimal("200"), tasa="0.10")
    assert iva == Decimal("20")
    assert total == Decimal("220")


def test_iva_zero():
    assert calcular_iva(0) == (Decimal("0"), Decimal("0"))


def test_iva_negative_amount():
    with pytest.raises(ValueError):
        calcular_iva(-1)


def test_net_from_total():
    assert monto_neto_desde_total(119000) == Decimal("100000")
