from datetime import date
from decimal import Decimal

import pytest

from apps.extraction.extractor import RegexFieldExtractor, parse_amount


SAMPLE_INVOICE = """
ACME SPA
RUT: 76.123.456-k
Giro: Ferretería
FACTURA ELECTRONICA N° 4521
Fecha Emisión: 12/05/2025
Señores: Constructora Sur Ltda
Email: ventas@acme.cl
Neto: $100.000
IVA: $19.000
TOTAL: $119.000
"""


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("119.000", Decimal("119000")),
        ("1.234.567", Decimal("1234567")),
        ("1,234,567.89", Decimal("1234567.89")),
        ("1.234,50", Decimal("1234.50")),
        ("500", Decimal("500")),
    ],
)
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == expected


def test_parse_amount_garbage():
    assert parse_amount("..") is None


def test_extract_invoice_fields():
    fields = RegexFieldExtractor().extract(SAMPLE_INVOICE)

    assert fields.numero == "4521"
    assert fields.fecha == date(2025, 5, 12)
    assert fields.monto_total == Decimal("119000")
    assert fields.rut == "76.123.456-K"
    assert fields.email == "ventas@acme.cl"
    assert fields.nombre == "Constructora Sur Ltda"


def test_extract_iso_date():
    fields = RegexFieldExtractor().extract("Orden de compra OC-202505-003 emitida 2025-05-03")

    assert fields.numero == "OC-202505-003"
    assert fields.fecha == date(2025, 5, 3)


def test_extract_empty_text():
    assert RegexFieldExtractor().extract("   ").model_dump(exclude_none=True) == {}
