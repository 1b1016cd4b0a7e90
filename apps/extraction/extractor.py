"""
Best-effort field guesses from the text of a scanned order or invoice.

The extractor only looks at text; turning a PDF or image into text is the
caller's business. Results are hints for pre-filling a form, never trusted
values: every field may be None.
"""
from __future__ import annotations

import logging
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Protocol

from apps.extraction.schemas import ExtractedFields

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(
    r"(?:factura|orden\s+de\s+compra|n[°ºo]\.?|folio|invoice)\s*(?:electr[oó]nica\s*)?(?:n[°ºo]\.?\s*)?[:#]?\s*"
    r"([A-Z]{0,4}-?\d[\d-]{2,20})",
    re.IGNORECASE,
)
_DATE_RE = re.compile(r"\b(\d{1,2})[/-](\d{1,2})[/-](\d{4})\b|\b(\d{4})-(\d{2})-(\d{2})\b")
_TOTAL_RE = re.compile(r"\btotal(?:\s+a\s+pagar)?\s*[:$]?\s*\$?\s*([\d.,]+)", re.IGNORECASE)
_RUT_RE = re.compile(r"\b(\d{1,2}\.?\d{3}\.?\d{3}-[\dkK])\b")
_EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+\.[\w.-]+")
_SUPPLIER_RE = re.compile(r"(?:raz[oó]n\s+social|proveedor|se[nñ]or(?:es)?)\s*[:]\s*(.+)", re.IGNORECASE)


class FieldExtractor(Protocol):
    def extract(self, text: str) -> ExtractedFields:
        ...


def parse_amount(raw: str) -> Optional[Decimal]:
    """
    Parse '1.234.567', '1,234,567.89' or '1.234,50' into a Decimal.
    The last separator followed by exactly two digits is taken as decimal.
    """
    cleaned = raw.strip().rstrip(".,")
    if not cleaned:
        return None
    last_sep = max(cleaned.rfind("."), cleaned.rfind(","))
    if last_sep != -1 and len(cleaned) - last_sep - 1 == 2:
        integer, decimals = cleaned[:last_sep], cleaned[last_sep + 1:]
    else:
        integer, decimals = cleaned, ""
    integer = re.sub(r"[.,]", "", integer)
    try:
        return Decimal(f"{integer}.{decimals}" if decimals else integer)
    except InvalidOperation:
        return None


def parse_date(match: re.Match) -> Optional[date]:
    try:
        if match.group(4):
            return date(int(match.group(4)), int(match.group(5)), int(match.group(6)))
        # Chilean documents print day first
        return date(int(match.group(3)), int(match.group(2)), int(match.group(1)))
    except ValueError:
        return None


class RegexFieldExtractor:
    """
    Default extractor: a handful of regular expressions tuned for Chilean
    invoices and purchase orders (RUT, day-first dates, dotted thousands).
    """

    def extract(self, text: str) -> ExtractedFields:
        fields = ExtractedFields()
        if not text or not text.strip():
            return fields

        m = _NUMBER_RE.search(text)
        if m:
            fields.numero = m.group(1).strip("-")

        for m in _DATE_RE.finditer(text):
            parsed = parse_date(m)
            if parsed:
                fields.fecha = parsed
                break

        # The last "total" on the page is usually the grand total
        totals = [parse_amount(m.group(1)) for m in _TOTAL_RE.finditer(text)]
        totals = [t for t in totals if t is not None and t > 0]
        if totals:
            fields.monto_total = totals[-1]

        m = _RUT_RE.search(text)
        if m:
            fields.rut = m.group(1).upper()

        m = _EMAIL_RE.search(text)
        if m:
            fields.email = m.group(0).rstrip(".")

        m = _SUPPLIER_RE.search(text)
        if m:
            fields.nombre = m.group(1).strip()[:200]

        logger.debug("Extracted fields: %s", fields.model_dump(exclude_none=True))
        return fields
