from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, constr


class ExtractRequest(BaseModel):
    """
    Plain text of a scanned document (already OCR'd or copied from a PDF).
    """

    texto: constr(min_length=1, max_length=200_000)


class ExtractedFields(BaseModel):
    """
    Best-effort guesses; any field may be missing.
    """

    numero: Optional[str] = None
    fecha: Optional[date] = None
    monto_total: Optional[Decimal] = None
    rut: Optional[str] = None
    email: Optional[str] = None
    nombre: Optional[str] = None
