from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, constr, field_validator, model_validator

from common.schemas import (
    blank_to_none,
    check_amount,
    check_date_order,
    check_not_null,
)
from constants.currencies import Currency
from constants.statuses import InvoiceStatus

DUE_BEFORE_INVOICE = "La fecha de vencimiento debe ser posterior o igual a la fecha de factura"
PAYMENT_BEFORE_INVOICE = "La fecha de pago no puede ser anterior a la fecha de factura"


def invoice_date_errors(
    fecha_factura: Optional[date], fecha_vencimiento: Optional[date], fecha_pago: Optional[date]
) -> List[str]:
    errors: List[str] = []
    if not check_date_order(fecha_factura, fecha_vencimiento):
        errors.append(DUE_BEFORE_INVOICE)
    if not check_date_order(fecha_factura, fecha_pago):
        errors.append(PAYMENT_BEFORE_INVOICE)
    return errors


class InvoiceCreate(BaseModel):
    """
    Payload for a new invoice against an existing purchase order.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    numero_factura: constr(max_length=50) = ""
    orden_compra_id: constr(min_length=1, max_length=36)
    nombre_vendedor: constr(min_length=1, max_length=200)
    email_vendedor: Optional[EmailStr] = None
    telefono_vendedor: Optional[constr(max_length=20)] = None
    monto_total: Decimal = Field(max_digits=14, decimal_places=2)
    # Left unset for the service to fill from MONEDA_BASE and its clock
    moneda: Optional[Currency] = None
    fecha_factura: Optional[date] = None
    fecha_vencimiento: Optional[date] = None
    fecha_pago: Optional[date] = None
    notas: Optional[constr(max_length=1000)] = None
    url_documento: Optional[constr(max_length=1024)] = None

    @field_validator("numero_factura", mode="before")
    def _blank_number(cls, v):
        return "" if v is None else v

    @field_validator(
        "email_vendedor", "telefono_vendedor", "moneda", "fecha_factura", "fecha_vencimiento", "fecha_pago",
        "notas", "url_documento",
        mode="before",
    )
    def _blank_optional(cls, v):
        return blank_to_none(v)

    @field_validator("monto_total")
    def _positive_amount(cls, v):
        return check_amount(v)

    @model_validator(mode="after")
    def _dates_after_invoice(self):
        errors = invoice_date_errors(self.fecha_factura, self.fecha_vencimiento, self.fecha_pago)
        if errors:
            raise ValueError("; ".join(errors))
        return self


class InvoiceUpdate(BaseModel):
    """
    Partial update ("patch"). Only fields present in the payload are applied.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    numero_factura: Optional[constr(min_length=1, max_length=50)] = None
    orden_compra_id: Optional[constr(min_length=1, max_length=36)] = None
    nombre_vendedor: Optional[constr(min_length=1, max_length=200)] = None
    email_vendedor: Optional[EmailStr] = None
    telefono_vendedor: Optional[constr(max_length=20)] = None
    monto_total: Optional[Decimal] = Field(default=None, max_digits=14, decimal_places=2)
    moneda: Optional[Currency] = None
    estado: Optional[InvoiceStatus] = None
    fecha_factura: Optional[date] = None
    fecha_vencimiento: Optional[date] = None
    fecha_pago: Optional[date] = None
    notas: Optional[constr(max_length=1000)] = None
    url_documento: Optional[constr(max_length=1024)] = None

    @field_validator(
        "email_vendedor", "telefono_vendedor", "fecha_vencimiento", "fecha_pago", "notas", "url_documento",
        mode="before",
    )
    def _blank_optional(cls, v):
        return blank_to_none(v)

    @field_validator(
        "numero_factura", "orden_compra_id", "nombre_vendedor", "monto_total", "moneda", "estado", "fecha_factura"
    )
    def _required_not_null(cls, v):
        return check_not_null(v)

    @field_validator("monto_total")
    def _positive_amount(cls, v):
        return check_amount(v)

    @model_validator(mode="after")
    def _dates_after_invoice(self):
        errors = invoice_date_errors(self.fecha_factura, self.fecha_vencimiento, self.fecha_pago)
        if errors:
            raise ValueError("; ".join(errors))
        return self


class MarkPaidRequest(BaseModel):
    fecha_pago: Optional[date] = None

    @field_validator("fecha_pago", mode="before")
    def _blank(cls, v):
        return blank_to_none(v)


class InvoiceFilters(BaseModel):
    estado: Optional[InvoiceStatus] = None
    vendedor: Optional[constr(strip_whitespace=True, min_length=1, max_length=200)] = None
    fecha_desde: Optional[date] = None
    fecha_hasta: Optional[date] = None
    solo_vencidas: bool = False


class InvoiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    numero_factura: str
    orden_compra_id: str
    nombre_vendedor: str
    email_vendedor: Optional[str] = None
    telefono_vendedor: Optional[str] = None
    monto_total: Decimal
    moneda: str
    estado: str
    fecha_factura: date
    fecha_vencimiento: Optional[date] = None
    fecha_pago: Optional[date] = None
    notas: Optional[str] = None
    url_documento: Optional[str] = None
    creado_en: datetime
    actualizado_en: datetime


class InvoiceSummary(BaseModel):
    total_facturas: int
    monto_total: Decimal
    facturas_vencidas: int
    monto_vencido: Decimal


class TaxBreakdown(BaseModel):
    monto_neto: Decimal
    iva: Decimal
    monto_total: Decimal
    tasa: Decimal
