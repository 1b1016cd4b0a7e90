from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, constr, field_validator, model_validator

from common.schemas import (
    blank_to_none,
    check_amount,
    check_date_order,
    check_not_null,
)
from constants.currencies import Currency
from constants.statuses import OrderStatus

DELIVERY_BEFORE_ORDER = "La fecha de entrega esperada no puede ser anterior a la fecha de orden"


class OrderCreate(BaseModel):
    """
    Payload for a new purchase order. A blank `numero_orden` is kept as ""
    so the service can generate the next number of the month.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    numero_orden: constr(max_length=50) = ""
    nombre_proveedor: constr(min_length=1, max_length=200)
    email_proveedor: Optional[EmailStr] = None
    telefono_proveedor: Optional[constr(max_length=20)] = None
    monto_total: Decimal = Field(max_digits=14, decimal_places=2)
    # Left unset for the service to fill from MONEDA_BASE and its clock
    moneda: Optional[Currency] = None
    fecha_orden: Optional[date] = None
    fecha_entrega_esperada: Optional[date] = None
    notas: Optional[constr(max_length=1000)] = None
    url_documento: Optional[constr(max_length=1024)] = None

    @field_validator("numero_orden", mode="before")
    def _blank_number(cls, v):
        return "" if v is None else v

    @field_validator(
        "email_proveedor", "telefono_proveedor", "moneda", "fecha_orden", "fecha_entrega_esperada", "notas",
        "url_documento",
        mode="before",
    )
    def _blank_optional(cls, v):
        return blank_to_none(v)

    @field_validator("monto_total")
    def _positive_amount(cls, v):
        return check_amount(v)

    @model_validator(mode="after")
    def _delivery_after_order(self):
        if not check_date_order(self.fecha_orden, self.fecha_entrega_esperada):
            raise ValueError(DELIVERY_BEFORE_ORDER)
        return self


class OrderUpdate(BaseModel):
    """
    Partial update ("patch"). Only fields present in the payload are applied.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    numero_orden: Optional[constr(min_length=1, max_length=50)] = None
    nombre_proveedor: Optional[constr(min_length=1, max_length=200)] = None
    email_proveedor: Optional[EmailStr] = None
    telefono_proveedor: Optional[constr(max_length=20)] = None
    monto_total: Optional[Decimal] = Field(default=None, max_digits=14, decimal_places=2)
    moneda: Optional[Currency] = None
    estado: Optional[OrderStatus] = None
    fecha_orden: Optional[date] = None
    fecha_entrega_esperada: Optional[date] = None
    notas: Optional[constr(max_length=1000)] = None
    url_documento: Optional[constr(max_length=1024)] = None

    @field_validator(
        "email_proveedor", "telefono_proveedor", "fecha_entrega_esperada", "notas", "url_documento", mode="before"
    )
    def _blank_optional(cls, v):
        return blank_to_none(v)

    @field_validator("numero_orden", "nombre_proveedor", "monto_total", "moneda", "estado", "fecha_orden")
    def _required_not_null(cls, v):
        return check_not_null(v)

    @field_validator("monto_total")
    def _positive_amount(cls, v):
        return check_amount(v)

    @model_validator(mode="after")
    def _delivery_after_order(self):
        if not check_date_order(self.fecha_orden, self.fecha_entrega_esperada):
            raise ValueError(DELIVERY_BEFORE_ORDER)
        return self


class OrderFilters(BaseModel):
    estado: Optional[OrderStatus] = None
    proveedor: Optional[constr(strip_whitespace=True, min_length=1, max_length=200)] = None
    fecha_desde: Optional[date] = None
    fecha_hasta: Optional[date] = None


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    numero_orden: str
    nombre_proveedor: str
    email_proveedor: Optional[str] = None
    telefono_proveedor: Optional[str] = None
    monto_total: Decimal
    moneda: str
    estado: str
    fecha_orden: date
    fecha_entrega_esperada: Optional[date] = None
    notas: Optional[str] = None
    url_documento: Optional[str] = None
    creado_en: datetime
    actualizado_en: datetime
