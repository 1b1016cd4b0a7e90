"""
Field helpers shared by the order and invoice schemas.
"""
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from constants.currencies import MAX_AMOUNT
from common.exceptions import validation_messages

ModelT = TypeVar("ModelT", bound=BaseModel)

_MAX_AMOUNT = Decimal(MAX_AMOUNT)


def blank_to_none(value: Any) -> Any:
    # Frontend forms send "" for untouched optional inputs
    if isinstance(value, str) and not value.strip():
        return None
    return value


def check_amount(value: Optional[Decimal]) -> Optional[Decimal]:
    if value is None:
        return value
    if value <= 0:
        raise ValueError("El monto debe ser positivo")
    if value > _MAX_AMOUNT:
        raise ValueError("El monto excede el límite permitido")
    return value


def check_not_null(value: Any) -> Any:
    if value is None:
        raise ValueError("El campo no puede ser nulo")
    return value


def check_date_order(anchor: Optional[date], dependent: Optional[date]) -> bool:
    """True when `dependent` does not precede `anchor` (or either is unset)."""
    if anchor is None or dependent is None:
        return True
    return dependent >= anchor


def to_row(data: Dict[str, Any], skip: Iterable[str] = ()) -> Dict[str, Any]:
    """
    Plain column values for the repositories: enums become their stored value.
    """
    row: Dict[str, Any] = {}
    for key, value in data.items():
        if key in skip:
            continue
        row[key] = value.value if isinstance(value, Enum) else value
    return row


def parse_payload(schema: Type[ModelT], payload: Union[ModelT, Dict[str, Any], None]) -> Tuple[Optional[ModelT], List[str]]:
    """
    Validate a raw mapping (or pass through an already-validated model).
    Returns (model, []) on success or (None, messages) with every violation.
    """
    if isinstance(payload, schema):
        return payload, []
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_unset=True)
    try:
        return schema.model_validate(payload or {}), []
    except ValidationError as exc:
        return None, validation_messages(exc)
