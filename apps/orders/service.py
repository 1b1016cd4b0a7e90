import logging
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Union

from apps.orders.repository import OrderRepository
from apps.orders.schemas import DELIVERY_BEFORE_ORDER, OrderCreate, OrderFilters, OrderUpdate
from common.exceptions import PersistenceError
from common.numbering import ORDER_PREFIX, next_number
from common.pagination import PaginationParams
from common.responses import (
    ERROR_BUSINESS,
    ERROR_NOT_FOUND,
    ERROR_STORAGE,
    ERROR_VALIDATION,
    ServiceResult,
)
from common.schemas import check_date_order, parse_payload, to_row
from constants.currencies import Currency
from constants.statuses import ORDER_INITIAL_STATUS, ORDER_TRANSITIONS, OrderStatus, can_transition
from models.purchase_order import PurchaseOrder

logger = logging.getLogger(__name__)

NOT_FOUND = "Orden de compra no encontrada"
DUPLICATE_NUMBER = "Ya existe una orden con este número"
NON_POSITIVE_AMOUNT = "El monto total debe ser mayor a 0"
ONLY_PENDING_DELETABLE = "Solo se pueden eliminar órdenes en estado pendiente"

_EDITABLE_COLUMNS = (
    "numero_orden",
    "nombre_proveedor",
    "email_proveedor",
    "telefono_proveedor",
    "monto_total",
    "moneda",
    "estado",
    "fecha_orden",
    "fecha_entrega_esperada",
    "notas",
    "url_documento",
)


class OrderService:
    """
    Business rules for purchase orders. The only path that writes orders.

    Mutating operations return a ServiceResult and never raise: schema
    violations, rule violations and store failures all come back as
    `errors` in the envelope.
    """

    def __init__(
        self,
        repository: OrderRepository,
        clock: Callable[[], date] = date.today,
        currency: Union[Currency, str] = Currency.CLP,
    ):
        self.repository = repository
        self._clock = clock
        self._currency = Currency(currency)

    # ---- numbering -------------------------------------------------------

    async def generate_number(self) -> str:
        return await next_number(ORDER_PREFIX, self._clock(), self.repository.count_by_number_prefix)

    # ---- writes ----------------------------------------------------------

    async def create(self, payload: Union[OrderCreate, Dict[str, Any]]) -> ServiceResult[PurchaseOrder]:
        data, errors = parse_payload(OrderCreate, payload)
        if errors:
            return ServiceResult.fail(errors, ERROR_VALIDATION)

        try:
            values = to_row(data.model_dump())
            values["moneda"] = values["moneda"] or self._currency.value
            values["fecha_orden"] = values["fecha_orden"] or self._clock()
            if not values["numero_orden"]:
                values["numero_orden"] = await self.generate_number()
            values["estado"] = ORDER_INITIAL_STATUS.value

            rule_errors = await self._rule_errors(values, numero_changed=True)
            if rule_errors:
                return ServiceResult.fail(rule_errors, ERROR_BUSINESS)

            order = await self.repository.insert(values)
        except PersistenceError as exc:
            return self._store_failure("crear", exc)
        except Exception:
            logger.exception("Unexpected error creating purchase order")
            return ServiceResult.fail(["Error desconocido al crear orden de compra"], ERROR_STORAGE)

        logger.info("Purchase order %s created (%s)", order.numero_orden, order.id)
        return ServiceResult.ok(order)

    async def update(
        self, order_id: str, changes: Union[OrderUpdate, Dict[str, Any]]
    ) -> ServiceResult[PurchaseOrder]:
        try:
            order = await self.repository.get_by_id(order_id)
            if order is None:
                return ServiceResult.fail([NOT_FOUND], ERROR_NOT_FOUND)

            patch, errors = parse_payload(OrderUpdate, changes)
            if errors:
                return ServiceResult.fail(errors, ERROR_VALIDATION)
            values = to_row(patch.model_dump(exclude_unset=True))

            new_status = values.get("estado")
            if new_status is not None and new_status != order.estado:
                if not can_transition(ORDER_TRANSITIONS, OrderStatus(order.estado), OrderStatus(new_status)):
                    return ServiceResult.fail(
                        [f"No se puede cambiar el estado de '{order.estado}' a '{new_status}'"], ERROR_BUSINESS
                    )

            merged = {col: getattr(order, col) for col in _EDITABLE_COLUMNS}
            merged.update(values)
            numero_changed = "numero_orden" in values and values["numero_orden"] != order.numero_orden
            rule_errors = await self._rule_errors(merged, numero_changed=numero_changed)
            if rule_errors:
                return ServiceResult.fail(rule_errors, ERROR_BUSINESS)

            if not values:
                return ServiceResult.ok(order)

            updated = await self.repository.update(order_id, values)
        except PersistenceError as exc:
            return self._store_failure("actualizar", exc)
        except Exception:
            logger.exception("Unexpected error updating purchase order %s", order_id)
            return ServiceResult.fail(["Error desconocido al actualizar orden de compra"], ERROR_STORAGE)

        if updated is None:
            return ServiceResult.fail([NOT_FOUND], ERROR_NOT_FOUND)
        if "estado" in values and values["estado"] != order.estado:
            logger.info("Purchase order %s moved %s -> %s", updated.numero_orden, order.estado, updated.estado)
        return ServiceResult.ok(updated)

    async def delete(self, order_id: str) -> ServiceResult[None]:
        try:
            order = await self.repository.get_by_id(order_id)
            if order is None:
                return ServiceResult.fail([NOT_FOUND], ERROR_NOT_FOUND)
            if order.estado != OrderStatus.PENDING.value:
                return ServiceResult.fail([ONLY_PENDING_DELETABLE], ERROR_BUSINESS)

            deleted = await self.repository.delete(order_id)
        except PersistenceError as exc:
            return self._store_failure("eliminar", exc)
        except Exception:
            logger.exception("Unexpected error deleting purchase order %s", order_id)
            return ServiceResult.fail(["Error al eliminar"], ERROR_STORAGE)

        if not deleted:
            return ServiceResult.fail([NOT_FOUND], ERROR_NOT_FOUND)
        logger.info("Purchase order %s deleted", order_id)
        return ServiceResult.ok()

    async def attach_document(self, order_id: str, url: str) -> ServiceResult[PurchaseOrder]:
        return await self.update(order_id, {"url_documento": url})

    # ---- reads -----------------------------------------------------------

    async def get(self, order_id: str) -> Optional[PurchaseOrder]:
        return await self.repository.get_by_id(order_id)

    async def list_all(self) -> List[PurchaseOrder]:
        return await self.repository.get_all()

    async def list_by_status(self, estado: Union[OrderStatus, str]) -> List[PurchaseOrder]:
        return await self.repository.get_by_status(OrderStatus(estado).value)

    async def search_by_supplier(self, nombre: str) -> List[PurchaseOrder]:
        return await self.repository.search_by_supplier(nombre)

    async def search(self, filters: OrderFilters, params: PaginationParams):
        return await self.repository.search(filters, params)

    # ---- rules -----------------------------------------------------------

    async def _rule_errors(self, values: Dict[str, Any], numero_changed: bool) -> List[str]:
        errors: List[str] = []
        if numero_changed and values.get("numero_orden"):
            if await self.repository.exists_number(values["numero_orden"]):
                errors.append(DUPLICATE_NUMBER)

        if not check_date_order(values.get("fecha_orden"), values.get("fecha_entrega_esperada")):
            errors.append(DELIVERY_BEFORE_ORDER)

        monto = values.get("monto_total")
        if monto is None or monto <= 0:
            errors.append(NON_POSITIVE_AMOUNT)
        return errors

    def _store_failure(self, action: str, exc: PersistenceError) -> ServiceResult:
        logger.warning("Could not %s purchase order: %s (code=%s)", action, exc.message, exc.code)
        return ServiceResult.fail(
            [f"No se pudo {action} la orden de compra. Intente nuevamente."], ERROR_STORAGE
        )
