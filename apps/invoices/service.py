import logging
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Union

from apps.invoices.repository import InvoiceRepository
from apps.invoices.schemas import InvoiceCreate, InvoiceFilters, InvoiceSummary, InvoiceUpdate, invoice_date_errors
from apps.orders.repository import OrderRepository
from common.exceptions import PersistenceError
from common.numbering import INVOICE_PREFIX, next_number
from common.pagination import PaginationParams
from common.responses import (
    ERROR_BUSINESS,
    ERROR_NOT_FOUND,
    ERROR_STORAGE,
    ERROR_VALIDATION,
    ServiceResult,
)
from common.schemas import parse_payload, to_row
from constants.currencies import Currency
from constants.statuses import (
    INVOICE_INITIAL_STATUS,
    INVOICE_TRANSITIONS,
    INVOICEABLE_ORDER_STATUSES,
    InvoiceStatus,
    OrderStatus,
    can_transition,
)
from models.invoice import Invoice

logger = logging.getLogger(__name__)

NOT_FOUND = "Factura no encontrada"
DUPLICATE_NUMBER = "Ya existe una factura con este número"
ORDER_MISSING = "La orden de compra especificada no existe"
ORDER_NOT_SENT = "Solo se pueden crear facturas para órdenes enviadas"
NON_POSITIVE_AMOUNT = "El monto total debe ser mayor a 0"
PAID_NOT_DELETABLE = "No se pueden eliminar facturas pagadas"

_EDITABLE_COLUMNS = (
    "numero_factura",
    "orden_compra_id",
    "nombre_vendedor",
    "email_vendedor",
    "telefono_vendedor",
    "monto_total",
    "moneda",
    "estado",
    "fecha_factura",
    "fecha_vencimiento",
    "fecha_pago",
    "notas",
    "url_documento",
)


class InvoiceService:
    """
    Business rules for invoices. The only path that writes invoices.

    Invoices are billed against purchase orders that were already sent to
    the supplier; the order repository is used to check that precondition.
    """

    def __init__(
        self,
        repository: InvoiceRepository,
        orders: OrderRepository,
        clock: Callable[[], date] = date.today,
        currency: Union[Currency, str] = Currency.CLP,
    ):
        self.repository = repository
        self.orders = orders
        self._clock = clock
        self._currency = Currency(currency)

    async def generate_number(self) -> str:
        return await next_number(INVOICE_PREFIX, self._clock(), self.repository.count_by_number_prefix)

    # ---- writes ----------------------------------------------------------

    async def create(self, payload: Union[InvoiceCreate, Dict[str, Any]]) -> ServiceResult[Invoice]:
        data, errors = parse_payload(InvoiceCreate, payload)
        if errors:
            return ServiceResult.fail(errors, ERROR_VALIDATION)

        try:
            values = to_row(data.model_dump())
            values["moneda"] = values["moneda"] or self._currency.value
            values["fecha_factura"] = values["fecha_factura"] or self._clock()
            if not values["numero_factura"]:
                values["numero_factura"] = await self.generate_number()
            values["estado"] = INVOICE_INITIAL_STATUS.value

            rule_errors = await self._rule_errors(values, numero_changed=True, order_changed=True)
            if rule_errors:
                return ServiceResult.fail(rule_errors, ERROR_BUSINESS)

            invoice = await self.repository.insert(values)
        except PersistenceError as exc:
            return self._store_failure("crear", exc)
        except Exception:
            logger.exception("Unexpected error creating invoice")
            return ServiceResult.fail(["Error desconocido al crear factura"], ERROR_STORAGE)

        logger.info("Invoice %s created for order %s", invoice.numero_factura, invoice.orden_compra_id)
        return ServiceResult.ok(invoice)

    async def update(self, invoice_id: str, changes: Union[InvoiceUpdate, Dict[str, Any]]) -> ServiceResult[Invoice]:
        try:
            invoice = await self.repository.get_by_id(invoice_id)
            if invoice is None:
                return ServiceResult.fail([NOT_FOUND], ERROR_NOT_FOUND)

            patch, errors = parse_payload(InvoiceUpdate, changes)
            if errors:
                return ServiceResult.fail(errors, ERROR_VALIDATION)
            values = to_row(patch.model_dump(exclude_unset=True))

            new_status = values.get("estado")
            status_changed = new_status is not None and new_status != invoice.estado
            payment_stamped = False
            if status_changed:
                if not can_transition(INVOICE_TRANSITIONS, InvoiceStatus(invoice.estado), InvoiceStatus(new_status)):
                    return ServiceResult.fail(
                        [f"No se puede cambiar el estado de '{invoice.estado}' a '{new_status}'"], ERROR_BUSINESS
                    )
                if new_status == InvoiceStatus.PAID.value and not values.get("fecha_pago"):
                    values["fecha_pago"] = self._clock()
                    payment_stamped = True

            merged = {col: getattr(invoice, col) for col in _EDITABLE_COLUMNS}
            merged.update(values)
            rule_errors = await self._rule_errors(
                merged,
                numero_changed="numero_factura" in values and values["numero_factura"] != invoice.numero_factura,
                order_changed="orden_compra_id" in values and values["orden_compra_id"] != invoice.orden_compra_id,
                payment_stamped=payment_stamped,
            )
            if rule_errors:
                return ServiceResult.fail(rule_errors, ERROR_BUSINESS)

            if not values:
                return ServiceResult.ok(invoice)

            updated = await self.repository.update(invoice_id, values)
        except PersistenceError as exc:
            return self._store_failure("actualizar", exc)
        except Exception:
            logger.exception("Unexpected error updating invoice %s", invoice_id)
            return ServiceResult.fail(["Error desconocido al actualizar factura"], ERROR_STORAGE)

        if updated is None:
            return ServiceResult.fail([NOT_FOUND], ERROR_NOT_FOUND)
        if status_changed:
            logger.info("Invoice %s moved %s -> %s", updated.numero_factura, invoice.estado, updated.estado)
        return ServiceResult.ok(updated)

    async def mark_paid(self, invoice_id: str, fecha_pago: Optional[date] = None) -> ServiceResult[Invoice]:
        changes: Dict[str, Any] = {"estado": InvoiceStatus.PAID.value}
        if fecha_pago:
            changes["fecha_pago"] = fecha_pago
        return await self.update(invoice_id, changes)

    async def attach_document(self, invoice_id: str, url: str) -> ServiceResult[Invoice]:
        return await self.update(invoice_id, {"url_documento": url})

    async def delete(self, invoice_id: str) -> ServiceResult[None]:
        try:
            invoice = await self.repository.get_by_id(invoice_id)
            if invoice is None:
                return ServiceResult.fail([NOT_FOUND], ERROR_NOT_FOUND)
            if invoice.estado == InvoiceStatus.PAID.value:
                return ServiceResult.fail([PAID_NOT_DELETABLE], ERROR_BUSINESS)

            deleted = await self.repository.delete(invoice_id)
        except PersistenceError as exc:
            return self._store_failure("eliminar", exc)
        except Exception:
            logger.exception("Unexpected error deleting invoice %s", invoice_id)
            return ServiceResult.fail(["Error al eliminar"], ERROR_STORAGE)

        if not deleted:
            return ServiceResult.fail([NOT_FOUND], ERROR_NOT_FOUND)
        logger.info("Invoice %s deleted", invoice_id)
        return ServiceResult.ok()

    # ---- reads -----------------------------------------------------------

    async def get(self, invoice_id: str) -> Optional[Invoice]:
        return await self.repository.get_by_id(invoice_id)

    async def list_all(self) -> List[Invoice]:
        return await self.repository.get_all()

    async def list_by_status(self, estado: Union[InvoiceStatus, str]) -> List[Invoice]:
        return await self.repository.get_by_status(InvoiceStatus(estado).value)

    async def list_overdue(self) -> List[Invoice]:
        return await self.repository.get_overdue(self._clock())

    async def list_by_order(self, orden_compra_id: str) -> List[Invoice]:
        return await self.repository.get_by_order(orden_compra_id)

    async def search(self, filters: InvoiceFilters, params: PaginationParams):
        return await self.repository.search(filters, params, self._clock())

    async def summary(self) -> InvoiceSummary:
        """
        Count and amount of pending invoices, and of the overdue subset.
        Aggregated in memory over the fetched rows.
        """
        pending = await self.repository.get_by_status(InvoiceStatus.PENDING.value)
        overdue = await self.repository.get_overdue(self._clock())
        return InvoiceSummary(
            total_facturas=len(pending),
            monto_total=sum((Decimal(i.monto_total) for i in pending), Decimal("0")),
            facturas_vencidas=len(overdue),
            monto_vencido=sum((Decimal(i.monto_total) for i in overdue), Decimal("0")),
        )

    # ---- rules -----------------------------------------------------------

    async def _rule_errors(
        self, values: Dict[str, Any], numero_changed: bool, order_changed: bool, payment_stamped: bool = False
    ) -> List[str]:
        errors: List[str] = []
        if numero_changed and values.get("numero_factura"):
            if await self.repository.exists_number(values["numero_factura"]):
                errors.append(DUPLICATE_NUMBER)

        if order_changed:
            order = await self.orders.get_by_id(values["orden_compra_id"])
            if order is None:
                errors.append(ORDER_MISSING)
            elif OrderStatus(order.estado) not in INVOICEABLE_ORDER_STATUSES:
                errors.append(ORDER_NOT_SENT)

        # Stamped payment dates are not checked against the invoice date
        fecha_pago = None if payment_stamped else values.get("fecha_pago")
        errors.extend(invoice_date_errors(values.get("fecha_factura"), values.get("fecha_vencimiento"), fecha_pago))

        monto = values.get("monto_total")
        if monto is None or monto <= 0:
            errors.append(NON_POSITIVE_AMOUNT)
        return errors

    def _store_failure(self, action: str, exc: PersistenceError) -> ServiceResult:
        logger.warning("Could not %s invoice: %s (code=%s)", action, exc.message, exc.code)
        return ServiceResult.fail([f"No se pudo {action} la factura. Intente nuevamente."], ERROR_STORAGE)
