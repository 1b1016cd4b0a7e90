"""Business rules for invoices: order staging, payment stamping, overdue reads."""

from datetime import date
from decimal import Decimal

import pytest

from apps.invoices.repository import InvoiceRepository
from apps.invoices.schemas import InvoiceFilters
from apps.invoices.service import (
    DUPLICATE_NUMBER,
    ORDER_MISSING,
    ORDER_NOT_SENT,
    PAID_NOT_DELETABLE,
    InvoiceService,
)
from apps.orders.repository import OrderRepository
from common.pagination import PaginationParams
from common.responses import ERROR_BUSINESS, ERROR_NOT_FOUND, ERROR_VALIDATION

from conftest import TODAY, invoice_payload, order_payload


class TestCreateInvoice:
    async def test_invoice_against_sent_order(self, invoice_service, sent_order):
        result = await invoice_service.create(invoice_payload(sent_order.id))

        assert result.success, result.errors
        invoice = result.record
        assert invoice.numero_factura == "FAC-202505-001"
        assert invoice.estado == "pendiente"
        assert invoice.orden_compra_id == sent_order.id
        assert invoice.fecha_pago is None

    async def test_numbers_are_sequential_within_the_month(self, invoice_service, sent_order):
        first = await invoice_service.create(invoice_payload(sent_order.id))
        second = await invoice_service.create(invoice_payload(sent_order.id))

        assert first.record.numero_factura == "FAC-202505-001"
        assert second.record.numero_factura == "FAC-202505-002"

    @pytest.mark.parametrize("estado", [None, "cancelada"])
    async def test_order_not_sent_is_rejected(self, order_service, invoice_service, estado):
        order = (await order_service.create(order_payload())).record
        if estado:
            await order_service.update(order.id, {"estado": estado})

        result = await invoice_service.create(invoice_payload(order.id))

        assert result.success is False
        assert result.error_kind == ERROR_BUSINESS
        assert result.errors == [ORDER_NOT_SENT]
        assert await invoice_service.list_all() == []

    async def test_missing_order_is_rejected(self, invoice_service):
        result = await invoice_service.create(invoice_payload("no-existe"))

        assert result.success is False
        assert ORDER_MISSING in result.errors
        assert await invoice_service.list_all() == []

    async def test_duplicate_number_is_rejected(self, invoice_service, sent_order):
        await invoice_service.create(invoice_payload(sent_order.id, numero_factura="F-100"))
        result = await invoice_service.create(invoice_payload(sent_order.id, numero_factura="F-100"))

        assert result.success is False
        assert DUPLICATE_NUMBER in result.errors

    async def test_due_date_before_invoice_date_is_rejected(self, invoice_service, sent_order):
        result = await invoice_service.create(
            invoice_payload(sent_order.id, fecha_vencimiento=date(2025, 5, 1))
        )

        assert result.success is False
        assert result.error_kind == ERROR_VALIDATION

    async def test_defaults_come_from_clock_and_base_currency(self, session_factory, sent_order):
        service = InvoiceService(
            InvoiceRepository(session_factory), OrderRepository(session_factory), clock=lambda: TODAY, currency="USD"
        )
        payload = invoice_payload(sent_order.id)
        del payload["fecha_factura"]

        result = await service.create(payload)

        assert result.success, result.errors
        assert result.record.fecha_factura == TODAY
        assert result.record.moneda == "USD"

    async def test_due_date_is_optional(self, invoice_service, sent_order):
        result = await invoice_service.create(invoice_payload(sent_order.id, fecha_vencimiento=None))

        assert result.success
        assert result.record.fecha_vencimiento is None


class TestUpdateInvoice:
    async def test_paid_without_date_stamps_today(self, invoice_service, sent_order):
        invoice = (await invoice_service.create(invoice_payload(sent_order.id))).record

        result = await invoice_service.update(invoice.id, {"estado": "pagada"})

        assert result.success, result.errors
        assert result.record.estado == "pagada"
        assert result.record.fecha_pago == TODAY

    async def test_future_dated_invoice_can_be_paid_today(self, invoice_service, sent_order):
        invoice = (
            await invoice_service.create(
                invoice_payload(sent_order.id, fecha_factura=date(2025, 5, 20), fecha_vencimiento=None)
            )
        ).record

        paid = await invoice_service.mark_paid(invoice.id)

        assert paid.success, paid.errors
        assert paid.record.estado == "pagada"
        assert paid.record.fecha_pago == TODAY

    async def test_explicit_payment_before_invoice_date_is_rejected(self, invoice_service, sent_order):
        invoice = (
            await invoice_service.create(invoice_payload(sent_order.id, fecha_factura=date(2025, 5, 20)))
        ).record

        result = await invoice_service.mark_paid(invoice.id, date(2025, 5, 15))

        assert result.success is False
        assert (await invoice_service.get(invoice.id)).estado == "pendiente"

    async def test_paid_with_date_keeps_it(self, invoice_service, sent_order):
        invoice = (await invoice_service.create(invoice_payload(sent_order.id))).record

        result = await invoice_service.update(invoice.id, {"estado": "pagada", "fecha_pago": date(2025, 5, 13)})

        assert result.record.fecha_pago == date(2025, 5, 13)

    async def test_mark_paid_through_sent(self, invoice_service, sent_order):
        invoice = (await invoice_service.create(invoice_payload(sent_order.id))).record
        await invoice_service.update(invoice.id, {"estado": "enviada"})

        result = await invoice_service.mark_paid(invoice.id)

        assert result.success
        assert result.record.fecha_pago == TODAY

    async def test_paid_is_terminal(self, invoice_service, sent_order):
        invoice = (await invoice_service.create(invoice_payload(sent_order.id))).record
        await invoice_service.mark_paid(invoice.id)

        result = await invoice_service.update(invoice.id, {"estado": "pendiente"})

        assert result.success is False
        assert result.error_kind == ERROR_BUSINESS
        assert (await invoice_service.get(invoice.id)).estado == "pagada"

    async def test_sent_cannot_go_back_to_pending(self, invoice_service, sent_order):
        invoice = (await invoice_service.create(invoice_payload(sent_order.id))).record
        await invoice_service.update(invoice.id, {"estado": "enviada"})

        result = await invoice_service.update(invoice.id, {"estado": "pendiente"})

        assert result.success is False
        assert (await invoice_service.get(invoice.id)).estado == "enviada"

    async def test_moving_to_a_pending_order_is_rejected(self, order_service, invoice_service, sent_order):
        invoice = (await invoice_service.create(invoice_payload(sent_order.id))).record
        other = (await order_service.create(order_payload())).record

        result = await invoice_service.update(invoice.id, {"orden_compra_id": other.id})

        assert result.success is False
        assert result.errors == [ORDER_NOT_SENT]
        assert (await invoice_service.get(invoice.id)).orden_compra_id == sent_order.id

    async def test_payment_before_invoice_date_is_rejected(self, invoice_service, sent_order):
        invoice = (await invoice_service.create(invoice_payload(sent_order.id))).record

        result = await invoice_service.update(invoice.id, {"fecha_pago": date(2025, 5, 1)})

        assert result.success is False

    async def test_missing_invoice(self, invoice_service):
        result = await invoice_service.mark_paid("no-existe")

        assert result.success is False
        assert result.error_kind == ERROR_NOT_FOUND


class TestDeleteInvoice:
    @pytest.mark.parametrize("estado", [None, "enviada"])
    async def test_unpaid_invoice_can_be_deleted(self, invoice_service, sent_order, estado):
        invoice = (await invoice_service.create(invoice_payload(sent_order.id))).record
        if estado:
            await invoice_service.update(invoice.id, {"estado": estado})

        result = await invoice_service.delete(invoice.id)

        assert result.success
        assert await invoice_service.get(invoice.id) is None

    async def test_paid_invoice_is_kept(self, invoice_service, sent_order):
        invoice = (await invoice_service.create(invoice_payload(sent_order.id))).record
        await invoice_service.mark_paid(invoice.id)

        result = await invoice_service.delete(invoice.id)

        assert result.success is False
        assert result.errors == [PAID_NOT_DELETABLE]
        assert await invoice_service.get(invoice.id) is not None


class TestInvoiceReads:
    async def _seed(self, invoice_service, order_id):
        overdue = await invoice_service.create(
            invoice_payload(order_id, monto_total=Decimal("1000"), fecha_factura=date(2025, 4, 1),
                            fecha_vencimiento=date(2025, 5, 1))
        )
        due_today = await invoice_service.create(
            invoice_payload(order_id, monto_total=Decimal("2000"), fecha_factura=date(2025, 4, 15),
                            fecha_vencimiento=TODAY)
        )
        paid_late = await invoice_service.create(
            invoice_payload(order_id, monto_total=Decimal("4000"), fecha_factura=date(2025, 4, 1),
                            fecha_vencimiento=date(2025, 4, 30))
        )
        await invoice_service.mark_paid(paid_late.record.id)
        no_due_date = await invoice_service.create(
            invoice_payload(order_id, monto_total=Decimal("8000"), fecha_vencimiento=None)
        )
        return overdue.record, due_today.record, paid_late.record, no_due_date.record

    async def test_overdue_only_pending_and_strictly_past(self, invoice_service, sent_order):
        overdue, _, _, _ = await self._seed(invoice_service, sent_order.id)

        result = await invoice_service.list_overdue()

        assert [i.id for i in result] == [overdue.id]

    async def test_summary(self, invoice_service, sent_order):
        await self._seed(invoice_service, sent_order.id)

        summary = await invoice_service.summary()

        assert summary.total_facturas == 3
        assert summary.monto_total == Decimal("11000")
        assert summary.facturas_vencidas == 1
        assert summary.monto_vencido == Decimal("1000")

    async def test_list_by_status_and_order(self, invoice_service, sent_order):
        await self._seed(invoice_service, sent_order.id)

        assert len(await invoice_service.list_by_status("pagada")) == 1
        assert len(await invoice_service.list_by_order(sent_order.id)) == 4
        assert await invoice_service.list_by_order("otra") == []

    async def test_search_only_overdue(self, invoice_service, sent_order):
        overdue, _, _, _ = await self._seed(invoice_service, sent_order.id)

        items, pagination = await invoice_service.search(InvoiceFilters(solo_vencidas=True), PaginationParams())

        assert [i.id for i in items] == [overdue.id]
        assert pagination["total"] == 1


async def test_full_scenario(order_service, invoice_service):
    created = await order_service.create(
        {"nombre_proveedor": "Acme", "monto_total": 100000, "fecha_orden": "2025-05-10"}
    )
    assert created.record.numero_orden == "OC-202505-001"
    assert created.record.estado == "pendiente"

    cancelled = await order_service.update(created.record.id, {"estado": "cancelada"})
    assert cancelled.success

    reopened = await order_service.update(created.record.id, {"estado": "enviada"})
    assert reopened.success is False

    invoice = await invoice_service.create(invoice_payload(created.record.id))
    assert invoice.success is False
    assert await invoice_service.list_all() == []
