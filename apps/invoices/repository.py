from datetime import date
from typing import List

from sqlalchemy import and_, select

from apps.invoices.schemas import InvoiceFilters
from common.pagination import PaginationParams
from common.repository import BaseRepository, contains_pattern
from constants.statuses import InvoiceStatus
from models.invoice import Invoice


class InvoiceRepository(BaseRepository[Invoice]):
    """
    Data access for the `facturas` table.
    """
    model = Invoice
    entity_label = "factura"

    async def get_by_status(self, estado: str) -> List[Invoice]:
        stmt = (
            select(Invoice)
            .where(Invoice.estado == estado)
            .order_by(Invoice.fecha_vencimiento.asc(), Invoice.creado_en.desc())
        )
        return await self._scalars(stmt)

    async def get_by_order(self, orden_compra_id: str) -> List[Invoice]:
        stmt = (
            select(Invoice)
            .where(Invoice.orden_compra_id == orden_compra_id)
            .order_by(Invoice.fecha_factura.desc(), Invoice.creado_en.desc())
        )
        return await self._scalars(stmt)

    async def get_overdue(self, on: date) -> List[Invoice]:
        """Pending invoices whose due date is strictly before `on`."""
        stmt = (
            select(Invoice)
            .where(
                and_(
                    Invoice.estado == InvoiceStatus.PENDING.value,
                    Invoice.fecha_vencimiento.is_not(None),
                    Invoice.fecha_vencimiento < on,
                )
            )
            .order_by(Invoice.fecha_vencimiento.asc())
        )
        return await self._scalars(stmt)

    async def count_by_number_prefix(self, prefix: str) -> int:
        return await self.count_where(Invoice.numero_factura.like(f"{prefix}%"))

    async def exists_number(self, numero: str) -> bool:
        return await self.count_where(Invoice.numero_factura == numero) > 0

    async def search(self, filters: InvoiceFilters, params: PaginationParams, on: date):
        where_clause = []
        if filters.estado:
            where_clause.append(Invoice.estado == filters.estado.value)
        if filters.vendedor:
            where_clause.append(Invoice.nombre_vendedor.ilike(contains_pattern(filters.vendedor), escape="\\"))
        if filters.fecha_desde:
            where_clause.append(Invoice.fecha_factura >= filters.fecha_desde)
        if filters.fecha_hasta:
            where_clause.append(Invoice.fecha_factura <= filters.fecha_hasta)
        if filters.solo_vencidas:
            where_clause.append(Invoice.estado == InvoiceStatus.PENDING.value)
            where_clause.append(Invoice.fecha_vencimiento < on)

        stmt = select(Invoice)
        if where_clause:
            stmt = stmt.where(and_(*where_clause))
        stmt = stmt.order_by(Invoice.creado_en.desc(), Invoice.id)
        return await self.paginate(stmt, params)
