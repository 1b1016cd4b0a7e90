from typing import List

from sqlalchemy import and_, select

from apps.orders.schemas import OrderFilters
from common.pagination import PaginationParams
from common.repository import BaseRepository, contains_pattern
from models.purchase_order import PurchaseOrder


class OrderRepository(BaseRepository[PurchaseOrder]):
    """
    Data access for the `ordenes_compra` table.
    """
    model = PurchaseOrder
    entity_label = "orden de compra"

    async def get_by_status(self, estado: str) -> List[PurchaseOrder]:
        stmt = (
            select(PurchaseOrder)
            .where(PurchaseOrder.estado == estado)
            .order_by(PurchaseOrder.fecha_orden.desc(), PurchaseOrder.creado_en.desc())
        )
        return await self._scalars(stmt)

    async def search_by_supplier(self, nombre: str) -> List[PurchaseOrder]:
        stmt = (
            select(PurchaseOrder)
            .where(PurchaseOrder.nombre_proveedor.ilike(contains_pattern(nombre), escape="\\"))
            .order_by(PurchaseOrder.creado_en.desc())
        )
        return await self._scalars(stmt)

    async def count_by_number_prefix(self, prefix: str) -> int:
        return await self.count_where(PurchaseOrder.numero_orden.like(f"{prefix}%"))

    async def exists_number(self, numero: str) -> bool:
        return await self.count_where(PurchaseOrder.numero_orden == numero) > 0

    async def search(self, filters: OrderFilters, params: PaginationParams):
        where_clause = []
        if filters.estado:
            where_clause.append(PurchaseOrder.estado == filters.estado.value)
        if filters.proveedor:
            where_clause.append(PurchaseOrder.nombre_proveedor.ilike(contains_pattern(filters.proveedor), escape="\\"))
        if filters.fecha_desde:
            where_clause.append(PurchaseOrder.fecha_orden >= filters.fecha_desde)
        if filters.fecha_hasta:
            where_clause.append(PurchaseOrder.fecha_orden <= filters.fecha_hasta)

        stmt = select(PurchaseOrder)
        if where_clause:
            stmt = stmt.where(and_(*where_clause))
        stmt = stmt.order_by(PurchaseOrder.creado_en.desc(), PurchaseOrder.id)
        return await self.paginate(stmt, params)
