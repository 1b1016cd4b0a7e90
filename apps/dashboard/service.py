from decimal import Decimal
from typing import Dict, Iterable, Type

from apps.dashboard.schemas import DashboardStats, StatusBucket
from apps.invoices.service import InvoiceService
from apps.orders.schemas import OrderResponse
from apps.orders.service import OrderService
from constants.statuses import InvoiceStatus, OrderStatus


def _buckets(records: Iterable, statuses: Type) -> Dict[str, StatusBucket]:
    # Every known status appears, even with zero records
    buckets = {s.value: StatusBucket() for s in statuses}
    for record in records:
        bucket = buckets.setdefault(record.estado, StatusBucket())
        bucket.cantidad += 1
        bucket.monto += Decimal(record.monto_total)
    return buckets


class DashboardService:
    """
    Read-side aggregation for the dashboard, computed in memory.
    """

    def __init__(self, orders: OrderService, invoices: InvoiceService):
        self.orders = orders
        self.invoices = invoices

    async def stats(self, recent_limit: int = 5) -> DashboardStats:
        orders = await self.orders.list_all()
        invoices = await self.invoices.list_all()
        return DashboardStats(
            ordenes_por_estado=_buckets(orders, OrderStatus),
            facturas_por_estado=_buckets(invoices, InvoiceStatus),
            resumen_facturas=await self.invoices.summary(),
            ordenes_recientes=[OrderResponse.model_validate(o) for o in orders[:recent_limit]],
        )
