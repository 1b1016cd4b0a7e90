from decimal import Decimal
from typing import Dict, List

from pydantic import BaseModel

from apps.invoices.schemas import InvoiceSummary
from apps.orders.schemas import OrderResponse


class StatusBucket(BaseModel):
    cantidad: int = 0
    monto: Decimal = Decimal("0")


class DashboardStats(BaseModel):
    ordenes_por_estado: Dict[str, StatusBucket]
    facturas_por_estado: Dict[str, StatusBucket]
    resumen_facturas: InvoiceSummary
    ordenes_recientes: List[OrderResponse]
