from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from apps.dependencies import get_document_storage, get_invoice_service, get_order_service
from apps.invoices.schemas import InvoiceResponse
from apps.invoices.service import InvoiceService
from apps.orders.schemas import OrderCreate, OrderFilters, OrderResponse, OrderUpdate
from apps.orders.service import NOT_FOUND, OrderService
from apps.storage.service import DocumentStorage
from common.exceptions import http_from_result, http_not_found
from common.pagination import PaginationParams
from common.responses import paginated_response, success_response
from constants.statuses import OrderStatus


router = APIRouter(prefix="/api/ordenes", tags=["Purchase Orders"])


def _dump(order) -> dict:
    return OrderResponse.model_validate(order).model_dump(mode="json")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(payload: OrderCreate, service: OrderService = Depends(get_order_service)):
    result = await service.create(payload)
    if not result.success:
        raise http_from_result(result)
    return success_response(_dump(result.record), "Orden de compra creada")


@router.get("")
async def list_orders(
    estado: Optional[OrderStatus] = Query(default=None),
    proveedor: Optional[str] = Query(default=None, description="Partial supplier name"),
    fecha_desde: Optional[date] = Query(default=None),
    fecha_hasta: Optional[date] = Query(default=None),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    service: OrderService = Depends(get_order_service),
):
    filters = OrderFilters(estado=estado, proveedor=proveedor or None, fecha_desde=fecha_desde, fecha_hasta=fecha_hasta)
    items, pagination = await service.search(filters, PaginationParams(page=page, size=size))
    return paginated_response([_dump(o) for o in items], **pagination)


@router.get("/{order_id}")
async def get_order(order_id: str, service: OrderService = Depends(get_order_service)):
    order = await service.get(order_id)
    if order is None:
        raise http_not_found(NOT_FOUND)
    return success_response(_dump(order))


@router.get("/{order_id}/facturas")
async def list_order_invoices(
    order_id: str,
    service: OrderService = Depends(get_order_service),
    invoices: InvoiceService = Depends(get_invoice_service),
):
    if await service.get(order_id) is None:
        raise http_not_found(NOT_FOUND)
    items = await invoices.list_by_order(order_id)
    return success_response([InvoiceResponse.model_validate(i).model_dump(mode="json") for i in items])


@router.patch("/{order_id}")
async def update_order(order_id: str, payload: OrderUpdate, service: OrderService = Depends(get_order_service)):
    result = await service.update(order_id, payload)
    if not result.success:
        raise http_from_result(result)
    return success_response(_dump(result.record), "Orden de compra actualizada")


@router.delete("/{order_id}")
async def delete_order(order_id: str, service: OrderService = Depends(get_order_service)):
    result = await service.delete(order_id)
    if not result.success:
        raise http_from_result(result)
    return success_response(None, "Orden de compra eliminada")


# Upload the supporting PDF/image and link it to the order
@router.post("/{order_id}/documento")
async def upload_order_document(
    order_id: str,
    file: UploadFile = File(...),
    service: OrderService = Depends(get_order_service),
    storage: DocumentStorage = Depends(get_document_storage),
):
    order = await service.get(order_id)
    if order is None:
        raise http_not_found(NOT_FOUND)
    content = await file.read()
    url = await storage.upload("ordenes_compra", order.id, file.filename, content, file.content_type)
    result = await service.attach_document(order_id, url)
    if not result.success:
        raise http_from_result(result)
    return success_response(_dump(result.record), "Documento adjuntado")
