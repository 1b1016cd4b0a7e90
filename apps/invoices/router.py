from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Body, Depends, File, Query, UploadFile, status

from apps.dependencies import get_app_settings, get_document_storage, get_field_extractor, get_invoice_service
from apps.extraction.extractor import FieldExtractor
from apps.extraction.schemas import ExtractRequest
from apps.invoices.schemas import (
    InvoiceCreate,
    InvoiceFilters,
    InvoiceResponse,
    InvoiceUpdate,
    MarkPaidRequest,
    TaxBreakdown,
)
from apps.invoices.service import NOT_FOUND, InvoiceService
from apps.invoices.tax import calcular_iva, monto_neto_desde_total
from apps.storage.service import DocumentStorage
from common.exceptions import http_bad_request, http_from_result, http_not_found
from common.pagination import PaginationParams
from common.responses import paginated_response, success_response
from constants.statuses import InvoiceStatus
from settings.config import Settings


router = APIRouter(prefix="/api/facturas", tags=["Invoices"])


def _dump(invoice) -> dict:
    return InvoiceResponse.model_validate(invoice).model_dump(mode="json")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_invoice(payload: InvoiceCreate, service: InvoiceService = Depends(get_invoice_service)):
    result = await service.create(payload)
    if not result.success:
        raise http_from_result(result)
    return success_response(_dump(result.record), "Factura creada")


@router.get("")
async def list_invoices(
    estado: Optional[InvoiceStatus] = Query(default=None),
    vendedor: Optional[str] = Query(default=None, description="Partial vendor name"),
    fecha_desde: Optional[date] = Query(default=None),
    fecha_hasta: Optional[date] = Query(default=None),
    solo_vencidas: bool = Query(default=False),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    service: InvoiceService = Depends(get_invoice_service),
):
    filters = InvoiceFilters(
        estado=estado,
        vendedor=vendedor or None,
        fecha_desde=fecha_desde,
        fecha_hasta=fecha_hasta,
        solo_vencidas=solo_vencidas,
    )
    items, pagination = await service.search(filters, PaginationParams(page=page, size=size))
    return paginated_response([_dump(i) for i in items], **pagination)


# Static paths are declared before "/{invoice_id}" so they are not captured by it
@router.get("/vencidas")
async def list_overdue_invoices(service: InvoiceService = Depends(get_invoice_service)):
    return success_response([_dump(i) for i in await service.list_overdue()])


@router.get("/resumen")
async def invoice_summary(service: InvoiceService = Depends(get_invoice_service)):
    summary = await service.summary()
    return success_response(summary.model_dump(mode="json"))


@router.get("/iva")
async def tax_breakdown(
    monto_neto: Optional[Decimal] = Query(default=None, ge=0),
    monto_total: Optional[Decimal] = Query(default=None, ge=0, description="Tax-inclusive amount"),
    tasa: Optional[Decimal] = Query(default=None, ge=0, le=1),
    settings: Settings = Depends(get_app_settings),
):
    rate = tasa if tasa is not None else settings.IVA_TASA
    if monto_neto is None:
        if monto_total is None:
            raise http_bad_request("Debe indicar monto_neto o monto_total")
        monto_neto = monto_neto_desde_total(monto_total, rate)
    iva, total = calcular_iva(monto_neto, rate)
    breakdown = TaxBreakdown(monto_neto=monto_neto, iva=iva, monto_total=total, tasa=rate)
    return success_response(breakdown.model_dump(mode="json"))


@router.post("/extraer")
async def extract_fields(payload: ExtractRequest, extractor: FieldExtractor = Depends(get_field_extractor)):
    """
    Guess invoice fields from the plain text of a scanned document.
    The result only pre-fills the form; nothing is stored.
    """
    fields = extractor.extract(payload.texto)
    if not fields.model_dump(exclude_none=True):
        raise http_bad_request("No se pudieron extraer datos del documento")
    return success_response(fields.model_dump(mode="json"))


@router.get("/{invoice_id}")
async def get_invoice(invoice_id: str, service: InvoiceService = Depends(get_invoice_service)):
    invoice = await service.get(invoice_id)
    if invoice is None:
        raise http_not_found(NOT_FOUND)
    return success_response(_dump(invoice))


@router.patch("/{invoice_id}")
async def update_invoice(invoice_id: str, payload: InvoiceUpdate, service: InvoiceService = Depends(get_invoice_service)):
    result = await service.update(invoice_id, payload)
    if not result.success:
        raise http_from_result(result)
    return success_response(_dump(result.record), "Factura actualizada")


@router.post("/{invoice_id}/pagar")
async def mark_invoice_paid(
    invoice_id: str,
    payload: Optional[MarkPaidRequest] = Body(default=None),
    service: InvoiceService = Depends(get_invoice_service),
):
    result = await service.mark_paid(invoice_id, payload.fecha_pago if payload else None)
    if not result.success:
        raise http_from_result(result)
    return success_response(_dump(result.record), "Factura marcada como pagada")


@router.delete("/{invoice_id}")
async def delete_invoice(invoice_id: str, service: InvoiceService = Depends(get_invoice_service)):
    result = await service.delete(invoice_id)
    if not result.success:
        raise http_from_result(result)
    return success_response(None, "Factura eliminada")


@router.post("/{invoice_id}/documento")
async def upload_invoice_document(
    invoice_id: str,
    file: UploadFile = File(...),
    service: InvoiceService = Depends(get_invoice_service),
    storage: DocumentStorage = Depends(get_document_storage),
):
    invoice = await service.get(invoice_id)
    if invoice is None:
        raise http_not_found(NOT_FOUND)
    content = await file.read()
    url = await storage.upload("facturas", invoice.id, file.filename, content, file.content_type)
    result = await service.attach_document(invoice_id, url)
    if not result.success:
        raise http_from_result(result)
    return success_response(_dump(result.record), "Documento adjuntado")
