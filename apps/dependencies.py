"""
FastAPI dependencies wiring services to the store handle built at startup.
"""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import async_sessionmaker

from apps.dashboard.service import DashboardService
from apps.extraction.extractor import FieldExtractor
from apps.invoices.repository import InvoiceRepository
from apps.invoices.service import InvoiceService
from apps.orders.repository import OrderRepository
from apps.orders.service import OrderService
from apps.storage.service import DocumentStorage
from models.base import get_session_factory
from settings.config import Settings


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_order_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    settings: Settings = Depends(get_app_settings),
) -> OrderService:
    return OrderService(OrderRepository(session_factory), currency=settings.MONEDA_BASE)


def get_invoice_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    settings: Settings = Depends(get_app_settings),
) -> InvoiceService:
    return InvoiceService(
        InvoiceRepository(session_factory), OrderRepository(session_factory), currency=settings.MONEDA_BASE
    )


def get_dashboard_service(
    orders: OrderService = Depends(get_order_service),
    invoices: InvoiceService = Depends(get_invoice_service),
) -> DashboardService:
    return DashboardService(orders, invoices)


def get_document_storage(request: Request) -> DocumentStorage:
    return request.app.state.document_storage


def get_field_extractor(request: Request) -> FieldExtractor:
    return request.app.state.field_extractor
