"""Shared fixtures: a throwaway SQLite store per test and services wired to it."""

from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio

from apps.invoices.repository import InvoiceRepository
from apps.invoices.service import InvoiceService
from apps.orders.repository import OrderRepository
from apps.orders.service import OrderService
from models.base import create_tables, make_engine, make_session_factory
from settings.config import Settings

# Fixed "today" for every service under test
TODAY = date(2025, 5, 15)


class FakeS3Client:
    """Records put_object calls instead of talking to AWS."""

    class _Meta:
        region_name = "sa-east-1"

    def __init__(self, error: Exception = None):
        self.meta = self._Meta()
        self.calls = []
        self._error = error

    def put_object(self, **kwargs):
        if self._error is not None:
            raise self._error
        self.calls.append(kwargs)
        return {"ETag": '"fake"'}


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        ENABLE_RATE_LIMITER=False,
        AWS_S3_BUCKET="documentos-test",
        AWS_REGION="sa-east-1",
        LOG_LEVEL="WARNING",
    )


@pytest_asyncio.fixture
async def engine(settings):
    engine = make_engine(settings)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def order_service(session_factory):
    return OrderService(OrderRepository(session_factory), clock=lambda: TODAY)


@pytest.fixture
def invoice_service(session_factory):
    return InvoiceService(InvoiceRepository(session_factory), OrderRepository(session_factory), clock=lambda: TODAY)


def order_payload(**overrides):
    payload = {
        "nombre_proveedor": "Acme",
        "monto_total": Decimal("100000"),
        "fecha_orden": date(2025, 5, 10),
    }
    payload.update(overrides)
    return payload


def invoice_payload(orden_compra_id, **overrides):
    payload = {
        "orden_compra_id": orden_compra_id,
        "nombre_vendedor": "Acme",
        "monto_total": Decimal("119000"),
        "fecha_factura": date(2025, 5, 12),
        "fecha_vencimiento": date(2025, 6, 12),
    }
    payload.update(overrides)
    return payload


@pytest_asyncio.fixture
async def sent_order(order_service):
    created = await order_service.create(order_payload())
    assert created.success, created.errors
    sent = await order_service.update(created.record.id, {"estado": "enviada"})
    assert sent.success, sent.errors
    return sent.record
