"""HTTP surface: envelopes, status codes and document upload wiring."""

import re
from datetime import date, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from main import create_app

from conftest import FakeS3Client


@pytest.fixture
def fake_s3():
    return FakeS3Client()


@pytest.fixture
def client(settings, fake_s3):
    app = create_app(settings, s3_client=fake_s3)
    with TestClient(app) as c:
        yield c


def _create_order(client, **overrides):
    payload = {"nombre_proveedor": "Acme", "monto_total": 100000}
    payload.update(overrides)
    resp = client.post("/api/ordenes", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


def _create_sent_order(client):
    order = _create_order(client)
    resp = client.patch(f"/api/ordenes/{order['id']}", json={"estado": "enviada"})
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


def _create_invoice(client, order_id, **overrides):
    payload = {"orden_compra_id": order_id, "nombre_vendedor": "Acme", "monto_total": 119000}
    payload.update(overrides)
    return client.post("/api/facturas", json=payload)


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers["X-Content-Type-Options"] == "nosniff"


class TestOrdersApi:
    def test_create_and_fetch(self, client):
        order = _create_order(client)

        assert re.fullmatch(r"OC-\d{6}-001", order["numero_orden"])
        assert order["estado"] == "pendiente"

        resp = client.get(f"/api/ordenes/{order['id']}")
        assert resp.status_code == 200
        assert resp.json()["data"]["numero_orden"] == order["numero_orden"]

    def test_invalid_payload_is_422(self, client):
        resp = client.post("/api/ordenes", json={"nombre_proveedor": "Acme", "monto_total": 0})

        assert resp.status_code == 422

    def test_illegal_transition_is_409(self, client):
        order = _create_order(client)
        client.patch(f"/api/ordenes/{order['id']}", json={"estado": "cancelada"})

        resp = client.patch(f"/api/ordenes/{order['id']}", json={"estado": "enviada"})

        assert resp.status_code == 409
        assert resp.json()["detail"]["message"] == "No se puede cambiar el estado de 'cancelada' a 'enviada'"

    def test_unknown_order_is_404(self, client):
        assert client.get("/api/ordenes/no-existe").status_code == 404
        assert client.delete("/api/ordenes/no-existe").status_code == 404

    def test_list_with_filters(self, client):
        _create_order(client, nombre_proveedor="Acme")
        _create_order(client, nombre_proveedor="Globex")

        resp = client.get("/api/ordenes", params={"proveedor": "glob"})

        body = resp.json()
        assert resp.status_code == 200
        assert [o["nombre_proveedor"] for o in body["data"]] == ["Globex"]
        assert body["meta"]["total"] == 1

    def test_delete_only_pending(self, client):
        order = _create_sent_order(client)

        assert client.delete(f"/api/ordenes/{order['id']}").status_code == 409

    def test_upload_document(self, client, fake_s3):
        order = _create_order(client)

        resp = client.post(
            f"/api/ordenes/{order['id']}/documento",
            files={"file": ("orden.pdf", b"%PDF-1.4 contenido", "application/pdf")},
        )

        assert resp.status_code == 200, resp.text
        url = resp.json()["data"]["url_documento"]
        assert url.startswith("https://documentos-test.s3.sa-east-1.amazonaws.com/ordenes_compra/")
        assert fake_s3.calls[0]["Body"] == b"%PDF-1.4 contenido"

    def test_upload_rejects_text_files(self, client):
        order = _create_order(client)

        resp = client.post(
            f"/api/ordenes/{order['id']}/documento",
            files={"file": ("notas.txt", b"hola", "text/plain")},
        )

        assert resp.status_code == 400


class TestInvoicesApi:
    def test_invoice_requires_sent_order(self, client):
        order = _create_order(client)

        resp = _create_invoice(client, order["id"])

        assert resp.status_code == 409
        assert resp.json()["detail"]["message"] == "Solo se pueden crear facturas para órdenes enviadas"

    def test_pay_stamps_today(self, client):
        order = _create_sent_order(client)
        invoice = _create_invoice(client, order["id"]).json()["data"]

        resp = client.post(f"/api/facturas/{invoice['id']}/pagar")

        assert resp.status_code == 200, resp.text
        data = resp.json()["data"]
        assert data["estado"] == "pagada"
        assert data["fecha_pago"] == date.today().isoformat()
        assert client.delete(f"/api/facturas/{invoice['id']}").status_code == 409

    def test_overdue_and_summary(self, client):
        order = _create_sent_order(client)
        today = date.today()
        _create_invoice(
            client,
            order["id"],
            fecha_factura=(today - timedelta(days=40)).isoformat(),
            fecha_vencimiento=(today - timedelta(days=10)).isoformat(),
        )
        _create_invoice(client, order["id"], fecha_vencimiento=(today + timedelta(days=30)).isoformat())

        overdue = client.get("/api/facturas/vencidas").json()["data"]
        summary = client.get("/api/facturas/resumen").json()["data"]

        assert len(overdue) == 1
        assert summary["total_facturas"] == 2
        assert summary["facturas_vencidas"] == 1

    def test_tax_breakdown(self, client):
        resp = client.get("/api/facturas/iva", params={"monto_neto": "100000"})

        data = resp.json()["data"]
        assert data["iva"] == "19000"
        assert data["monto_total"] == "119000"

    def test_tax_breakdown_from_total(self, client):
        resp = client.get("/api/facturas/iva", params={"monto_total": "119000"})

        assert resp.json()["data"]["monto_neto"] == "100000"
        assert client.get("/api/facturas/iva").status_code == 400

    def test_extract_fields(self, client):
        texto = "FACTURA ELECTRONICA N° 4521\nFecha: 12/05/2025\nRazón Social: Acme SpA\nTOTAL: $119.000"

        resp = client.post("/api/facturas/extraer", json={"texto": texto})

        data = resp.json()["data"]
        assert data["numero"] == "4521"
        assert data["fecha"] == "2025-05-12"
        assert data["nombre"] == "Acme SpA"

    def test_invoices_of_an_order(self, client):
        order = _create_sent_order(client)
        _create_invoice(client, order["id"])

        resp = client.get(f"/api/ordenes/{order['id']}/facturas")

        assert resp.status_code == 200
        assert len(resp.json()["data"]) == 1


def test_dashboard(client):
    order = _create_sent_order(client)
    _create_order(client)
    _create_invoice(client, order["id"])

    data = client.get("/api/dashboard").json()["data"]

    assert data["ordenes_por_estado"]["enviada"]["cantidad"] == 1
    assert data["ordenes_por_estado"]["pendiente"]["cantidad"] == 1
    assert data["ordenes_por_estado"]["cancelada"]["cantidad"] == 0
    assert data["facturas_por_estado"]["pendiente"]["cantidad"] == 1
    assert len(data["ordenes_recientes"]) == 2


def test_base_currency_comes_from_app_settings(settings, fake_s3):
    usd_settings = settings.model_copy(update={"MONEDA_BASE": "USD"})
    with TestClient(create_app(usd_settings, s3_client=fake_s3)) as usd_client:
        order = _create_order(usd_client)
        explicit = _create_order(usd_client, moneda="CLP")

    assert order["moneda"] == "USD"
    assert explicit["moneda"] == "CLP"


def test_tax_rate_comes_from_app_settings(settings, fake_s3):
    custom = settings.model_copy(update={"IVA_TASA": Decimal("0.10")})
    with TestClient(create_app(custom, s3_client=fake_s3)) as custom_client:
        data = custom_client.get("/api/facturas/iva", params={"monto_neto": "200"}).json()["data"]

    assert data["iva"] == "20"
    assert data["monto_total"] == "220"
