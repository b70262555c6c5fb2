import json

import httpx
import pytest

from connect_vida.main import app
from connect_vida.api.payments import get_asaas_client
from connect_vida.core.config import settings
from connect_vida.models import Church
from connect_vida.services.asaas_service import AsaasClient

from conftest import auth_headers

PIX_BODY = {
    "amount": 99.9,
    "description": "Mensalidade",
    "customer": {"name": "Igreja", "email": "fin@igreja.com", "cellphone": "11999990000", "taxId": "12345678000199"},
}


@pytest.fixture
def asaas_requests():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        path = request.url.path
        if path.endswith("/customers"):
            return httpx.Response(200, json={"data": [{"id": "cus_1"}]})
        if path.endswith("/payments"):
            return httpx.Response(200, json={"id": "pay_9", "status": "PENDING", "dueDate": "2024-05-01"})
        return httpx.Response(200, json={"payload": "PIXCODE", "encodedImage": "IMG"})

    app.dependency_overrides[get_asaas_client] = lambda: AsaasClient(
        token="tok", base_url="https://asaas.test/v3", transport=httpx.MockTransport(handler)
    )
    yield calls
    app.dependency_overrides.pop(get_asaas_client, None)


async def test_pix_charge_uses_church_as_external_reference(client, admin, asaas_requests):
    response = await client.post("/api/payments/pix", json=PIX_BODY, headers=auth_headers(admin))

    assert response.status_code == 200
    body = response.json()
    assert body["error"] is None
    assert body["data"]["brCode"] == "PIXCODE"
    assert response.headers["Cache-Control"].startswith("no-store")
    assert json.loads(asaas_requests[1].content)["externalReference"] == admin.church_id


async def test_pix_charge_requires_customer_fields(client, admin, asaas_requests):
    body = {**PIX_BODY, "customer": {"name": "Igreja", "email": "fin@igreja.com", "cellphone": "", "taxId": ""}}
    response = await client.post("/api/payments/pix", json=body, headers=auth_headers(admin))

    assert response.status_code == 400
    assert asaas_requests == []


async def test_pix_charge_without_token_configured(client, admin):
    app.dependency_overrides[get_asaas_client] = lambda: AsaasClient(token="")
    try:
        response = await client.post("/api/payments/pix", json=PIX_BODY, headers=auth_headers(admin))
    finally:
        app.dependency_overrides.pop(get_asaas_client, None)

    assert response.status_code == 500
    assert response.json() == {"error": "Missing ASAAS_API_TOKEN secret"}


async def test_pix_charge_requires_authentication(client):
    response = await client.post("/api/payments/pix", json=PIX_BODY)
    assert response.status_code == 401


async def test_webhook_marks_church_paid_once(client, church, session_factory, monkeypatch):
    monkeypatch.setattr(settings, "ASAAS_WEBHOOK_TOKEN", None)
    payload = {
        "event": "PAYMENT_RECEIVED",
        "payment": {
            "id": "pay_77",
            "value": 149.9,
            "billingType": "PIX",
            "paymentDate": "2024-05-10",
            "externalReference": church.id,
        },
    }

    first = await client.post("/api/payments/asaas/webhook", json=payload)
    second = await client.post("/api/payments/asaas/webhook", json=payload)

    assert first.status_code == 200
    assert first.json()["status"] == "processed"
    assert first.json()["next_payment_date"] == "2024-06-10"
    assert second.json()["status"] == "duplicate"

    async with session_factory() as session:
        stored = await session.get(Church, church.id)
        assert stored.status == "active"
        assert stored.last_payment_status == "Pago"
        assert len(stored.payment_history) == 1


async def test_webhook_ignores_other_events(client, church):
    response = await client.post("/api/payments/asaas/webhook", json={"event": "PAYMENT_CREATED", "payment": {"id": "x"}})
    assert response.json() == {"status": "ignored", "event": "PAYMENT_CREATED"}


async def test_webhook_unknown_church_is_400(client):
    payload = {"event": "PAYMENT_CONFIRMED", "payment": {"id": "p", "value": 10, "externalReference": "nao-existe"}}
    response = await client.post("/api/payments/asaas/webhook", json=payload)
    assert response.status_code == 400
    assert "error" in response.json()


async def test_webhook_rejects_wrong_token(client, church, monkeypatch):
    monkeypatch.setattr(settings, "ASAAS_WEBHOOK_TOKEN", "segredo")
    payload = {"event": "PAYMENT_CONFIRMED", "payment": {"id": "p", "value": 10, "externalReference": church.id}}

    response = await client.post("/api/payments/asaas/webhook", json=payload, headers={"asaas-access-token": "errado"})
    assert response.status_code == 401

    response = await client.post("/api/payments/asaas/webhook", json=payload, headers={"asaas-access-token": "segredo"})
    assert response.json()["status"] == "processed"


async def test_list_plans_sorted_by_price(client, create_plan):
    await create_plan(name="Grande", monthly_price=249.9, member_limit=None)
    await create_plan(name="Pequeno", monthly_price=49.9, member_limit=100)
    await create_plan(name="Antigo", monthly_price=10, is_active=False)

    response = await client.get("/api/payments/plans")
    assert [p["name"] for p in response.json()] == ["Pequeno", "Grande"]


async def test_pix_charge_gateway_unreachable_is_502(client, admin):
    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    app.dependency_overrides[get_asaas_client] = lambda: AsaasClient(
        token="tok", base_url="https://asaas.test/v3", transport=httpx.MockTransport(unreachable)
    )
    try:
        response = await client.post("/api/payments/pix", json=PIX_BODY, headers=auth_headers(admin))
    finally:
        app.dependency_overrides.pop(get_asaas_client, None)

    assert response.status_code == 502
    assert response.json()["error"] == "asaas_request_error"
