import json

import httpx
import pytest

from connect_vida.services.asaas_service import AsaasClient, AsaasError, sanitize_tax_id

CUSTOMER = {"name": "Maria", "email": "maria@example.com", "cellphone": "11999990000", "taxId": "123.456.789-09"}


def asaas_handler(calls, customers=None, payment_status=200, qr_status=200):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append((request.method, request.url.path, request))
        path = request.url.path
        if request.method == "GET" and path.endswith("/customers"):
            return httpx.Response(200, json={"data": customers or []})
        if request.method == "POST" and path.endswith("/customers"):
            return httpx.Response(200, json={"id": "cus_new"})
        if request.method == "POST" and path.endswith("/payments"):
            if payment_status != 200:
                return httpx.Response(payment_status, json={"errors": [{"description": "invalid"}]})
            return httpx.Response(200, json={
                "id": "pay_1",
                "status": "PENDING",
                "dateCreated": "2024-05-01",
                "dueDate": "2024-05-01",
            })
        if request.method == "GET" and path.endswith("/pixQrCode"):
            if qr_status != 200:
                return httpx.Response(qr_status, json={"errors": []})
            return httpx.Response(200, json={"payload": "000201PIX", "encodedImage": "aW1n"})
        return httpx.Response(404)
    return handler


def make_client(handler):
    return AsaasClient(token="tok", base_url="https://asaas.test/v3", transport=httpx.MockTransport(handler))


def test_sanitize_tax_id():
    assert sanitize_tax_id("123.456.789-09") == "12345678909"


async def test_creates_customer_payment_and_qrcode():
    calls = []
    client = make_client(asaas_handler(calls))

    result = await client.create_pix_charge(10.005, CUSTOMER, description="Oferta", external_reference="church-1")

    assert result["error"] is None
    assert result["data"]["id"] == "pay_1"
    assert result["data"]["brCode"] == "000201PIX"
    assert result["data"]["brCodeBase64"] == "aW1n"
    assert [(m, p.rsplit("/", 1)[-1]) for m, p, _ in calls] == [
        ("GET", "customers"),
        ("POST", "customers"),
        ("POST", "payments"),
        ("GET", "pixQrCode"),
    ]

    created_customer = json.loads(calls[1][2].content)
    assert created_customer["cpfCnpj"] == "12345678909"

    payment_body = json.loads(calls[2][2].content)
    assert payment_body["customer"] == "cus_new"
    assert payment_body["billingType"] == "PIX"
    assert payment_body["externalReference"] == "church-1"
    assert calls[2][2].headers["access_token"] == "tok"


async def test_reuses_existing_customer():
    calls = []
    client = make_client(asaas_handler(calls, customers=[{"id": "cus_old"}]))

    await client.create_pix_charge(25, CUSTOMER)

    assert not any(m == "POST" and p.endswith("/customers") for m, p, _ in calls)
    payment_body = json.loads(calls[1][2].content)
    assert payment_body["customer"] == "cus_old"
    assert "externalReference" not in payment_body


async def test_payment_error_is_propagated():
    client = make_client(asaas_handler([], payment_status=400))

    with pytest.raises(AsaasError) as exc:
        await client.create_pix_charge(25, CUSTOMER)

    assert exc.value.status_code == 400
    assert exc.value.to_dict()["error"] == "asaas_payment_error"


async def test_qrcode_error_is_propagated():
    client = make_client(asaas_handler([], qr_status=502))

    with pytest.raises(AsaasError) as exc:
        await client.create_pix_charge(25, CUSTOMER)

    assert exc.value.error == "asaas_qrcode_error"
    assert exc.value.status_code == 502


async def test_connection_failure_becomes_bad_gateway():
    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(AsaasError) as exc:
        await make_client(unreachable).create_pix_charge(25, CUSTOMER)

    assert exc.value.error == "asaas_request_error"
    assert exc.value.status_code == 502
    assert "connection refused" in exc.value.details


async def test_timeout_becomes_bad_gateway():
    def slow(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(AsaasError) as exc:
        await make_client(slow).create_pix_charge(25, CUSTOMER)

    assert exc.value.status_code == 502


async def test_payment_without_id_is_bad_gateway():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/customers"):
            return httpx.Response(200, json={"data": [{"id": "cus_old"}]})
        return httpx.Response(200, json={"status": "PENDING"})

    with pytest.raises(AsaasError) as exc:
        await make_client(handler).create_pix_charge(25, CUSTOMER)

    assert exc.value.error == "asaas_payment_error"
    assert exc.value.status_code == 502

def test_client_without_token_is_not_configured():
    assert AsaasClient(token="").is_configured is False
