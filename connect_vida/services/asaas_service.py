"""
Cliente do gateway Asaas (cobranca PIX)

FLUXO:
1. Busca o cliente pelo email; cria quando nao existir
2. Cria a cobranca PIX com vencimento hoje
3. Obtem o QR Code da cobranca
Sem retentativas e sem chave de idempotencia.
"""
import logging
import re
from datetime import date
from typing import Optional

import httpx

from connect_vida.core.config import settings

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 140


class AsaasError(Exception):
    """Falha em uma etapa da conversa com o gateway"""

    def __init__(self, error: str, status_code: int, details=None):
        super().__init__(error)
        self.error = error
        self.status_code = status_code
        self.details = details

    def to_dict(self) -> dict:
        return {"error": self.error, "details": self.details}


def sanitize_tax_id(value: str) -> str:
    """Mantem apenas os digitos do CPF/CNPJ"""
    return re.sub(r"\D+", "", value or "")


def _json_or_text(response: httpx.Response):
    try:
        return response.json()
    except ValueError:
        return response.text


class AsaasClient:
    """Cliente HTTP do Asaas. transport permite injetar um MockTransport nos testes."""

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token if token is not None else settings.ASAAS_API_TOKEN
        self.base_url = (base_url or settings.ASAAS_API_URL).rstrip("/")
        self.timeout = timeout or settings.ASAAS_TIMEOUT_SECONDS
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.token)

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "access_token": self.token,
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers(),
            timeout=self.timeout,
            transport=self.transport,
        )

    async def _resolve_customer(self, client: httpx.AsyncClient, customer: dict) -> str:
        search = await client.get("/customers", params={"email": customer["email"]})
        if search.is_success:
            body = _json_or_text(search)
            found = body.get("data") if isinstance(body, dict) else None
            if found:
                return found[0]["id"]

        created = await client.post("/customers", json={
            "name": customer["name"],
            "email": customer["email"],
            "cpfCnpj": sanitize_tax_id(customer["taxId"]),
            "mobilePhone": customer["cellphone"],
        })
        body = _json_or_text(created)
        if not created.is_success:
            logger.error(f"Asaas recusou criação do cliente: {created.status_code}")
            raise AsaasError("asaas_customer_error", created.status_code, body)

        customer_id = body.get("id") if isinstance(body, dict) else None
        if not customer_id:
            raise AsaasError("Failed to resolve ASAAS customer ID", 500)
        return customer_id

    async def create_pix_charge(
        self,
        amount: float,
        customer: dict,
        description: Optional[str] = None,
        external_reference: Optional[str] = None,
    ) -> dict:
        """
        Cria a cobranca PIX e retorna o formato
        {"data": {id, amount, status, brCode, brCodeBase64, createdAt, updatedAt, expiresAt}, "error": None}
        """
        value = round(float(amount) * 100) / 100
        description = (description or "")[:MAX_DESCRIPTION_LENGTH]

        try:
            async with self._client() as client:
                payment, qr = await self._charge(client, customer, value, description, external_reference)
        except httpx.HTTPError as e:
            logger.error(f"Falha de comunicação com o Asaas: {e}")
            raise AsaasError("asaas_request_error", 502, str(e))

        payment_id = payment["id"]
        logger.info(f"Cobrança PIX {payment_id} criada (R$ {value:.2f})")

        return {
            "data": {
                "id": payment_id,
                "amount": value,
                "status": payment.get("status"),
                "brCode": qr.get("payload"),
                "brCodeBase64": qr.get("encodedImage"),
                "createdAt": payment.get("dateCreated"),
                "updatedAt": payment.get("dateUpdated"),
                "expiresAt": payment.get("dueDate"),
            },
            "error": None,
        }

    async def _charge(
        self,
        client: httpx.AsyncClient,
        customer: dict,
        value: float,
        description: str,
        external_reference: Optional[str],
    ):
        """Cria a cobrança e busca o QR Code; devolve (payment, qr)"""
        customer_id = await self._resolve_customer(client, customer)

        payment_body = {
            "customer": customer_id,
            "billingType": "PIX",
            "value": value,
            "description": description,
            "dueDate": date.today().isoformat(),
        }
        if external_reference:
            payment_body["externalReference"] = external_reference

        payment_res = await client.post("/payments", json=payment_body)
        payment = _json_or_text(payment_res)
        if not payment_res.is_success:
            logger.error(f"Asaas recusou a cobrança: {payment_res.status_code}")
            raise AsaasError("asaas_payment_error", payment_res.status_code, payment)
        if not isinstance(payment, dict) or not payment.get("id"):
            logger.error("Asaas respondeu a cobrança sem id")
            raise AsaasError("asaas_payment_error", 502, payment)

        payment_id = payment["id"]

        qr_res = await client.get(f"/payments/{payment_id}/pixQrCode")
        qr = _json_or_text(qr_res)
        if not qr_res.is_success:
            logger.error(f"Asaas falhou ao gerar QR Code de {payment_id}: {qr_res.status_code}")
            raise AsaasError("asaas_qrcode_error", qr_res.status_code, qr)
        if not isinstance(qr, dict):
            raise AsaasError("asaas_qrcode_error", 502, qr)

        return payment, qr
