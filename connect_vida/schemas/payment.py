"""
Connect Vida - Payment Schemas
Valores obrigatórios são conferidos no serviço para responder 400.
"""
from pydantic import BaseModel
from typing import Optional
import datetime


class PaymentRecordCreate(BaseModel):
    date: Optional[datetime.date] = None
    amount: Optional[float] = None
    status: Optional[str] = None
    method: Optional[str] = None
    reference: Optional[str] = None


class PaymentRecordUpdate(BaseModel):
    date: Optional[datetime.date] = None
    amount: Optional[float] = None
    status: Optional[str] = None
    method: Optional[str] = None
    reference: Optional[str] = None


class PixCustomer(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    cellphone: Optional[str] = None
    taxId: Optional[str] = None


class PixChargeRequest(BaseModel):
    """Cobrança PIX via Asaas (valor em reais)"""
    amount: Optional[float] = None
    description: Optional[str] = None
    customer: Optional[PixCustomer] = None
    metadata: Optional[dict] = None
