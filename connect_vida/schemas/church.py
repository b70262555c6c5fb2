"""
Connect Vida - Church Schemas
"""
from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import date


class ChurchRegisterRequest(BaseModel):
    """Cadastro público de igreja + primeiro administrador"""
    name: str = Field(..., min_length=2, max_length=255)
    cnpj: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    contact_email: EmailStr
    contact_phone: Optional[str] = Field(None, max_length=20)

    admin_full_name: str = Field(..., min_length=2, max_length=255)
    admin_email: EmailStr
    admin_phone: Optional[str] = Field(None, max_length=20)
    admin_birth_date: Optional[date] = None
    admin_address: Optional[str] = None


class ChurchUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    cnpj: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=20)


class ChildChurchCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    cnpj: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=20)


class MasterChurchCreate(ChildChurchCreate):
    """Criação direta pelo master admin"""
    plan_id: Optional[str] = None
    status: str = "trial"
    monthly_fee: Optional[float] = Field(None, ge=0)
    parent_church_id: Optional[str] = None


class SubscriptionUpdate(BaseModel):
    plan_id: Optional[str] = None
    member_limit: Optional[int] = Field(None, ge=0)
    status: Optional[str] = None
    monthly_fee: Optional[float] = Field(None, ge=0)
    next_payment_date: Optional[date] = None


class PlanCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = None
    monthly_price: float = Field(..., ge=0)
    member_limit: Optional[int] = Field(None, ge=1)
    quiz_limit_per_stage: Optional[int] = Field(None, ge=0)
    storage_limit_mb: Optional[int] = Field(None, ge=0)
    sort_order: int = 0


class PlanUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = None
    monthly_price: Optional[float] = Field(None, ge=0)
    member_limit: Optional[int] = Field(None, ge=1)
    quiz_limit_per_stage: Optional[int] = Field(None, ge=0)
    storage_limit_mb: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None
