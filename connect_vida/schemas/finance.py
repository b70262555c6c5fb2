"""
Connect Vida - Finance Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import date


class TransactionCreate(BaseModel):
    type: Literal["entrada", "saida"]
    category: str = Field(..., min_length=1, max_length=100)
    subcategory: Optional[str] = Field(None, max_length=100)
    cost_center: Optional[str] = Field(None, max_length=100)
    amount: float = Field(..., gt=0)
    transaction_date: date
    description: Optional[str] = None
    payment_method: Optional[str] = Field(None, max_length=30)
    responsible: Optional[str] = Field(None, max_length=255)
    document_number: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None
    member_id: Optional[str] = None


class TransactionUpdate(BaseModel):
    type: Optional[Literal["entrada", "saida"]] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    subcategory: Optional[str] = Field(None, max_length=100)
    cost_center: Optional[str] = Field(None, max_length=100)
    amount: Optional[float] = Field(None, gt=0)
    transaction_date: Optional[date] = None
    description: Optional[str] = None
    payment_method: Optional[str] = Field(None, max_length=30)
    responsible: Optional[str] = Field(None, max_length=255)
    document_number: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class TransactionStatusUpdate(BaseModel):
    status: Literal["confirmado", "cancelado"]


class BudgetCreate(BaseModel):
    category: str = Field(..., min_length=1, max_length=100)
    subcategory: Optional[str] = Field(None, max_length=100)
    month: str = Field(..., pattern=r"^\d{4}-(0[1-9]|1[0-2])$")
    budgeted_amount: float = Field(..., gt=0)
    spent_amount: float = Field(0, ge=0)
    description: Optional[str] = None
    responsible: Optional[str] = Field(None, max_length=255)


class BudgetUpdate(BaseModel):
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    subcategory: Optional[str] = Field(None, max_length=100)
    month: Optional[str] = Field(None, pattern=r"^\d{4}-(0[1-9]|1[0-2])$")
    budgeted_amount: Optional[float] = Field(None, gt=0)
    spent_amount: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    responsible: Optional[str] = Field(None, max_length=255)
    status: Optional[Literal["ativo", "excedido", "finalizado"]] = None


class ContributionCreate(BaseModel):
    amount: float = Field(..., gt=0)
    category: Literal["Dízimos", "Ofertas", "Doações Especiais", "Missões", "Obras"]
    payment_method: Literal["PIX", "Cartão", "Dinheiro", "Transferência"]
    transaction_date: Optional[date] = None
    description: Optional[str] = None
