"""
Connect Vida - Financial Models
Transações financeiras (dízimos, ofertas, despesas) e orçamentos
"""
import uuid
from enum import Enum
from sqlalchemy import Column, String, Boolean, DateTime, Date, Text, Float, ForeignKey, Index

from connect_vida.core.clock import utcnow
from connect_vida.database import Base


class TransactionType(str, Enum):
    """Direção da transação"""
    INFLOW = "entrada"
    OUTFLOW = "saida"


class TransactionStatus(str, Enum):
    """Status da transação (pendente -> confirmado | cancelado)"""
    PENDING = "pendente"
    CONFIRMED = "confirmado"
    CANCELLED = "cancelado"


class BudgetStatus(str, Enum):
    ACTIVE = "ativo"
    EXCEEDED = "excedido"
    FINISHED = "finalizado"


# Categorias de contribuição disponíveis para os membros
CONTRIBUTION_CATEGORIES = ("Dízimos", "Ofertas", "Doações Especiais", "Missões", "Obras")
CONTRIBUTION_METHODS = ("PIX", "Cartão", "Dinheiro", "Transferência")


class FinancialTransaction(Base):
    """Modelo de Transação Financeira"""
    __tablename__ = "transacoes_financeiras"
    __table_args__ = (
        Index('ix_transacoes_church_date', 'church_id', 'transaction_date'),
        Index('ix_transacoes_member', 'member_id'),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    church_id = Column(String(36), ForeignKey("igrejas.id", ondelete="CASCADE"), nullable=False)

    # Classificação
    type = Column(String(10), nullable=False)
    category = Column(String(100), nullable=False)
    subcategory = Column(String(100))
    cost_center = Column(String(100))

    # Valores
    amount = Column(Float, nullable=False)
    transaction_date = Column(Date, nullable=False)
    description = Column(Text)
    payment_method = Column(String(30))
    responsible = Column(String(255))
    document_number = Column(String(50))
    notes = Column(Text)

    # Membro contribuinte (para entradas)
    member_id = Column(String(36), ForeignKey("membros.id", ondelete="SET NULL"), nullable=True)
    member_name = Column(String(255))

    # Aprovação
    status = Column(String(20), default=TransactionStatus.PENDING.value, nullable=False, index=True)
    approved_by = Column(String(255))
    approved_at = Column(Date)
    receipt_issued = Column(Boolean, default=False)

    # Timestamps
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    @property
    def is_inflow(self) -> bool:
        return self.type == TransactionType.INFLOW.value

    def to_dict(self):
        return {
            "id": self.id,
            "church_id": self.church_id,
            "type": self.type,
            "category": self.category,
            "subcategory": self.subcategory,
            "cost_center": self.cost_center,
            "amount": self.amount,
            "transaction_date": self.transaction_date.isoformat() if self.transaction_date else None,
            "description": self.description,
            "payment_method": self.payment_method,
            "responsible": self.responsible,
            "document_number": self.document_number,
            "notes": self.notes,
            "member_id": self.member_id,
            "member_name": self.member_name,
            "status": self.status,
            "approved_by": self.approved_by,
            "approved_at": self.approved_at.isoformat() if self.approved_at else None,
            "receipt_issued": bool(self.receipt_issued),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Budget(Base):
    """Modelo de Orçamento mensal por categoria"""
    __tablename__ = "orcamentos"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    church_id = Column(String(36), ForeignKey("igrejas.id", ondelete="CASCADE"), nullable=False, index=True)

    category = Column(String(100), nullable=False)
    subcategory = Column(String(100))
    month = Column(String(7), nullable=False)  # YYYY-MM
    budgeted_amount = Column(Float, nullable=False)
    spent_amount = Column(Float, default=0)
    description = Column(Text)
    responsible = Column(String(255))
    status = Column(String(20), default=BudgetStatus.ACTIVE.value)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    @property
    def available_amount(self) -> float:
        return round((self.budgeted_amount or 0) - (self.spent_amount or 0), 2)

    def to_dict(self):
        return {
            "id": self.id,
            "church_id": self.church_id,
            "category": self.category,
            "subcategory": self.subcategory,
            "month": self.month,
            "budgeted_amount": self.budgeted_amount,
            "spent_amount": self.spent_amount or 0,
            "available_amount": self.available_amount,
            "description": self.description,
            "responsible": self.responsible,
            "status": self.status,
        }
