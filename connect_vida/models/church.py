"""
Connect Vida - Church Model
Representa uma igreja (tenant) no SaaS multi-tenant
"""
import uuid
from datetime import date
from enum import Enum
from sqlalchemy import Column, String, DateTime, Date, Text, Integer, Float, ForeignKey, JSON, Index

from connect_vida.core.clock import utcnow
from connect_vida.database import Base


class ChurchStatus(str, Enum):
    """Status da igreja no SaaS"""
    ACTIVE = "active"       # Assinatura em dia
    INACTIVE = "inactive"   # Desativada pelo master admin
    PENDING = "pending"     # Aguardando ativação
    TRIAL = "trial"         # Período de teste


class PaymentRecordStatus(str, Enum):
    """Status de um registro do histórico de pagamentos"""
    PAID = "Pago"
    PENDING = "Pendente"
    OVERDUE = "Atrasado"
    CANCELLED = "Cancelado"


class Church(Base):
    """
    Modelo de Igreja - uma partição isolada de dados de um cliente.
    O histórico de pagamentos da assinatura fica embutido em JSON.
    """
    __tablename__ = "igrejas"
    __table_args__ = (
        Index('ix_igrejas_status', 'status'),
        Index('ix_igrejas_parent', 'parent_church_id'),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Dados da igreja
    name = Column(String(255), nullable=False, index=True)
    cnpj = Column(String(20))
    address = Column(Text)
    contact_email = Column(String(255))
    contact_phone = Column(String(20))

    # Igreja mãe (conteúdo compartilhado com as filhas)
    parent_church_id = Column(String(36), ForeignKey("igrejas.id", ondelete="SET NULL"), nullable=True)

    # Assinatura
    plan_id = Column(String(36), ForeignKey("planos_assinatura.id"), nullable=True)
    member_limit = Column(Integer)  # None = ilimitado
    current_members = Column(Integer, default=0)
    monthly_fee = Column(Float, default=0)
    status = Column(String(20), default=ChurchStatus.TRIAL.value)

    # Cobrança
    payment_history = Column(JSON, default=list)
    last_payment_status = Column(String(20), default="N/A")
    next_payment_date = Column(Date)
    external_subscription_id = Column(String(100))

    # Timestamps
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def has_member_capacity(self, active_members: int) -> bool:
        """Verifica se ainda cabe mais um membro ativo no plano"""
        if self.member_limit is None:
            return True
        return active_members < self.member_limit

    def is_overdue(self, today: date = None) -> bool:
        today = today or date.today()
        return self.next_payment_date is not None and self.next_payment_date < today

    def to_public_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "contact_email": self.contact_email,
            "contact_phone": self.contact_phone,
        }

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "cnpj": self.cnpj,
            "address": self.address,
            "contact_email": self.contact_email,
            "contact_phone": self.contact_phone,
            "parent_church_id": self.parent_church_id,
            "plan_id": self.plan_id,
            "member_limit": self.member_limit,
            "current_members": self.current_members or 0,
            "monthly_fee": self.monthly_fee or 0,
            "status": self.status,
            "last_payment_status": self.last_payment_status,
            "next_payment_date": self.next_payment_date.isoformat() if self.next_payment_date else None,
            "external_subscription_id": self.external_subscription_id,
            "payment_history": list(self.payment_history or []),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
