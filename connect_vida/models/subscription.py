"""
Connect Vida - Subscription Plan Model
Planos de assinatura oferecidos às igrejas
"""
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Text, Integer, Float

from connect_vida.core.clock import utcnow
from connect_vida.database import Base


class SubscriptionPlan(Base):
    """
    Modelo de Plano de Assinatura
    Define a faixa de membros e os limites de cada plano
    """
    __tablename__ = "planos_assinatura"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Informações do plano
    name = Column(String(100), unique=True, nullable=False)  # Ex: "0 a 100 Membros"
    description = Column(Text)

    # Preço e limites
    monthly_price = Column(Float, nullable=False)
    member_limit = Column(Integer)  # None = ilimitado
    quiz_limit_per_stage = Column(Integer)
    storage_limit_mb = Column(Integer)

    # Controle
    is_active = Column(Boolean, default=True)
    sort_order = Column(Integer, default=0)

    # Timestamps
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "monthly_price": self.monthly_price,
            "member_limit": self.member_limit,
            "quiz_limit_per_stage": self.quiz_limit_per_stage,
            "storage_limit_mb": self.storage_limit_mb,
            "is_active": self.is_active,
            "sort_order": self.sort_order
        }
