"""
Connect Vida - Member Model
Membros de uma igreja (o id é o mesmo do usuário no provedor de autenticação)
"""
from enum import Enum
from sqlalchemy import Column, String, Boolean, DateTime, Date, Text, ForeignKey, JSON, Index

from connect_vida.core.clock import utcnow
from connect_vida.database import Base


class MemberRole(str, Enum):
    """Papéis de um membro"""
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    PASTOR = "pastor"
    MINISTRY_LEADER = "lider_ministerio"
    FINANCE = "financeiro"
    VOLUNTEER = "voluntario"
    MEDIA = "midia_tecnologia"
    INTEGRATION = "integra"
    MEMBER = "membro"


class MemberStatus(str, Enum):
    """Status do cadastro do membro"""
    ACTIVE = "ativo"
    PENDING = "pendente"      # Aguardando aprovação
    INACTIVE = "inativo"


# Campos exigidos para considerar o perfil completo
PROFILE_REQUIRED_FIELDS = ("full_name", "phone", "birth_date", "address")


class Member(Base):
    """Modelo de Membro"""
    __tablename__ = "membros"
    __table_args__ = (
        Index('ix_membros_church_status', 'church_id', 'status'),
    )

    id = Column(String(36), primary_key=True)

    church_id = Column(String(36), ForeignKey("igrejas.id", ondelete="CASCADE"), nullable=False, index=True)

    # Dados pessoais
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(20))
    birth_date = Column(Date)
    address = Column(Text)
    ministry = Column(String(100))

    # Acesso
    role = Column(String(30), default=MemberRole.MEMBER.value, nullable=False)
    status = Column(String(20), default=MemberStatus.PENDING.value, nullable=False)
    permissions = Column(JSON)  # None = usa o preset do papel
    profile_completed = Column(Boolean, default=False)

    # Aprovação
    approved_by = Column(String(255))
    approved_at = Column(DateTime)

    # Timestamps
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    @property
    def is_active(self) -> bool:
        return self.status == MemberStatus.ACTIVE.value

    def refresh_profile_completion(self) -> bool:
        """Recalcula o flag de perfil completo"""
        self.profile_completed = all(getattr(self, field) for field in PROFILE_REQUIRED_FIELDS)
        return self.profile_completed

    def to_dict(self):
        return {
            "id": self.id,
            "church_id": self.church_id,
            "full_name": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "birth_date": self.birth_date.isoformat() if self.birth_date else None,
            "address": self.address,
            "ministry": self.ministry,
            "role": self.role,
            "status": self.status,
            "permissions": self.permissions,
            "profile_completed": bool(self.profile_completed),
            "approved_by": self.approved_by,
            "approved_at": self.approved_at.isoformat() if self.approved_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
