"""
Connect Vida - Ministry Models
Ministérios da igreja e seus voluntários
"""
import uuid
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, UniqueConstraint

from connect_vida.core.clock import utcnow
from connect_vida.database import Base


class Ministry(Base):
    """Modelo de Ministério"""
    __tablename__ = "ministerios"
    __table_args__ = (
        UniqueConstraint('church_id', 'name', name='uq_ministerio_nome'),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    church_id = Column(String(36), ForeignKey("igrejas.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(100), nullable=False)
    description = Column(Text)
    leader_id = Column(String(36), ForeignKey("membros.id", ondelete="SET NULL"))

    # Chave do perfil do teste vocacional (midia, louvor, ...)
    vocational_profile = Column(String(30))

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self, leader_name: str = None, volunteer_count: int = 0, is_volunteer: bool = False):
        return {
            "id": self.id,
            "church_id": self.church_id,
            "name": self.name,
            "description": self.description,
            "leader_id": self.leader_id,
            "leader_name": leader_name,
            "vocational_profile": self.vocational_profile,
            "volunteer_count": volunteer_count,
            "is_volunteer": is_volunteer,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class MinistryVolunteer(Base):
    """Membro servindo em um ministério"""
    __tablename__ = "ministerio_voluntarios"
    __table_args__ = (
        UniqueConstraint('ministry_id', 'member_id', name='uq_ministerio_voluntario'),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    ministry_id = Column(String(36), ForeignKey("ministerios.id", ondelete="CASCADE"), nullable=False, index=True)
    member_id = Column(String(36), ForeignKey("membros.id", ondelete="CASCADE"), nullable=False, index=True)
    church_id = Column(String(36), ForeignKey("igrejas.id", ondelete="CASCADE"), nullable=False, index=True)
    function = Column(String(100))  # ex: Fotógrafo, Projeção

    created_at = Column(DateTime, default=utcnow)

    def to_dict(self, member=None):
        return {
            "id": self.id,
            "ministry_id": self.ministry_id,
            "member_id": self.member_id,
            "member_name": member.full_name if member else None,
            "member_email": member.email if member else None,
            "function": self.function,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
