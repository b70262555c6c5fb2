"""
Connect Vida - Event Models
Eventos da igreja e inscrições de participantes
"""
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Text, Integer, Float, ForeignKey, UniqueConstraint

from connect_vida.core.clock import utcnow
from connect_vida.database import Base


class Event(Base):
    """Modelo de Evento"""
    __tablename__ = "eventos"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    church_id = Column(String(36), ForeignKey("igrejas.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    starts_at = Column(DateTime, nullable=False, index=True)
    location = Column(String(255))
    description = Column(Text)
    type = Column(String(50), default="evento")
    cover_image = Column(String(500))
    external_link = Column(String(500))

    # Inscrições
    fee = Column(Float, default=0)
    capacity = Column(Integer)  # None = vagas ilimitadas
    registration_open = Column(Boolean, default=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def spots_left(self, participant_count: int):
        if self.capacity is None:
            return None
        return max(self.capacity - participant_count, 0)

    def to_dict(self, participant_count: int = 0, is_registered: bool = False):
        return {
            "id": self.id,
            "church_id": self.church_id,
            "name": self.name,
            "starts_at": self.starts_at.isoformat() if self.starts_at else None,
            "location": self.location,
            "description": self.description,
            "type": self.type,
            "cover_image": self.cover_image,
            "external_link": self.external_link,
            "fee": self.fee or 0,
            "capacity": self.capacity,
            "registration_open": bool(self.registration_open),
            "participant_count": participant_count,
            "spots_left": self.spots_left(participant_count),
            "is_registered": is_registered,
        }


class EventParticipant(Base):
    """Inscrição de um membro em um evento"""
    __tablename__ = "evento_participantes"
    __table_args__ = (
        UniqueConstraint('event_id', 'member_id', name='uq_evento_participante'),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("eventos.id", ondelete="CASCADE"), nullable=False, index=True)
    member_id = Column(String(36), ForeignKey("membros.id", ondelete="CASCADE"), nullable=False, index=True)
    member_name = Column(String(255))
    attended = Column(Boolean, default=False)

    created_at = Column(DateTime, default=utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "event_id": self.event_id,
            "member_id": self.member_id,
            "member_name": self.member_name,
            "attended": bool(self.attended),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
