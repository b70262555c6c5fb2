"""
Connect Vida - Devotional Models
Devocionais com curtidas e comentários
"""
import uuid
from enum import Enum
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, UniqueConstraint

from connect_vida.core.clock import utcnow
from connect_vida.database import Base


class DevotionalStatus(str, Enum):
    DRAFT = "rascunho"
    PUBLISHED = "publicado"
    ARCHIVED = "arquivado"


class Devotional(Base):
    """Modelo de Devocional"""
    __tablename__ = "devocionais"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    church_id = Column(String(36), ForeignKey("igrejas.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    bible_verse = Column(String(255))
    author_id = Column(String(36), ForeignKey("membros.id", ondelete="SET NULL"))
    author_name = Column(String(255))

    status = Column(String(20), default=DevotionalStatus.DRAFT.value, index=True)
    published_at = Column(DateTime)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self, like_count: int = 0, comment_count: int = 0, liked_by_me: bool = False):
        return {
            "id": self.id,
            "church_id": self.church_id,
            "title": self.title,
            "content": self.content,
            "bible_verse": self.bible_verse,
            "author_id": self.author_id,
            "author_name": self.author_name,
            "status": self.status,
            "published_at": self.published_at.isoformat() if self.published_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "like_count": like_count,
            "comment_count": comment_count,
            "liked_by_me": liked_by_me,
        }


class DevotionalLike(Base):
    __tablename__ = "devocional_curtidas"
    __table_args__ = (
        UniqueConstraint('devotional_id', 'member_id', name='uq_devocional_curtida'),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    devotional_id = Column(String(36), ForeignKey("devocionais.id", ondelete="CASCADE"), nullable=False, index=True)
    member_id = Column(String(36), ForeignKey("membros.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=utcnow)


class DevotionalComment(Base):
    __tablename__ = "devocional_comentarios"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    devotional_id = Column(String(36), ForeignKey("devocionais.id", ondelete="CASCADE"), nullable=False, index=True)
    member_id = Column(String(36), ForeignKey("membros.id", ondelete="CASCADE"), nullable=False)
    member_name = Column(String(255))
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "devotional_id": self.devotional_id,
            "member_id": self.member_id,
            "member_name": self.member_name,
            "content": self.content,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
