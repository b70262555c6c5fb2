"""
Connect Vida - Growth Journey Models
Trilha de crescimento: trilha -> etapas -> passos, e o progresso por membro
"""
import uuid
from enum import Enum
from sqlalchemy import Column, String, Boolean, DateTime, Text, Integer, Float, ForeignKey, JSON, UniqueConstraint

from connect_vida.core.clock import utcnow
from connect_vida.database import Base


class StepType(str, Enum):
    """Tipos de passo da jornada"""
    VIDEO = "video"
    QUIZ = "quiz"
    READING = "leitura"
    EXTERNAL_LINK = "link_externo"
    ACTION = "acao"
    SCHOOL_COMPLETION = "conclusao_escola"


class ProgressStatus(str, Enum):
    PENDING = "pendente"
    COMPLETED = "concluido"


class GrowthTrack(Base):
    """Trilha de crescimento de uma igreja (apenas uma ativa por vez)"""
    __tablename__ = "trilhas_crescimento"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    church_id = Column(String(36), ForeignKey("igrejas.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "church_id": self.church_id,
            "title": self.title,
            "description": self.description,
            "is_active": bool(self.is_active),
        }


class JourneyStage(Base):
    """Etapa de uma trilha"""
    __tablename__ = "etapas_trilha"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    track_id = Column(String(36), ForeignKey("trilhas_crescimento.id", ondelete="CASCADE"), nullable=False, index=True)

    order = Column(Integer, nullable=False, default=0)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    color = Column(String(20), default="#e5e7eb")

    created_at = Column(DateTime, default=utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "track_id": self.track_id,
            "order": self.order,
            "title": self.title,
            "description": self.description,
            "color": self.color,
        }


class JourneyStep(Base):
    """Passo de uma etapa"""
    __tablename__ = "passos_etapa"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    stage_id = Column(String(36), ForeignKey("etapas_trilha.id", ondelete="CASCADE"), nullable=False, index=True)

    order = Column(Integer, nullable=False, default=0)
    title = Column(String(255), nullable=False)
    step_type = Column(String(30), nullable=False, default=StepType.READING.value)
    content = Column(Text)

    # Quiz: lista de {order, question, options, correct_option, points}
    quiz_questions = Column(JSON, default=list)
    quiz_passing_score = Column(Float)

    created_at = Column(DateTime, default=utcnow)

    @property
    def is_quiz(self) -> bool:
        return self.step_type == StepType.QUIZ.value

    def to_dict(self, include_answers: bool = True):
        questions = list(self.quiz_questions or [])
        if not include_answers:
            questions = [
                {k: v for k, v in q.items() if k != "correct_option"}
                for q in questions
            ]
        return {
            "id": self.id,
            "stage_id": self.stage_id,
            "order": self.order,
            "title": self.title,
            "step_type": self.step_type,
            "content": self.content,
            "quiz_questions": questions,
            "quiz_passing_score": self.quiz_passing_score,
        }


class MemberProgress(Base):
    """Progresso de um membro em um passo"""
    __tablename__ = "progresso_membros"
    __table_args__ = (
        UniqueConstraint('member_id', 'step_id', name='uq_progresso_membro_passo'),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    member_id = Column(String(36), ForeignKey("membros.id", ondelete="CASCADE"), nullable=False, index=True)
    step_id = Column(String(36), ForeignKey("passos_etapa.id", ondelete="CASCADE"), nullable=False, index=True)
    church_id = Column(String(36), ForeignKey("igrejas.id", ondelete="CASCADE"), nullable=False)

    status = Column(String(20), default=ProgressStatus.PENDING.value, nullable=False)
    completed_at = Column(DateTime)

    # Quiz
    quiz_attempts = Column(Integer, default=0)
    quiz_score = Column(Float)
    quiz_answers = Column(JSON)
    quiz_blocked = Column(Boolean, default=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    @property
    def is_completed(self) -> bool:
        return self.status == ProgressStatus.COMPLETED.value

    def to_dict(self):
        return {
            "id": self.id,
            "member_id": self.member_id,
            "step_id": self.step_id,
            "status": self.status,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "quiz_attempts": self.quiz_attempts or 0,
            "quiz_score": self.quiz_score,
            "quiz_blocked": bool(self.quiz_blocked),
        }
