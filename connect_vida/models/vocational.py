"""
Connect Vida - Vocational Test Model
Uma linha por teste respondido, com as somas por ministério
"""
import uuid
from datetime import date
from sqlalchemy import Column, String, Boolean, DateTime, Date, Integer, ForeignKey, JSON

from connect_vida.core.clock import utcnow
from connect_vida.database import Base


class VocationalTest(Base):
    """Resultado de um teste vocacional"""
    __tablename__ = "testes_vocacionais"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    member_id = Column(String(36), ForeignKey("membros.id", ondelete="CASCADE"), nullable=False, index=True)
    church_id = Column(String(36), ForeignKey("igrejas.id", ondelete="CASCADE"), nullable=False)
    test_date = Column(Date, default=date.today)

    # Somas por ministério (5 a 25 cada)
    sum_media = Column(Integer, default=0)
    sum_worship = Column(Integer, default=0)
    sum_deacons = Column(Integer, default=0)
    sum_integration = Column(Integer, default=0)
    sum_teaching = Column(Integer, default=0)
    sum_kids = Column(Integer, default=0)
    sum_organization = Column(Integer, default=0)
    sum_social_action = Column(Integer, default=0)

    recommended_ministry = Column(String(100))
    answers = Column(JSON)  # {"1": 4, "2": 5, ...}
    is_latest = Column(Boolean, default=True, index=True)

    created_at = Column(DateTime, default=utcnow)

    # ministério -> coluna
    SUM_COLUMNS = {
        "midia": "sum_media",
        "louvor": "sum_worship",
        "diaconato": "sum_deacons",
        "integracao": "sum_integration",
        "ensino": "sum_teaching",
        "kids": "sum_kids",
        "organizacao": "sum_organization",
        "acao_social": "sum_social_action",
    }

    def ministry_sums(self) -> dict:
        return {key: getattr(self, column) or 0 for key, column in self.SUM_COLUMNS.items()}
