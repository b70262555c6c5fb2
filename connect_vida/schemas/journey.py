"""
Connect Vida - Journey and Vocational Test Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Literal

StepTypeLiteral = Literal["video", "quiz", "leitura", "link_externo", "acao", "conclusao_escola"]


class TrackCreate(BaseModel):
    title: str = Field(..., min_length=2, max_length=255)
    description: Optional[str] = None
    is_active: bool = True


class TrackUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=2, max_length=255)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class StageCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    color: Optional[str] = Field(None, max_length=20)
    order: Optional[int] = None


class StageUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    color: Optional[str] = Field(None, max_length=20)


class QuizQuestion(BaseModel):
    order: int
    question: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=2)
    correct_option: int = Field(..., ge=0)
    points: float = Field(1, gt=0)


class StepCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    step_type: StepTypeLiteral = "leitura"
    content: Optional[str] = None
    quiz_questions: List[QuizQuestion] = []
    quiz_passing_score: Optional[float] = Field(None, ge=0, le=100)
    order: Optional[int] = None


class StepUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    step_type: Optional[StepTypeLiteral] = None
    content: Optional[str] = None
    quiz_questions: Optional[List[QuizQuestion]] = None
    quiz_passing_score: Optional[float] = Field(None, ge=0, le=100)


class OrderUpdate(BaseModel):
    ids: List[str]


class QuizSubmission(BaseModel):
    # ordem da questão -> índice da opção escolhida
    answers: Dict[str, int]


class VocationalSubmission(BaseModel):
    # id da pergunta -> resposta (1 a 5); validado no serviço
    answers: Dict[str, Any]
