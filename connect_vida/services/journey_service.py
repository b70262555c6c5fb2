"""
Servico da Jornada de Crescimento

Monta a visao do membro (etapas, passos, bloqueios e progresso),
conclui passos e corrige quizzes no servidor.

Regras:
- Uma etapa fica bloqueada quando a anterior nao esta totalmente concluida.
  A primeira etapa nunca e bloqueada.
- Etapa sem passos nunca conta como concluida.
- Quiz: cada envio soma uma tentativa; aprova com nota >= nota de corte;
  reprovado fica bloqueado ao atingir o maximo de tentativas.
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from connect_vida.core.clock import utcnow
from connect_vida.core.config import settings
from connect_vida.models import (
    GrowthTrack,
    JourneyStage,
    JourneyStep,
    MemberProgress,
    ProgressStatus,
)

logger = logging.getLogger(__name__)


class JourneyError(Exception):
    """Operacao invalida na jornada. status_code e usado pelo router."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def percent(completed: int, total: int) -> int:
    """Percentual inteiro arredondado (meio para cima); 0 quando total = 0"""
    if total <= 0:
        return 0
    return int(100 * completed / total + 0.5)


# ============================================================
# VISAO DO MEMBRO
# ============================================================

def build_journey_view(
    track: Optional[GrowthTrack],
    stages: List[JourneyStage],
    steps: List[JourneyStep],
    progress: List[MemberProgress],
) -> dict:
    """Monta a jornada do membro a partir das linhas ja carregadas"""
    if track is None:
        return {
            "track": None,
            "stages": [],
            "completed_steps": 0,
            "total_steps": 0,
            "overall_progress": 0,
            "current_level": 0,
        }

    progress_by_step = {p.step_id: p for p in progress}
    steps_by_stage: Dict[str, List[JourneyStep]] = {}
    for step in steps:
        steps_by_stage.setdefault(step.stage_id, []).append(step)

    stage_views = []
    previous_completed = True
    completed_steps = 0
    total_steps = 0
    current_level = 0

    for stage in sorted(stages, key=lambda s: s.order or 0):
        step_views = []
        for step in sorted(steps_by_stage.get(stage.id, []), key=lambda s: s.order or 0):
            prog = progress_by_step.get(step.id)
            done = prog is not None and prog.is_completed
            view = step.to_dict(include_answers=False)
            view.update({
                "completed": done,
                "completed_date": prog.completed_at.isoformat() if prog and prog.completed_at else None,
                "quiz_attempts": (prog.quiz_attempts or 0) if prog else 0,
                "quiz_score": prog.quiz_score if prog else None,
                "blocked": bool(prog.quiz_blocked) if prog else False,
            })
            step_views.append(view)

        all_done = len(step_views) > 0 and all(s["completed"] for s in step_views)
        is_locked = not previous_completed
        previous_completed = all_done

        completed_steps += sum(1 for s in step_views if s["completed"])
        total_steps += len(step_views)
        if all_done:
            current_level += 1

        stage_view = stage.to_dict()
        stage_view.update({
            "steps": step_views,
            "all_steps_completed": all_done,
            "is_locked": is_locked,
            "lock_reason": "Conclua a etapa anterior para liberar esta." if is_locked else None,
        })
        stage_views.append(stage_view)

    return {
        "track": track.to_dict(),
        "stages": stage_views,
        "completed_steps": completed_steps,
        "total_steps": total_steps,
        "overall_progress": percent(completed_steps, total_steps),
        "current_level": current_level,
    }


async def get_active_track(db: AsyncSession, church_id: str) -> Optional[GrowthTrack]:
    result = await db.execute(
        select(GrowthTrack)
        .where(GrowthTrack.church_id == church_id, GrowthTrack.is_active == True)
        .order_by(GrowthTrack.created_at.desc())
    )
    return result.scalars().first()


async def load_track_content(db: AsyncSession, track_id: str):
    """Etapas e passos de uma trilha"""
    stages = (await db.execute(
        select(JourneyStage).where(JourneyStage.track_id == track_id)
    )).scalars().all()
    stage_ids = [s.id for s in stages]
    steps = []
    if stage_ids:
        steps = (await db.execute(
            select(JourneyStep).where(JourneyStep.stage_id.in_(stage_ids))
        )).scalars().all()
    return list(stages), list(steps)


async def load_member_journey(db: AsyncSession, church_id: str, member_id: str) -> dict:
    track = await get_active_track(db, church_id)
    if track is None:
        return build_journey_view(None, [], [], [])

    stages, steps = await load_track_content(db, track.id)
    step_ids = [s.id for s in steps]
    progress = []
    if step_ids:
        progress = (await db.execute(
            select(MemberProgress).where(
                MemberProgress.member_id == member_id,
                MemberProgress.step_id.in_(step_ids)
            )
        )).scalars().all()

    return build_journey_view(track, stages, steps, list(progress))


# ============================================================
# CONCLUSAO DE PASSOS
# ============================================================

async def _load_step_for_church(db: AsyncSession, step_id: str, church_id: str, active_only: bool = False):
    """Passo + etapa + trilha, garantindo que pertencem a igreja.
    active_only: o membro só interage com a trilha ativa."""
    row = (await db.execute(
        select(JourneyStep, JourneyStage, GrowthTrack)
        .join(JourneyStage, JourneyStage.id == JourneyStep.stage_id)
        .join(GrowthTrack, GrowthTrack.id == JourneyStage.track_id)
        .where(JourneyStep.id == step_id, GrowthTrack.church_id == church_id)
    )).first()
    if row is None:
        raise JourneyError("Passo não encontrado", 404)
    if active_only and not row[2].is_active:
        raise JourneyError("Trilha de crescimento inativa", 409)
    return row


async def _stage_is_locked(db: AsyncSession, stage: JourneyStage, member_id: str) -> bool:
    """Bloqueada quando a etapa imediatamente anterior nao esta concluida"""
    stages, steps = await load_track_content(db, stage.track_id)
    ordered = sorted(stages, key=lambda s: s.order or 0)
    index = next((i for i, s in enumerate(ordered) if s.id == stage.id), 0)
    if index == 0:
        return False

    previous = ordered[index - 1]
    previous_steps = [s.id for s in steps if s.stage_id == previous.id]
    if not previous_steps:
        return True

    completed = (await db.execute(
        select(MemberProgress.step_id).where(
            MemberProgress.member_id == member_id,
            MemberProgress.step_id.in_(previous_steps),
            MemberProgress.status == ProgressStatus.COMPLETED.value
        )
    )).scalars().all()
    return len(set(completed)) < len(previous_steps)


async def _get_or_create_progress(db: AsyncSession, member_id: str, step_id: str, church_id: str) -> MemberProgress:
    progress = (await db.execute(
        select(MemberProgress).where(
            MemberProgress.member_id == member_id,
            MemberProgress.step_id == step_id
        )
    )).scalar_one_or_none()

    if progress is None:
        progress = MemberProgress(
            member_id=member_id,
            step_id=step_id,
            church_id=church_id,
            status=ProgressStatus.PENDING.value,
            quiz_attempts=0,
            quiz_blocked=False,
        )
        db.add(progress)
    return progress


def _mark_completed(progress: MemberProgress):
    progress.status = ProgressStatus.COMPLETED.value
    progress.completed_at = utcnow()


async def complete_step(db: AsyncSession, church_id: str, member_id: str, step_id: str) -> MemberProgress:
    """Membro conclui um passo que nao e quiz"""
    step, stage, _ = await _load_step_for_church(db, step_id, church_id, active_only=True)

    if step.is_quiz:
        raise JourneyError("Passos de quiz são concluídos pelo envio das respostas", 400)
    if await _stage_is_locked(db, stage, member_id):
        raise JourneyError("Conclua a etapa anterior para liberar esta", 409)

    progress = await _get_or_create_progress(db, member_id, step.id, church_id)
    if not progress.is_completed:
        _mark_completed(progress)
        logger.info(f"Passo {step.id} concluído pelo membro {member_id}")

    await db.flush()
    return progress


# ============================================================
# QUIZ
# ============================================================

def grade_quiz(questions: List[dict], answers: Dict) -> float:
    """
    Nota de 0 a 100: pontos das questoes acertadas / total de pontos.
    answers mapeia a ordem da questao (str ou int) para o indice da opcao.
    """
    normalized = {str(k): v for k, v in (answers or {}).items()}
    total = 0.0
    earned = 0.0
    for index, question in enumerate(questions or []):
        points = question.get("points")
        points = float(points) if points is not None else 1.0
        total += points
        key = str(question.get("order", index))
        chosen = normalized.get(key)
        if chosen is not None and chosen == question.get("correct_option"):
            earned += points

    if total <= 0:
        return 0.0
    return round(earned / total * 100, 2)


def apply_quiz_attempt(
    progress: MemberProgress,
    score: float,
    passing_score: float,
    max_attempts: int,
    answers: Optional[dict] = None,
) -> bool:
    """
    Registra uma tentativa. Retorna True se aprovado.
    """
    if progress.quiz_blocked:
        raise JourneyError("Quiz bloqueado. Peça a um líder para liberar seu acesso", 409)
    if progress.is_completed:
        raise JourneyError("Quiz já concluído", 409)

    progress.quiz_attempts = (progress.quiz_attempts or 0) + 1
    progress.quiz_score = score
    progress.quiz_answers = dict(answers) if answers is not None else None

    if score >= passing_score:
        _mark_completed(progress)
        return True

    if progress.quiz_attempts >= max_attempts:
        progress.quiz_blocked = True
    return False


async def submit_quiz(db: AsyncSession, church_id: str, member_id: str, step_id: str, answers: Dict) -> dict:
    step, stage, _ = await _load_step_for_church(db, step_id, church_id, active_only=True)

    if not step.is_quiz:
        raise JourneyError("Este passo não é um quiz", 400)
    if await _stage_is_locked(db, stage, member_id):
        raise JourneyError("Conclua a etapa anterior para liberar esta", 409)

    progress = await _get_or_create_progress(db, member_id, step.id, church_id)
    passing_score = step.quiz_passing_score
    if passing_score is None:
        passing_score = settings.QUIZ_DEFAULT_PASSING_SCORE

    score = grade_quiz(step.quiz_questions, answers)
    passed = apply_quiz_attempt(
        progress,
        score,
        passing_score,
        settings.QUIZ_MAX_ATTEMPTS,
        answers={str(k): v for k, v in (answers or {}).items()}
    )
    await db.flush()

    if passed:
        logger.info(f"Quiz {step.id} aprovado para {member_id} com {score}%")
    elif progress.quiz_blocked:
        logger.warning(f"Quiz {step.id} bloqueado para {member_id} após {progress.quiz_attempts} tentativas")

    return {
        "step_id": step.id,
        "score": score,
        "passing_score": passing_score,
        "passed": passed,
        "attempts": progress.quiz_attempts,
        "max_attempts": settings.QUIZ_MAX_ATTEMPTS,
        "blocked": bool(progress.quiz_blocked),
    }


# ============================================================
# ACOES DO LIDER
# ============================================================

async def unblock_quiz(db: AsyncSession, church_id: str, member_id: str, step_id: str) -> MemberProgress:
    """Libera o quiz: limpa o bloqueio e zera as tentativas"""
    await _load_step_for_church(db, step_id, church_id)
    progress = (await db.execute(
        select(MemberProgress).where(
            MemberProgress.member_id == member_id,
            MemberProgress.step_id == step_id,
            MemberProgress.church_id == church_id
        )
    )).scalar_one_or_none()
    if progress is None:
        raise JourneyError("Progresso não encontrado", 404)

    progress.quiz_blocked = False
    progress.quiz_attempts = 0
    await db.flush()

    logger.info(f"Quiz {step_id} liberado para o membro {member_id}")
    return progress


async def complete_step_for_member(db: AsyncSession, church_id: str, member_id: str, step_id: str) -> MemberProgress:
    """Lider marca um passo como concluido (ex.: conclusao de escola, acao presencial)"""
    step, _, _ = await _load_step_for_church(db, step_id, church_id)

    progress = await _get_or_create_progress(db, member_id, step.id, church_id)
    if not progress.is_completed:
        _mark_completed(progress)
        progress.quiz_blocked = False
        logger.info(f"Passo {step.id} ({step.step_type}) concluído pelo líder para {member_id}")

    await db.flush()
    return progress

