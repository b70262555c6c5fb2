"""
Connect Vida - Growth Journey API
Visão do membro (progresso e quiz) e configuração da trilha pelos líderes
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func

from connect_vida.database import get_db
from connect_vida.models import GrowthTrack, JourneyStage, JourneyStep, Member, MemberProgress
from connect_vida.schemas import (
    TrackCreate,
    TrackUpdate,
    StageCreate,
    StageUpdate,
    StepCreate,
    StepUpdate,
    OrderUpdate,
    QuizSubmission
)
from connect_vida.core.permissions import PermissionId
from connect_vida.core.updates import apply_changes
from connect_vida.services import journey_service
from connect_vida.services.journey_service import JourneyError
from connect_vida.api.auth import get_active_member, require_permission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/journey", tags=["Journey"])

journey_admin = require_permission(PermissionId.JOURNEY_CONFIG.value)


def _raise(e: JourneyError):
    raise HTTPException(status_code=e.status_code, detail=e.message)


# ============================================================
# MEMBRO
# ============================================================

@router.get("")
async def get_my_journey(
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    return await journey_service.load_member_journey(db, member.church_id, member.id)


@router.post("/steps/{step_id}/complete")
async def complete_step(
    step_id: str,
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    try:
        progress = await journey_service.complete_step(db, member.church_id, member.id, step_id)
    except JourneyError as e:
        _raise(e)
    await db.commit()
    return progress.to_dict()


@router.post("/steps/{step_id}/quiz")
async def submit_quiz(
    step_id: str,
    data: QuizSubmission,
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    try:
        result = await journey_service.submit_quiz(db, member.church_id, member.id, step_id, data.answers)
    except JourneyError as e:
        _raise(e)
    await db.commit()
    return result


# ============================================================
# ADMIN: TRILHAS
# ============================================================

async def _get_track(db: AsyncSession, church_id: str, track_id: str) -> GrowthTrack:
    result = await db.execute(
        select(GrowthTrack).where(GrowthTrack.id == track_id, GrowthTrack.church_id == church_id)
    )
    track = result.scalar_one_or_none()
    if not track:
        raise HTTPException(status_code=404, detail="Trilha não encontrada")
    return track


async def _get_stage(db: AsyncSession, church_id: str, stage_id: str) -> JourneyStage:
    result = await db.execute(
        select(JourneyStage)
        .join(GrowthTrack, GrowthTrack.id == JourneyStage.track_id)
        .where(JourneyStage.id == stage_id, GrowthTrack.church_id == church_id)
    )
    stage = result.scalar_one_or_none()
    if not stage:
        raise HTTPException(status_code=404, detail="Etapa não encontrada")
    return stage


async def _get_step(db: AsyncSession, church_id: str, step_id: str) -> JourneyStep:
    result = await db.execute(
        select(JourneyStep)
        .join(JourneyStage, JourneyStage.id == JourneyStep.stage_id)
        .join(GrowthTrack, GrowthTrack.id == JourneyStage.track_id)
        .where(JourneyStep.id == step_id, GrowthTrack.church_id == church_id)
    )
    step = result.scalar_one_or_none()
    if not step:
        raise HTTPException(status_code=404, detail="Passo não encontrado")
    return step


async def _deactivate_other_tracks(db: AsyncSession, church_id: str, keep_id: str):
    """Apenas uma trilha ativa por igreja"""
    await db.execute(
        update(GrowthTrack)
        .where(GrowthTrack.church_id == church_id, GrowthTrack.id != keep_id)
        .values(is_active=False)
    )


def _validate_quiz(step_type: str, questions: list):
    if step_type == "quiz" and not questions:
        raise HTTPException(status_code=400, detail="Quiz precisa de ao menos uma questão")
    for q in questions:
        if q["correct_option"] >= len(q["options"]):
            raise HTTPException(status_code=400, detail=f"Resposta correta inválida na questão {q['order']}")
    orders = [q.get("order", index) for index, q in enumerate(questions)]
    if len(set(orders)) != len(orders):
        raise HTTPException(status_code=400, detail="Ordem das questões repetida no quiz")


@router.get("/admin/tracks")
async def list_tracks(
    admin: Member = Depends(journey_admin),
    db: AsyncSession = Depends(get_db)
):
    tracks = (await db.execute(
        select(GrowthTrack)
        .where(GrowthTrack.church_id == admin.church_id)
        .order_by(GrowthTrack.created_at)
    )).scalars().all()

    views = []
    for track in tracks:
        stages, steps = await journey_service.load_track_content(db, track.id)
        stage_views = []
        for stage in sorted(stages, key=lambda s: s.order or 0):
            stage_steps = sorted((s for s in steps if s.stage_id == stage.id), key=lambda s: s.order or 0)
            stage_views.append({**stage.to_dict(), "steps": [s.to_dict() for s in stage_steps]})
        views.append({**track.to_dict(), "stages": stage_views})
    return views


@router.post("/admin/tracks", status_code=status.HTTP_201_CREATED)
async def create_track(
    data: TrackCreate,
    admin: Member = Depends(journey_admin),
    db: AsyncSession = Depends(get_db)
):
    track = GrowthTrack(**data.model_dump(), church_id=admin.church_id)
    db.add(track)
    await db.flush()
    if track.is_active:
        await _deactivate_other_tracks(db, admin.church_id, track.id)
    await db.commit()

    logger.info(f"Trilha {track.title} criada por {admin.email}")
    return track.to_dict()


@router.put("/admin/tracks/{track_id}")
async def update_track(
    track_id: str,
    data: TrackUpdate,
    admin: Member = Depends(journey_admin),
    db: AsyncSession = Depends(get_db)
):
    track = await _get_track(db, admin.church_id, track_id)
    apply_changes(track, data.model_dump(exclude_unset=True))
    if data.is_active:
        await _deactivate_other_tracks(db, admin.church_id, track.id)
    await db.commit()
    return track.to_dict()


# ============================================================
# ADMIN: ETAPAS E PASSOS
# ============================================================

@router.post("/admin/tracks/{track_id}/stages", status_code=status.HTTP_201_CREATED)
async def create_stage(
    track_id: str,
    data: StageCreate,
    admin: Member = Depends(journey_admin),
    db: AsyncSession = Depends(get_db)
):
    track = await _get_track(db, admin.church_id, track_id)
    order = data.order
    if order is None:
        order = (await db.execute(
            select(func.coalesce(func.max(JourneyStage.order), 0)).where(JourneyStage.track_id == track.id)
        )).scalar() + 1

    values = data.model_dump(exclude={"order"}, exclude_none=True)
    stage = JourneyStage(**values, track_id=track.id, order=order)
    db.add(stage)
    await db.commit()
    return stage.to_dict()


@router.put("/admin/stages/{stage_id}")
async def update_stage(
    stage_id: str,
    data: StageUpdate,
    admin: Member = Depends(journey_admin),
    db: AsyncSession = Depends(get_db)
):
    stage = await _get_stage(db, admin.church_id, stage_id)
    apply_changes(stage, data.model_dump(exclude_unset=True))
    await db.commit()
    return stage.to_dict()


@router.delete("/admin/stages/{stage_id}")
async def delete_stage(
    stage_id: str,
    admin: Member = Depends(journey_admin),
    db: AsyncSession = Depends(get_db)
):
    stage = await _get_stage(db, admin.church_id, stage_id)
    steps = (await db.execute(select(JourneyStep).where(JourneyStep.stage_id == stage.id))).scalars().all()
    for step in steps:
        await _delete_step_rows(db, step)
    await db.delete(stage)
    await db.commit()
    return {"message": "Etapa excluída"}


@router.put("/admin/tracks/{track_id}/stage-order")
async def reorder_stages(
    track_id: str,
    data: OrderUpdate,
    admin: Member = Depends(journey_admin),
    db: AsyncSession = Depends(get_db)
):
    track = await _get_track(db, admin.church_id, track_id)
    stages = {s.id: s for s in (await db.execute(
        select(JourneyStage).where(JourneyStage.track_id == track.id)
    )).scalars().all()}

    if set(data.ids) != set(stages) or len(data.ids) != len(stages):
        raise HTTPException(status_code=400, detail="A lista deve conter todas as etapas da trilha")

    for position, stage_id in enumerate(data.ids, start=1):
        stages[stage_id].order = position
    await db.commit()
    return [stages[i].to_dict() for i in data.ids]


@router.post("/admin/stages/{stage_id}/steps", status_code=status.HTTP_201_CREATED)
async def create_step(
    stage_id: str,
    data: StepCreate,
    admin: Member = Depends(journey_admin),
    db: AsyncSession = Depends(get_db)
):
    stage = await _get_stage(db, admin.church_id, stage_id)
    values = data.model_dump(exclude={"order"})
    _validate_quiz(values["step_type"], values["quiz_questions"])

    order = data.order
    if order is None:
        order = (await db.execute(
            select(func.coalesce(func.max(JourneyStep.order), 0)).where(JourneyStep.stage_id == stage.id)
        )).scalar() + 1

    step = JourneyStep(**values, stage_id=stage.id, order=order)
    db.add(step)
    await db.commit()
    return step.to_dict()


@router.put("/admin/steps/{step_id}")
async def update_step(
    step_id: str,
    data: StepUpdate,
    admin: Member = Depends(journey_admin),
    db: AsyncSession = Depends(get_db)
):
    step = await _get_step(db, admin.church_id, step_id)
    changes = data.model_dump(exclude_unset=True)
    _validate_quiz(
        changes.get("step_type") or step.step_type,
        changes.get("quiz_questions", step.quiz_questions) or []
    )
    apply_changes(step, changes)
    await db.commit()
    return step.to_dict()


async def _delete_step_rows(db: AsyncSession, step: JourneyStep):
    progress = (await db.execute(select(MemberProgress).where(MemberProgress.step_id == step.id))).scalars().all()
    for row in progress:
        await db.delete(row)
    await db.delete(step)


@router.delete("/admin/steps/{step_id}")
async def delete_step(
    step_id: str,
    admin: Member = Depends(journey_admin),
    db: AsyncSession = Depends(get_db)
):
    step = await _get_step(db, admin.church_id, step_id)
    await _delete_step_rows(db, step)
    await db.commit()
    return {"message": "Passo excluído"}


@router.put("/admin/stages/{stage_id}/step-order")
async def reorder_steps(
    stage_id: str,
    data: OrderUpdate,
    admin: Member = Depends(journey_admin),
    db: AsyncSession = Depends(get_db)
):
    stage = await _get_stage(db, admin.church_id, stage_id)
    steps = {s.id: s for s in (await db.execute(
        select(JourneyStep).where(JourneyStep.stage_id == stage.id)
    )).scalars().all()}

    if set(data.ids) != set(steps) or len(data.ids) != len(steps):
        raise HTTPException(status_code=400, detail="A lista deve conter todos os passos da etapa")

    for position, step_id in enumerate(data.ids, start=1):
        steps[step_id].order = position
    await db.commit()
    return [steps[i].to_dict() for i in data.ids]


# ============================================================
# ADMIN: PROGRESSO DOS MEMBROS
# ============================================================

async def _ensure_church_member(db: AsyncSession, church_id: str, member_id: str):
    target = await db.get(Member, member_id)
    if not target or target.church_id != church_id:
        raise HTTPException(status_code=404, detail="Membro não encontrado")


@router.post("/admin/progress/{member_id}/steps/{step_id}/unblock")
async def unblock_quiz(
    member_id: str,
    step_id: str,
    admin: Member = Depends(journey_admin),
    db: AsyncSession = Depends(get_db)
):
    await _ensure_church_member(db, admin.church_id, member_id)
    try:
        progress = await journey_service.unblock_quiz(db, admin.church_id, member_id, step_id)
    except JourneyError as e:
        _raise(e)
    await db.commit()
    return progress.to_dict()


@router.post("/admin/progress/{member_id}/steps/{step_id}/complete")
async def complete_step_for_member(
    member_id: str,
    step_id: str,
    admin: Member = Depends(journey_admin),
    db: AsyncSession = Depends(get_db)
):
    await _ensure_church_member(db, admin.church_id, member_id)
    try:
        progress = await journey_service.complete_step_for_member(db, admin.church_id, member_id, step_id)
    except JourneyError as e:
        _raise(e)
    await db.commit()
    return progress.to_dict()
