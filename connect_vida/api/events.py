"""
Connect Vida - Events API
Eventos da igreja, inscrições e presença
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError

from connect_vida.core.clock import utcnow
from connect_vida.database import get_db
from connect_vida.models import Event, EventParticipant, Member
from connect_vida.schemas import EventCreate, EventUpdate, RegistrationToggle, AttendanceUpdate
from connect_vida.core.permissions import PermissionId
from connect_vida.core.updates import apply_changes
from connect_vida.api.auth import get_active_member, require_permission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["Events"])

event_manager = require_permission(PermissionId.EVENTS_MANAGEMENT.value)


async def _get_event(db: AsyncSession, church_id: str, event_id: str, for_update: bool = False) -> Event:
    query = select(Event).where(Event.id == event_id, Event.church_id == church_id)
    if for_update:
        query = query.with_for_update()
    event = (await db.execute(query)).scalar_one_or_none()
    if not event:
        raise HTTPException(status_code=404, detail="Evento não encontrado")
    return event


async def _participant_count(db: AsyncSession, event_id: str) -> int:
    result = await db.execute(
        select(func.count(EventParticipant.id)).where(EventParticipant.event_id == event_id)
    )
    return result.scalar() or 0


async def _is_registered(db: AsyncSession, event_id: str, member_id: str) -> bool:
    result = await db.execute(
        select(EventParticipant.id).where(
            EventParticipant.event_id == event_id,
            EventParticipant.member_id == member_id
        )
    )
    return result.first() is not None


async def _event_view(db: AsyncSession, event: Event, member: Member) -> dict:
    count = await _participant_count(db, event.id)
    return event.to_dict(
        participant_count=count,
        is_registered=await _is_registered(db, event.id, member.id)
    )


@router.get("")
async def list_events(
    upcoming_only: bool = False,
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    query = select(Event).where(Event.church_id == member.church_id)
    if upcoming_only:
        query = query.where(Event.starts_at >= utcnow())
    events = (await db.execute(query.order_by(Event.starts_at))).scalars().all()

    counts = dict((await db.execute(
        select(EventParticipant.event_id, func.count(EventParticipant.id))
        .join(Event, Event.id == EventParticipant.event_id)
        .where(Event.church_id == member.church_id)
        .group_by(EventParticipant.event_id)
    )).all())
    mine = set((await db.execute(
        select(EventParticipant.event_id).where(EventParticipant.member_id == member.id)
    )).scalars().all())

    return [
        e.to_dict(participant_count=counts.get(e.id, 0), is_registered=e.id in mine)
        for e in events
    ]


@router.get("/{event_id}")
async def get_event(
    event_id: str,
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    event = await _get_event(db, member.church_id, event_id)
    return await _event_view(db, event, member)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_event(
    data: EventCreate,
    manager: Member = Depends(event_manager),
    db: AsyncSession = Depends(get_db)
):
    event = Event(**data.model_dump(), church_id=manager.church_id)
    db.add(event)
    await db.commit()

    logger.info(f"Evento {event.name} criado por {manager.email}")
    return event.to_dict()


@router.put("/{event_id}")
async def update_event(
    event_id: str,
    data: EventUpdate,
    manager: Member = Depends(event_manager),
    db: AsyncSession = Depends(get_db)
):
    event = await _get_event(db, manager.church_id, event_id)
    apply_changes(event, data.model_dump(exclude_unset=True))
    await db.commit()
    return await _event_view(db, event, manager)


@router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    manager: Member = Depends(event_manager),
    db: AsyncSession = Depends(get_db)
):
    event = await _get_event(db, manager.church_id, event_id)
    participants = (await db.execute(
        select(EventParticipant).where(EventParticipant.event_id == event.id)
    )).scalars().all()
    for participant in participants:
        await db.delete(participant)
    await db.delete(event)
    await db.commit()

    logger.info(f"Evento {event_id} excluído por {manager.email}")
    return {"message": "Evento excluído"}


@router.post("/{event_id}/registration")
async def toggle_registration(
    event_id: str,
    data: RegistrationToggle,
    manager: Member = Depends(event_manager),
    db: AsyncSession = Depends(get_db)
):
    event = await _get_event(db, manager.church_id, event_id)
    event.registration_open = data.registration_open
    await db.commit()
    return await _event_view(db, event, manager)


# ============================================================
# INSCRIÇÕES
# ============================================================

@router.post("/{event_id}/register", status_code=status.HTTP_201_CREATED)
async def register_for_event(
    event_id: str,
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    """Inscrição do membro; a linha do evento fica travada durante a contagem"""
    event = await _get_event(db, member.church_id, event_id, for_update=True)

    if not event.registration_open:
        raise HTTPException(status_code=409, detail="Inscrições encerradas")
    if await _is_registered(db, event.id, member.id):
        raise HTTPException(status_code=409, detail="Você já está inscrito neste evento")

    count = await _participant_count(db, event.id)
    if event.capacity is not None and count >= event.capacity:
        logger.warning(f"Evento {event.id} lotado ({count}/{event.capacity})")
        raise HTTPException(status_code=409, detail="Evento lotado")

    db.add(EventParticipant(event_id=event.id, member_id=member.id, member_name=member.full_name))
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="Você já está inscrito neste evento")

    logger.info(f"Membro {member.email} inscrito no evento {event.id}")
    return event.to_dict(participant_count=count + 1, is_registered=True)


@router.delete("/{event_id}/register")
async def unregister_from_event(
    event_id: str,
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    event = await _get_event(db, member.church_id, event_id)
    participant = (await db.execute(
        select(EventParticipant).where(
            EventParticipant.event_id == event.id,
            EventParticipant.member_id == member.id
        )
    )).scalar_one_or_none()
    if not participant:
        raise HTTPException(status_code=404, detail="Inscrição não encontrada")

    await db.delete(participant)
    await db.commit()
    return await _event_view(db, event, member)


@router.get("/{event_id}/participants")
async def list_participants(
    event_id: str,
    manager: Member = Depends(event_manager),
    db: AsyncSession = Depends(get_db)
):
    event = await _get_event(db, manager.church_id, event_id)
    result = await db.execute(
        select(EventParticipant)
        .where(EventParticipant.event_id == event.id)
        .order_by(EventParticipant.member_name)
    )
    return [p.to_dict() for p in result.scalars().all()]


@router.put("/{event_id}/participants/{member_id}/attendance")
async def set_attendance(
    event_id: str,
    member_id: str,
    data: AttendanceUpdate,
    manager: Member = Depends(event_manager),
    db: AsyncSession = Depends(get_db)
):
    event = await _get_event(db, manager.church_id, event_id)
    participant = (await db.execute(
        select(EventParticipant).where(
            EventParticipant.event_id == event.id,
            EventParticipant.member_id == member_id
        )
    )).scalar_one_or_none()
    if not participant:
        raise HTTPException(status_code=404, detail="Inscrição não encontrada")

    participant.attended = data.attended
    await db.commit()
    return participant.to_dict()
