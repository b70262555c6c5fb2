"""
Connect Vida - Vocational Test API
"""
import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from connect_vida.database import get_db
from connect_vida.models import Member, VocationalTest
from connect_vida.schemas import VocationalSubmission
from connect_vida.services import vocational_service
from connect_vida.services.vocational_service import VocationalTestError
from connect_vida.api.auth import get_active_member

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vocational-test", tags=["Vocational Test"])


def _result_view(test: VocationalTest, results: list) -> dict:
    return {
        "id": test.id,
        "test_date": test.test_date.isoformat() if test.test_date else None,
        "sums": test.ministry_sums(),
        "results": results,
        "recommended": results[0] if results else None,
        "recommended_ministry": test.recommended_ministry,
    }


@router.get("/questions")
async def get_questions():
    """Afirmações do teste e perfis dos ministérios"""
    return {
        "questions": [{"id": q["id"], "text": q["text"], "ministry": q["ministry"]} for q in vocational_service.QUESTIONS],
        "ministries": [
            {"ministry": key, **vocational_service.MINISTRY_PROFILES[key]}
            for key in vocational_service.MINISTRY_ORDER
        ],
        "scale": {"min": vocational_service.MIN_ANSWER, "max": vocational_service.MAX_ANSWER},
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_test(
    data: VocationalSubmission,
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    try:
        scored = vocational_service.score_test(data.answers)
    except VocationalTestError as e:
        logger.warning(f"Teste vocacional rejeitado para {member.email}: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    await db.execute(
        update(VocationalTest)
        .where(VocationalTest.member_id == member.id, VocationalTest.is_latest == True)  # noqa: E712
        .values(is_latest=False)
    )

    test = VocationalTest(
        member_id=member.id,
        church_id=member.church_id,
        test_date=date.today(),
        recommended_ministry=scored["recommended"]["name"],
        answers={str(k): v for k, v in scored["answers"].items()},
        is_latest=True
    )
    for key, column in VocationalTest.SUM_COLUMNS.items():
        setattr(test, column, scored["sums"][key])

    db.add(test)
    await db.commit()

    logger.info(f"Teste vocacional de {member.email}: {test.recommended_ministry}")
    return _result_view(test, scored["results"])


@router.get("/latest")
async def get_latest_result(
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    test = (await db.execute(
        select(VocationalTest)
        .where(VocationalTest.member_id == member.id, VocationalTest.is_latest == True)  # noqa: E712
        .order_by(VocationalTest.created_at.desc())
    )).scalars().first()
    if not test:
        raise HTTPException(status_code=404, detail="Nenhum teste vocacional realizado")

    return _result_view(test, vocational_service.rank_ministries(test.ministry_sums()))
