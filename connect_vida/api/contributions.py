"""
Connect Vida - Contributions API
Dízimos e ofertas declarados pelo próprio membro, com recibo em PDF
"""
import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from connect_vida.database import get_db
from connect_vida.models import (
    Church,
    FinancialTransaction,
    Member,
    TransactionStatus,
    TransactionType
)
from connect_vida.schemas import ContributionCreate
from connect_vida.core.permissions import PermissionId, has_permission
from connect_vida.utils.receipt_generator import generate_donation_receipt_pdf
from connect_vida.api.auth import get_active_member

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contributions", tags=["Contributions"])


@router.get("")
async def list_my_contributions(
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(
        select(FinancialTransaction)
        .where(
            FinancialTransaction.church_id == member.church_id,
            FinancialTransaction.member_id == member.id,
            FinancialTransaction.type == TransactionType.INFLOW.value
        )
        .order_by(FinancialTransaction.transaction_date.desc(), FinancialTransaction.created_at.desc())
    )
    return [t.to_dict() for t in result.scalars().all()]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_contribution(
    data: ContributionCreate,
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    """Registra a contribuição como entrada pendente de confirmação da tesouraria"""
    transaction = FinancialTransaction(
        church_id=member.church_id,
        type=TransactionType.INFLOW.value,
        category=data.category,
        amount=round(data.amount, 2),
        transaction_date=data.transaction_date or date.today(),
        description=data.description or f"{data.category} - {member.full_name}",
        payment_method=data.payment_method,
        responsible=member.full_name,
        member_id=member.id,
        member_name=member.full_name,
        status=TransactionStatus.PENDING.value
    )
    db.add(transaction)
    await db.commit()

    logger.info(f"Contribuição {transaction.id} de {member.email}: R$ {transaction.amount:.2f} ({data.category})")
    return transaction.to_dict()


@router.get("/{transaction_id}/receipt")
async def download_receipt(
    transaction_id: str,
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    """Recibo de doação em PDF para uma contribuição confirmada"""
    query = select(FinancialTransaction).where(
        FinancialTransaction.id == transaction_id,
        FinancialTransaction.church_id == member.church_id,
        FinancialTransaction.type == TransactionType.INFLOW.value
    )
    # Tesouraria emite recibo de qualquer membro
    if not has_permission(member, PermissionId.FINANCIAL_PANEL.value):
        query = query.where(FinancialTransaction.member_id == member.id)

    transaction = (await db.execute(query)).scalar_one_or_none()
    if not transaction:
        raise HTTPException(status_code=404, detail="Contribuição não encontrada")

    if transaction.status != TransactionStatus.CONFIRMED.value:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Recibo disponível apenas para contribuições confirmadas"
        )

    church = await db.get(Church, member.church_id)
    pdf_bytes = await generate_donation_receipt_pdf(
        {
            "id": transaction.id,
            "member_name": transaction.member_name,
            "amount": transaction.amount,
            "category": transaction.category,
            "date": transaction.transaction_date,
            "payment_method": transaction.payment_method,
        },
        {"name": church.name, "address": church.address, "cnpj": church.cnpj}
    )

    transaction.receipt_issued = True
    await db.commit()

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="recibo-{transaction.id[:8]}.pdf"'}
    )
