"""
Connect Vida - Finance API
Painel financeiro: transações, aprovação, resumo e orçamentos
"""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_

from connect_vida.database import get_db
from connect_vida.models import (
    Budget,
    FinancialTransaction,
    Member,
    TransactionStatus,
    TransactionType
)
from connect_vida.schemas import (
    TransactionCreate,
    TransactionUpdate,
    TransactionStatusUpdate,
    BudgetCreate,
    BudgetUpdate
)
from connect_vida.core.permissions import PermissionId
from connect_vida.core.updates import apply_changes
from connect_vida.api.auth import require_permission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/finance", tags=["Finance"])

treasurer = require_permission(PermissionId.FINANCIAL_PANEL.value)


async def _get_transaction(db: AsyncSession, church_id: str, transaction_id: str) -> FinancialTransaction:
    result = await db.execute(
        select(FinancialTransaction).where(
            FinancialTransaction.id == transaction_id,
            FinancialTransaction.church_id == church_id
        )
    )
    transaction = result.scalar_one_or_none()
    if not transaction:
        raise HTTPException(status_code=404, detail="Transação não encontrada")
    return transaction


async def _get_budget(db: AsyncSession, church_id: str, budget_id: str) -> Budget:
    result = await db.execute(
        select(Budget).where(Budget.id == budget_id, Budget.church_id == church_id)
    )
    budget = result.scalar_one_or_none()
    if not budget:
        raise HTTPException(status_code=404, detail="Orçamento não encontrado")
    return budget


# ============================================================
# TRANSAÇÕES
# ============================================================

@router.get("/transactions")
async def list_transactions(
    search: Optional[str] = None,
    category: Optional[str] = None,
    member_id: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    manager: Member = Depends(treasurer),
    db: AsyncSession = Depends(get_db)
):
    query = select(FinancialTransaction).where(FinancialTransaction.church_id == manager.church_id)

    if search:
        search_filter = f"%{search}%"
        query = query.where(or_(
            FinancialTransaction.description.ilike(search_filter),
            FinancialTransaction.document_number.ilike(search_filter),
            FinancialTransaction.responsible.ilike(search_filter)
        ))
    if category:
        query = query.where(FinancialTransaction.category == category)
    if member_id:
        query = query.where(FinancialTransaction.member_id == member_id)
    if start_date:
        query = query.where(FinancialTransaction.transaction_date >= start_date)
    if end_date:
        query = query.where(FinancialTransaction.transaction_date <= end_date)

    query = query.order_by(
        FinancialTransaction.transaction_date.desc(),
        FinancialTransaction.created_at.desc()
    )
    result = await db.execute(query)
    return [t.to_dict() for t in result.scalars().all()]


@router.post("/transactions", status_code=status.HTTP_201_CREATED)
async def create_transaction(
    data: TransactionCreate,
    manager: Member = Depends(treasurer),
    db: AsyncSession = Depends(get_db)
):
    values = data.model_dump()
    member_name = None
    if data.member_id:
        contributor = await db.get(Member, data.member_id)
        if not contributor or contributor.church_id != manager.church_id:
            raise HTTPException(status_code=404, detail="Membro não encontrado")
        member_name = contributor.full_name

    transaction = FinancialTransaction(
        **values,
        member_name=member_name,
        church_id=manager.church_id,
        status=TransactionStatus.PENDING.value
    )
    db.add(transaction)
    await db.commit()

    logger.info(f"Transação {transaction.id} ({transaction.type} R$ {transaction.amount:.2f}) criada por {manager.email}")
    return transaction.to_dict()


@router.put("/transactions/{transaction_id}")
async def update_transaction(
    transaction_id: str,
    data: TransactionUpdate,
    manager: Member = Depends(treasurer),
    db: AsyncSession = Depends(get_db)
):
    transaction = await _get_transaction(db, manager.church_id, transaction_id)
    apply_changes(transaction, data.model_dump(exclude_unset=True))
    await db.commit()
    return transaction.to_dict()


@router.delete("/transactions/{transaction_id}")
async def delete_transaction(
    transaction_id: str,
    manager: Member = Depends(treasurer),
    db: AsyncSession = Depends(get_db)
):
    transaction = await _get_transaction(db, manager.church_id, transaction_id)
    await db.delete(transaction)
    await db.commit()

    logger.info(f"Transação {transaction_id} excluída por {manager.email}")
    return {"message": "Transação excluída"}


@router.post("/transactions/{transaction_id}/status")
async def change_transaction_status(
    transaction_id: str,
    data: TransactionStatusUpdate,
    manager: Member = Depends(treasurer),
    db: AsyncSession = Depends(get_db)
):
    """pendente -> confirmado | cancelado"""
    transaction = await _get_transaction(db, manager.church_id, transaction_id)
    if transaction.status != TransactionStatus.PENDING.value:
        logger.warning(f"Transição inválida {transaction.status} -> {data.status} em {transaction.id}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Transação já está {transaction.status}"
        )

    transaction.status = data.status
    transaction.approved_by = manager.email
    transaction.approved_at = date.today()
    await db.commit()

    logger.info(f"Transação {transaction.id} {data.status} por {manager.email}")
    return transaction.to_dict()


@router.post("/transactions/{transaction_id}/receipt-issued")
async def mark_receipt_issued(
    transaction_id: str,
    manager: Member = Depends(treasurer),
    db: AsyncSession = Depends(get_db)
):
    transaction = await _get_transaction(db, manager.church_id, transaction_id)
    transaction.receipt_issued = True
    await db.commit()
    return transaction.to_dict()


@router.get("/summary")
async def financial_summary(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    manager: Member = Depends(treasurer),
    db: AsyncSession = Depends(get_db)
):
    """Entradas e saídas confirmadas, saldo e pendências"""
    query = select(FinancialTransaction).where(FinancialTransaction.church_id == manager.church_id)
    if start_date:
        query = query.where(FinancialTransaction.transaction_date >= start_date)
    if end_date:
        query = query.where(FinancialTransaction.transaction_date <= end_date)

    transactions = (await db.execute(query)).scalars().all()

    inflows = 0.0
    outflows = 0.0
    pending = 0
    by_category = {}
    for t in transactions:
        if t.status == TransactionStatus.PENDING.value:
            pending += 1
            continue
        if t.status != TransactionStatus.CONFIRMED.value:
            continue
        if t.type == TransactionType.INFLOW.value:
            inflows += t.amount
            by_category[t.category] = round(by_category.get(t.category, 0) + t.amount, 2)
        else:
            outflows += t.amount

    return {
        "total_inflows": round(inflows, 2),
        "total_outflows": round(outflows, 2),
        "balance": round(inflows - outflows, 2),
        "pending_count": pending,
        "inflows_by_category": by_category
    }


# ============================================================
# ORÇAMENTOS
# ============================================================

@router.get("/budgets")
async def list_budgets(
    month: Optional[str] = None,
    manager: Member = Depends(treasurer),
    db: AsyncSession = Depends(get_db)
):
    query = select(Budget).where(Budget.church_id == manager.church_id)
    if month:
        query = query.where(Budget.month == month)
    result = await db.execute(query.order_by(Budget.month.desc(), Budget.category))
    return [b.to_dict() for b in result.scalars().all()]


@router.post("/budgets", status_code=status.HTTP_201_CREATED)
async def create_budget(
    data: BudgetCreate,
    manager: Member = Depends(treasurer),
    db: AsyncSession = Depends(get_db)
):
    budget = Budget(**data.model_dump(), church_id=manager.church_id)
    db.add(budget)
    await db.commit()
    return budget.to_dict()


@router.put("/budgets/{budget_id}")
async def update_budget(
    budget_id: str,
    data: BudgetUpdate,
    manager: Member = Depends(treasurer),
    db: AsyncSession = Depends(get_db)
):
    budget = await _get_budget(db, manager.church_id, budget_id)
    apply_changes(budget, data.model_dump(exclude_unset=True))
    await db.commit()
    return budget.to_dict()


@router.delete("/budgets/{budget_id}")
async def delete_budget(
    budget_id: str,
    manager: Member = Depends(treasurer),
    db: AsyncSession = Depends(get_db)
):
    budget = await _get_budget(db, manager.church_id, budget_id)
    await db.delete(budget)
    await db.commit()
    return {"message": "Orçamento excluído"}
