"""
Read-only audit view of gateway attempts. Transactions are only ever written
by the checkout flow, so nothing here mutates.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security.dependencies import get_current_admin

from .schemas import TransactionAuditResponse
from .service import TransactionService

router = APIRouter(dependencies=[Depends(get_current_admin)])


@router.get("/", response_model=list[TransactionAuditResponse])
async def list_transactions(db: AsyncSession = Depends(get_db)):
    return await TransactionService.list_transactions(db)


@router.get("/{transaction_id}", response_model=TransactionAuditResponse)
async def get_transaction(transaction_id: int, db: AsyncSession = Depends(get_db)):
    tx = await TransactionService.get_transaction(db, transaction_id)
    if not tx:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return tx
