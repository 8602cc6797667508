from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Transaction

class TransactionRepository:
    @staticmethod
    async def create_transaction(db: AsyncSession, transaction: Transaction) -> Transaction:
        db.add(transaction)
        await db.commit()
        await db.refresh(transaction)
        return transaction

    @staticmethod
    async def get_transaction(db: AsyncSession, transaction_id: int) -> Optional[Transaction]:
        result = await db.execute(select(Transaction).where(Transaction.id == transaction_id))
        return result.scalars().first()

    @staticmethod
    async def get_by_gateway_txn_id(db: AsyncSession, txn_id: str) -> Optional[Transaction]:
        result = await db.execute(select(Transaction).where(Transaction.gateway_txn_id == txn_id))
        return result.scalars().first()

    @staticmethod
    async def list_transactions(db: AsyncSession):
        result = await db.execute(select(Transaction).order_by(Transaction.id.desc()))
        return result.scalars().all()

    @staticmethod
    async def list_for_order(db: AsyncSession, order_id: int):
        result = await db.execute(
            select(Transaction).where(Transaction.order_id == order_id).order_by(Transaction.id)
        )
        return result.scalars().all()

    @staticmethod
    async def resolve_pending(
        db: AsyncSession,
        transaction_id: int,
        status: str,
        gateway_payment_id: Optional[str],
        hash_received: Optional[str],
        raw_response: dict[str, Any],
    ) -> bool:
        """
        Write the callback outcome only if the row is still pending.
        False means another delivery got there first. Does not commit.
        """
        stmt = (
            update(Transaction)
            .where(Transaction.id == transaction_id, Transaction.status == "pending")
            .values(
                status=status,
                gateway_payment_id=gateway_payment_id,
                hash_received=hash_received,
                raw_response=raw_response,
            )
        )
        result = await db.execute(stmt)
        return result.rowcount == 1
