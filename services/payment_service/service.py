from sqlalchemy.ext.asyncio import AsyncSession
from .repository import TransactionRepository

class TransactionService:
    @staticmethod
    async def list_transactions(db: AsyncSession):
        return await TransactionRepository.list_transactions(db)

    @staticmethod
    async def get_transaction(db: AsyncSession, transaction_id: int):
        return await TransactionRepository.get_transaction(db, transaction_id)
