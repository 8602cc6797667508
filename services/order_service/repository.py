from typing import Iterable, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import PersistenceError
from .models import Order, OrderItem

class OrderRepository:
    @staticmethod
    async def create_order(db: AsyncSession, order: Order, items: list[OrderItem]) -> Order:
        """Insert the order and its items in one transaction; all or nothing."""
        try:
            order.items = items
            db.add(order)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceError(f"Could not create order: {e.__class__.__name__}") from e
        await db.refresh(order)
        return order

    @staticmethod
    async def get_order(db: AsyncSession, order_id: int) -> Optional[Order]:
        result = await db.execute(select(Order).where(Order.id == order_id))
        return result.scalars().first()

    @staticmethod
    async def get_order_by_number(db: AsyncSession, order_number: str) -> Optional[Order]:
        result = await db.execute(select(Order).where(Order.order_number == order_number))
        return result.scalars().first()

    @staticmethod
    async def list_orders(db: AsyncSession):
        result = await db.execute(select(Order).order_by(Order.id.desc()))
        return result.scalars().all()

    @staticmethod
    async def get_items(db: AsyncSession, order_id: int) -> list[OrderItem]:
        result = await db.execute(
            select(OrderItem).where(OrderItem.order_id == order_id).order_by(OrderItem.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def update_status(db: AsyncSession, order_id: int, status: str) -> Optional[Order]:
        result = await db.execute(select(Order).where(Order.id == order_id))
        order = result.scalars().first()

        if not order:
            return None

        order.status = status

        await db.commit()
        await db.refresh(order)
        return order

    @staticmethod
    async def transition_status(
        db: AsyncSession, order_id: int, from_statuses: Iterable[str], to_status: str
    ) -> bool:
        """
        Move the order to ``to_status`` only if it currently holds one of
        ``from_statuses``. Does not commit.
        """
        stmt = (
            update(Order)
            .where(Order.id == order_id, Order.status.in_(tuple(from_statuses)))
            .values(status=to_status)
        )
        result = await db.execute(stmt)
        return result.rowcount == 1

    @staticmethod
    async def flag_stock_conflict(db: AsyncSession, order_id: int) -> None:
        await db.execute(update(Order).where(Order.id == order_id).values(stock_conflict=True))
