import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from services.payment_service.repository import TransactionRepository
from shared.errors import OrderNotFound
from .repository import OrderRepository
from .schemas import OrderDetailResponse, TransactionResponse

logger = structlog.get_logger(__name__)

class OrderService:
    @staticmethod
    async def get_order(db: AsyncSession, order_id: int):
        return await OrderRepository.get_order(db, order_id)

    @staticmethod
    async def get_order_detail(db: AsyncSession, order_id: int) -> OrderDetailResponse:
        """Order with its items and every gateway attempt made for it."""
        order = await OrderRepository.get_order(db, order_id)
        if not order:
            raise OrderNotFound(order_id)
        transactions = await TransactionRepository.list_for_order(db, order_id)
        detail = OrderDetailResponse.model_validate(order)
        detail.transactions = [TransactionResponse.model_validate(tx) for tx in transactions]
        return detail

    @staticmethod
    async def list_orders(db: AsyncSession):
        return await OrderRepository.list_orders(db)

    @staticmethod
    async def override_status(db: AsyncSession, order_id: int, status: str, admin_id: int):
        order = await OrderRepository.get_order(db, order_id)
        if not order:
            raise OrderNotFound(order_id)
        previous = order.status
        order = await OrderRepository.update_status(db, order_id, status)
        logger.info(
            "order_status_overridden",
            order_id=order_id,
            previous_status=previous,
            status=status,
            admin_id=admin_id,
        )
        return order
