from decimal import Decimal

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from services.order_service.models import Order, OrderItem
from services.order_service.repository import OrderRepository
from services.payment_service.gateway import PayUGateway
from services.payment_service.models import Transaction
from services.payment_service.repository import TransactionRepository
from services.product_service.repository import ProductRepository
from shared.config.settings import Settings
from shared.errors import (
    OrderNotFound,
    OrderNotPayable,
    OutOfStock,
    ProductNotFound,
    StorefrontError,
    ValidationError,
)
from shared.observability import (
    ecomm_checkout_duration_seconds,
    ecomm_checkout_total,
    ecomm_gateway_initiations_total,
)
from shared.utils.currency import allocate, convert, rate_for, to_money
from shared.utils.identifiers import generate_order_number, generate_txn_id
from .schemas import CheckoutRequest, GatewayRedirect

logger = structlog.get_logger(__name__)

_CHECKOUT_FAILURE_LABELS = {
    ValidationError: "invalid",
    ProductNotFound: "product_not_found",
    OutOfStock: "out_of_stock",
}


class CheckoutService:
    def __init__(self, settings: Settings):
        self.settings = settings
        self.gateway = PayUGateway(settings)

    async def create_order(self, db: AsyncSession, checkout: CheckoutRequest) -> Order:
        """
        Price the cart against live catalog state and persist a pending order.

        The stock check is advisory: nothing is reserved here. Stock is only
        taken, atomically, when the gateway confirms payment.
        """
        with ecomm_checkout_duration_seconds.time():
            try:
                order = await self._create_order(db, checkout)
            except StorefrontError as e:
                label = _CHECKOUT_FAILURE_LABELS.get(type(e), "error")
                ecomm_checkout_total.labels(status=label).inc()
                logger.info("checkout_rejected", reason=label, detail=e.message)
                raise
        ecomm_checkout_total.labels(status="created").inc()
        logger.info(
            "order_created",
            order_id=order.id,
            order_number=order.order_number,
            currency=order.currency,
            amount_total=str(order.amount_total),
        )
        return order

    async def _create_order(self, db: AsyncSession, checkout: CheckoutRequest) -> Order:
        if not checkout.items:
            raise ValidationError("Cart is empty")

        # The same product may appear on several cart lines
        quantities: dict[int, int] = {}
        for line in checkout.items:
            quantities[line.product_id] = quantities.get(line.product_id, 0) + line.quantity

        currency = checkout.currency
        rate = rate_for(currency)
        total_base = Decimal("0")
        items = []
        line_amounts = []

        for product_id, quantity in quantities.items():
            product = await ProductRepository.get_product_by_id(db, product_id)
            if not product or not product.is_active:
                raise ProductNotFound(product_id)
            if product.stock < quantity:
                raise OutOfStock(product.id, product.name, quantity, product.stock)

            price_base = Decimal(str(product.price_base))
            line_base = price_base * quantity
            total_base += line_base
            line_amounts.append(convert(line_base, currency))
            items.append(
                OrderItem(
                    product_id=product.id,
                    quantity=quantity,
                    price_each=to_money(convert(price_base, currency)),
                    currency=currency,
                )
            )

        amount_total = to_money(convert(total_base, currency))
        # Subtotals add up to the total to the cent
        for item, subtotal in zip(items, allocate(amount_total, line_amounts)):
            item.subtotal = subtotal

        shipping = checkout.shipping_address
        order = Order(
            order_number=generate_order_number(),
            name=checkout.name,
            email=checkout.email,
            phone=checkout.phone,
            shipping_address=shipping,
            billing_address=shipping if checkout.same_as_billing else checkout.billing_address,
            currency=currency,
            exchange_rate=rate,
            amount_total=amount_total,
            status="pending",
            stock_conflict=False,
        )
        return await OrderRepository.create_order(db, order, items)

    async def initiate_gateway_payment(self, db: AsyncSession, order_id: int) -> GatewayRedirect:
        """
        Start a new payment attempt for an order. Every call mints a fresh
        transaction id and pending Transaction row; retries are not capped.
        """
        order = await OrderRepository.get_order(db, order_id)
        if not order:
            raise OrderNotFound(order_id)
        if order.status in ("paid", "cancelled"):
            raise OrderNotPayable(order.id, order.status)

        txn_id = generate_txn_id()
        params = self.gateway.build_payment_params(order, txn_id)
        hash_value = self.gateway.sign(params)

        transaction = Transaction(
            order_id=order.id,
            gateway_txn_id=txn_id,
            amount=order.amount_total,
            currency=order.currency,
            status="pending",
            hash_sent=hash_value,
            raw_request=params,
        )
        await TransactionRepository.create_transaction(db, transaction)

        ecomm_gateway_initiations_total.labels(currency=order.currency).inc()
        logger.info("payment_initiated", order_id=order.id, txnid=txn_id, amount=params["amount"])

        return GatewayRedirect(
            payment_url=self.gateway.payment_url,
            transaction_id=txn_id,
            params=self.gateway.build_form(params, hash_value),
        )
