from decimal import Decimal

import pytest
from sqlalchemy import func, select

from services.checkout_service.service import CheckoutService
from services.order_service.models import Order, OrderItem
from services.order_service.repository import OrderRepository
from services.payment_service.models import Transaction
from services.payment_service.signature import generate_request_hash
from services.product_service.models import Product
from shared.errors import (
    OrderNotFound,
    OrderNotPayable,
    OutOfStock,
    PersistenceError,
    ProductNotFound,
    ValidationError,
)


@pytest.fixture
def checkout(settings):
    return CheckoutService(settings)


class TestCreateOrder:
    async def test_inr_order_totals(self, db, checkout, make_product, checkout_request):
        product = await make_product(price="500.00", stock=5)

        order = await checkout.create_order(db, checkout_request((product.id, 2)))

        assert order.status == "pending"
        assert order.currency == "INR"
        assert order.amount_total == Decimal("1000.00")
        assert order.exchange_rate == Decimal("1")
        assert order.order_number.startswith("ORD-")
        assert order.billing_address == order.shipping_address
        [item] = order.items
        assert item.quantity == 2
        assert item.price_each == Decimal("500.00")
        assert item.subtotal == Decimal("1000.00")

    async def test_usd_order_converts_once(self, db, checkout, make_product, checkout_request):
        product = await make_product(price="500.00", stock=5)

        order = await checkout.create_order(db, checkout_request((product.id, 2), currency="USD"))

        assert order.amount_total == Decimal("12.05")
        assert order.exchange_rate == Decimal("83")
        [item] = order.items
        assert item.price_each == Decimal("6.02")
        assert item.subtotal == Decimal("12.05")
        assert item.currency == "USD"

    async def test_item_subtotals_add_up_to_total(self, db, checkout, make_product, checkout_request):
        desk = await make_product(name="Desk", price="500.00", stock=5)
        lamp = await make_product(name="Lamp", price="250.00", stock=5)
        mat = await make_product(name="Mat", price="99.99", stock=5)

        for currency in ("INR", "USD"):
            order = await checkout.create_order(
                db, checkout_request((desk.id, 2), (lamp.id, 1), (mat.id, 3), currency=currency)
            )
            assert sum(item.subtotal for item in order.items) == order.amount_total

    async def test_usd_rounding_residue_is_spread_over_lines(
        self, db, checkout, make_product, checkout_request
    ):
        # Each line converts to 1.0048... USD; rounded alone they would sum to 4.00
        products = [await make_product(name=f"Coaster {n}", price="83.40") for n in range(4)]

        order = await checkout.create_order(
            db, checkout_request(*((p.id, 1) for p in products), currency="USD")
        )

        assert order.amount_total == Decimal("4.02")
        subtotals = [item.subtotal for item in order.items]
        assert sum(subtotals) == Decimal("4.02")
        assert subtotals == [Decimal("1.01"), Decimal("1.01"), Decimal("1.00"), Decimal("1.00")]
        assert all(item.price_each == Decimal("1.00") for item in order.items)

    async def test_separate_billing_address(self, db, checkout, make_product, checkout_request):
        product = await make_product()
        order = await checkout.create_order(
            db,
            checkout_request(
                (product.id, 1),
                same_as_billing=False,
                billing_address="4 Park Street, Kolkata 700016",
            ),
        )
        assert order.billing_address == "4 Park Street, Kolkata 700016"

    async def test_quantity_equal_to_stock_succeeds(self, db, checkout, make_product, checkout_request):
        product = await make_product(stock=3)
        order = await checkout.create_order(db, checkout_request((product.id, 3)))
        assert order.items[0].quantity == 3

    async def test_quantity_above_stock_is_rejected(self, db, checkout, make_product, checkout_request):
        product = await make_product(name="Lamp", stock=3)
        with pytest.raises(OutOfStock) as exc:
            await checkout.create_order(db, checkout_request((product.id, 4)))
        assert exc.value.requested == 4
        assert exc.value.available == 3
        assert exc.value.message == "Insufficient stock for Lamp"

    async def test_duplicate_lines_are_merged_before_stock_check(
        self, db, checkout, make_product, checkout_request
    ):
        product = await make_product(stock=3)
        with pytest.raises(OutOfStock):
            await checkout.create_order(db, checkout_request((product.id, 2), (product.id, 2)))

    async def test_unknown_product(self, db, checkout, checkout_request):
        with pytest.raises(ProductNotFound) as exc:
            await checkout.create_order(db, checkout_request((999, 1)))
        assert exc.value.product_id == 999

    async def test_retired_product_cannot_be_bought(self, db, checkout, make_product, checkout_request):
        product = await make_product(is_active=False)
        with pytest.raises(ProductNotFound):
            await checkout.create_order(db, checkout_request((product.id, 1)))

    async def test_empty_cart(self, db, checkout, checkout_request):
        with pytest.raises(ValidationError, match="Cart is empty"):
            await checkout.create_order(db, checkout_request())

    async def test_no_order_left_behind_on_rejection(
        self, db, checkout, make_product, checkout_request
    ):
        ok = await make_product(name="Desk", stock=5)
        short = await make_product(name="Lamp", stock=1)
        with pytest.raises(OutOfStock):
            await checkout.create_order(db, checkout_request((ok.id, 1), (short.id, 2)))
        count = await db.scalar(select(func.count()).select_from(Order))
        assert count == 0

    async def test_stock_is_not_reserved(self, db, checkout, make_product, checkout_request, fetch):
        product = await make_product(stock=5)
        await checkout.create_order(db, checkout_request((product.id, 2)))
        assert (await fetch(Product, product.id)).stock == 5


class TestOrderPersistence:
    async def test_failed_item_insert_rolls_back_the_order(self, db, make_product):
        product = await make_product()
        order = Order(
            order_number="ORD-ROLLBACK-1",
            name="Asha Rao",
            email="asha@example.com",
            phone="9876543210",
            shipping_address="12 MG Road, Bengaluru",
            billing_address="12 MG Road, Bengaluru",
            currency="INR",
            exchange_rate=Decimal("1"),
            amount_total=Decimal("500.00"),
            status="pending",
        )
        good = OrderItem(
            product_id=product.id, quantity=1, price_each=Decimal("500.00"),
            currency="INR", subtotal=Decimal("500.00"),
        )
        broken = OrderItem(product_id=product.id, quantity=None, currency="INR")

        with pytest.raises(PersistenceError):
            await OrderRepository.create_order(db, order, [good, broken])

        assert await db.scalar(select(func.count()).select_from(Order)) == 0
        assert await db.scalar(select(func.count()).select_from(OrderItem)) == 0


class TestInitiateGatewayPayment:
    async def test_builds_signed_redirect(self, db, checkout, settings, make_product, checkout_request, fetch):
        product = await make_product(price="500.00", stock=5)
        order = await checkout.create_order(db, checkout_request((product.id, 2)))

        redirect = await checkout.initiate_gateway_payment(db, order.id)

        assert redirect.payment_url == "https://test.payu.in/_payment"
        params = redirect.params
        assert params["key"] == "TESTKEY"
        assert params["txnid"] == redirect.transaction_id
        assert params["amount"] == "1000.00"
        assert params["productinfo"] == f"Order {order.order_number}"
        assert params["firstname"] == "Asha"
        assert params["udf1"] == str(order.id)
        assert params["surl"] == "http://api.shop.test/api/checkout/payu-callback/success"
        assert params["furl"] == "http://api.shop.test/api/checkout/payu-callback/failure"
        assert params["hash"] == generate_request_hash(
            settings.payu_merchant_key, settings.payu_merchant_salt, params
        )

    async def test_records_pending_transaction(self, db, checkout, make_product, checkout_request):
        product = await make_product()
        order = await checkout.create_order(db, checkout_request((product.id, 1), currency="USD"))

        redirect = await checkout.initiate_gateway_payment(db, order.id)

        tx = await db.scalar(
            select(Transaction).where(Transaction.gateway_txn_id == redirect.transaction_id)
        )
        assert tx.status == "pending"
        assert tx.order_id == order.id
        assert tx.amount == order.amount_total
        assert tx.currency == "USD"
        assert tx.hash_sent == redirect.params["hash"]
        assert tx.raw_request["txnid"] == redirect.transaction_id
        assert "key" not in tx.raw_request

    async def test_each_attempt_gets_its_own_transaction(self, db, checkout, make_product, checkout_request):
        product = await make_product()
        order = await checkout.create_order(db, checkout_request((product.id, 1)))

        first = await checkout.initiate_gateway_payment(db, order.id)
        second = await checkout.initiate_gateway_payment(db, order.id)

        assert first.transaction_id != second.transaction_id
        count = await db.scalar(
            select(func.count()).select_from(Transaction).where(Transaction.order_id == order.id)
        )
        assert count == 2

    async def test_unknown_order(self, db, checkout):
        with pytest.raises(OrderNotFound):
            await checkout.initiate_gateway_payment(db, 4242)

    async def test_paid_order_cannot_be_paid_again(self, db, checkout, make_product, checkout_request):
        product = await make_product()
        order = await checkout.create_order(db, checkout_request((product.id, 1)))
        await OrderRepository.update_status(db, order.id, "paid")

        with pytest.raises(OrderNotPayable):
            await checkout.initiate_gateway_payment(db, order.id)

    async def test_failed_order_can_be_retried(self, db, checkout, make_product, checkout_request):
        product = await make_product()
        order = await checkout.create_order(db, checkout_request((product.id, 1)))
        await OrderRepository.update_status(db, order.id, "failed")

        redirect = await checkout.initiate_gateway_payment(db, order.id)
        assert redirect.params["udf1"] == str(order.id)
