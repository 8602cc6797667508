"""
Domain errors raised by the checkout flow. Each carries the HTTP status the
app-level exception handler in main.py renders it with.

Gateway signature mismatches have no error class: a bad callback is a
normal "payment failed" outcome, never an exception.
"""
from fastapi import status


class StorefrontError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StorefrontError):
    status_code = status.HTTP_400_BAD_REQUEST


class ProductNotFound(StorefrontError):
    # Surfaced as a rejected checkout, the customer fixes the cart
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class OutOfStock(StorefrontError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, product_id: int, product_name: str, requested: int, available: int):
        super().__init__(f"Insufficient stock for {product_name}")
        self.product_id = product_id
        self.requested = requested
        self.available = available


class OrderNotFound(StorefrontError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, order_id: int):
        super().__init__("Order not found")
        self.order_id = order_id


class OrderNotPayable(StorefrontError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, order_id: int, order_status: str):
        super().__init__(f"Order {order_id} is {order_status} and cannot be paid")
        self.order_id = order_id
        self.order_status = order_status


class PersistenceError(StorefrontError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
