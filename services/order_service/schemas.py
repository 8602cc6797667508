from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel

from services.payment_service.schemas import TransactionResponse

class OrderItemResponse(BaseModel):
    id: int
    product_id: int
    quantity: int
    price_each: Decimal
    currency: str
    subtotal: Decimal

    class Config:
        from_attributes = True

class OrderResponse(BaseModel):
    id: int
    order_number: str
    name: str
    email: str
    phone: str
    shipping_address: str
    billing_address: str
    currency: str
    exchange_rate: Decimal
    amount_total: Decimal
    status: str
    stock_conflict: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItemResponse] = []

    class Config:
        from_attributes = True

class OrderDetailResponse(OrderResponse):
    transactions: List[TransactionResponse] = []

class OrderStatusUpdate(BaseModel):
    # Operators may override a gateway outcome but never reopen an order
    status: Literal["paid", "failed", "cancelled"]
