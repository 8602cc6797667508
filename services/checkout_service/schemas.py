from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, model_validator

from services.order_service.schemas import OrderResponse

class CartLine(BaseModel):
    product_id: int
    quantity: int = Field(ge=1)

class CheckoutRequest(BaseModel):
    name: str = Field(min_length=2)
    email: EmailStr
    phone: str = Field(min_length=10, max_length=20)
    shipping_address: str = Field(min_length=10)
    billing_address: Optional[str] = None
    same_as_billing: bool = True
    currency: Literal["INR", "USD"] = "INR"
    items: List[CartLine] = []

    @model_validator(mode="after")
    def billing_address_required(self):
        if not self.same_as_billing and len(self.billing_address or "") < 10:
            raise ValueError("Please enter a complete billing address")
        return self

class CheckoutResponse(BaseModel):
    order: OrderResponse
    message: str = "Order created successfully"

class PaymentInitRequest(BaseModel):
    order_id: int

class GatewayRedirect(BaseModel):
    """Where the browser must POST, and the signed form it must carry."""
    payment_url: str
    transaction_id: str
    params: Dict[str, str]

class ReconciliationResult(BaseModel):
    order_id: Optional[int] = None
    outcome: Literal["success", "failure"]
    message: Optional[str] = None
    duplicate: bool = False
