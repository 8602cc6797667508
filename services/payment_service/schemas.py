from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel

class TransactionResponse(BaseModel):
    id: int
    order_id: int
    gateway_txn_id: str
    gateway_payment_id: Optional[str]
    amount: Decimal
    currency: str
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class TransactionAuditResponse(TransactionResponse):
    """Admin view, including the signatures and raw gateway payloads."""
    hash_sent: Optional[str]
    hash_received: Optional[str]
    raw_request: Optional[Dict[str, Any]]
    raw_response: Optional[Dict[str, Any]]
