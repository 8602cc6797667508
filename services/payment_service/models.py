from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from shared.config.database import Base

TRANSACTION_STATUSES = ("pending", "success", "failure")

_JSONPayload = JSON().with_variant(JSONB(), "postgresql")


class Transaction(Base):
    __tablename__ = "payment_transactions"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    # Generated by us, echoed back by the gateway: the reconciliation key
    gateway_txn_id = Column(String(100), unique=True, nullable=False, index=True)
    gateway_payment_id = Column(String(100), nullable=True) # PayU mihpayid, set on callback
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    status = Column(String(20), nullable=False, default="pending") # pending, success, failure
    hash_sent = Column(Text, nullable=True)
    hash_received = Column(Text, nullable=True)
    raw_request = Column(_JSONPayload, nullable=True)
    raw_response = Column(_JSONPayload, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
