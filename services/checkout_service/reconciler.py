"""
Applies asynchronous gateway callbacks to the transaction, order and stock.

Callbacks are untrusted and may be redelivered. Each one is matched to its
Transaction by gateway txnid, and the transaction row is claimed with a
compare-and-swap on ``status = 'pending'``: exactly one delivery wins and
applies order/stock effects, every later one is a no-op. Nothing raised in
here reaches the HTTP layer; an unexpected error rolls back and is reported
as a failed payment.
"""
from typing import Mapping, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from services.order_service.repository import OrderRepository
from services.payment_service.gateway import SUCCESS_STATUS, PayUGateway
from services.payment_service.repository import TransactionRepository
from services.product_service.repository import ProductRepository
from shared.config.settings import Settings
from shared.observability import (
    ecomm_payment_callbacks_total,
    ecomm_signature_mismatch_total,
    ecomm_stock_conflicts_total,
)
from .schemas import ReconciliationResult

logger = structlog.get_logger(__name__)


def _parse_order_id(value: Optional[str]) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class CallbackReconciler:
    def __init__(self, settings: Settings):
        self.gateway = PayUGateway(settings)

    async def handle_success_callback(self, db: AsyncSession, params: Mapping[str, str]) -> ReconciliationResult:
        return await self._reconcile(db, params, kind="success")

    async def handle_failure_callback(self, db: AsyncSession, params: Mapping[str, str]) -> ReconciliationResult:
        return await self._reconcile(db, params, kind="failure")

    async def _reconcile(self, db: AsyncSession, params: Mapping[str, str], kind: str) -> ReconciliationResult:
        raw = {key: "" if value is None else str(value) for key, value in params.items()}
        log = logger.bind(kind=kind, txnid=raw.get("txnid"))
        try:
            result = await self._apply(db, raw, kind, log)
        except Exception:
            await db.rollback()
            log.exception("payment_callback_error")
            ecomm_payment_callbacks_total.labels(kind=kind, outcome="error").inc()
            return ReconciliationResult(
                order_id=_parse_order_id(raw.get("udf1")),
                outcome="failure",
                message="Payment could not be processed",
            )

        label = "duplicate" if result.duplicate else result.outcome
        if result.message == "Unknown transaction":
            label = "unknown"
        ecomm_payment_callbacks_total.labels(kind=kind, outcome=label).inc()
        return result

    async def _apply(self, db: AsyncSession, raw: dict[str, str], kind: str, log) -> ReconciliationResult:
        txn_id = raw.get("txnid", "")
        claimed_order_id = _parse_order_id(raw.get("udf1"))

        tx = await TransactionRepository.get_by_gateway_txn_id(db, txn_id) if txn_id else None
        if tx is None:
            # Nothing to reconcile against: never touch an order on the
            # strength of udf1 alone.
            log.warning("payment_callback_unknown_transaction", claimed_order_id=claimed_order_id)
            return ReconciliationResult(
                order_id=claimed_order_id,
                outcome="failure",
                message="Unknown transaction",
            )

        order_id = tx.order_id
        log = log.bind(order_id=order_id, transaction_id=tx.id)
        if claimed_order_id is not None and claimed_order_id != order_id:
            log.warning("payment_callback_order_mismatch", claimed_order_id=claimed_order_id)

        if tx.status != "pending":
            log.info("payment_callback_duplicate", status=tx.status)
            return self._duplicate_result(order_id, tx.status)

        is_valid = self.gateway.verify_callback(raw)
        if not is_valid:
            ecomm_signature_mismatch_total.labels(kind=kind).inc()
            log.warning("payment_signature_mismatch")

        reported = raw.get("status", "")
        if kind == "success" and reported == SUCCESS_STATUS and is_valid:
            resolved = "success"
        else:
            resolved = "failure"

        claimed = await TransactionRepository.resolve_pending(
            db,
            tx.id,
            status=resolved,
            gateway_payment_id=raw.get("mihpayid") or None,
            hash_received=raw.get("hash") or None,
            raw_response=raw,
        )
        if not claimed:
            # A concurrent delivery resolved it between our read and write
            await db.rollback()
            current = await TransactionRepository.get_by_gateway_txn_id(db, txn_id)
            log.info("payment_callback_duplicate", status=current.status)
            return self._duplicate_result(order_id, current.status)

        if resolved == "success":
            paid = await OrderRepository.transition_status(db, order_id, ("pending", "failed"), "paid")
            if paid:
                await self._take_stock(db, order_id, log)
            else:
                # Already paid through another attempt, or cancelled by an operator
                log.warning("payment_success_order_not_payable")
        else:
            await OrderRepository.transition_status(db, order_id, ("pending",), "failed")

        await db.commit()
        log.info("payment_reconciled", status=resolved, reported_status=reported, signature_valid=is_valid)

        if resolved == "success":
            return ReconciliationResult(order_id=order_id, outcome="success")
        return ReconciliationResult(
            order_id=order_id,
            outcome="failure",
            message=self._failure_reason(raw, is_valid),
        )

    async def _take_stock(self, db: AsyncSession, order_id: int, log) -> bool:
        """
        Decrement stock for every line of a newly paid order, all or nothing.
        A line that can no longer be covered rolls back the lines already
        taken and flags the order for an operator.
        """
        items = await OrderRepository.get_items(db, order_id)
        taken = []
        for item in items:
            if await ProductRepository.decrement_stock(db, item.product_id, item.quantity):
                taken.append(item)
                continue

            for done in reversed(taken):
                await ProductRepository.restore_stock(db, done.product_id, done.quantity)
            await OrderRepository.flag_stock_conflict(db, order_id)
            ecomm_stock_conflicts_total.inc()
            log.critical(
                "stock_conflict",
                product_id=item.product_id,
                quantity=item.quantity,
            )
            return False
        return True

    @staticmethod
    def _duplicate_result(order_id: int, status: str) -> ReconciliationResult:
        outcome = "success" if status == "success" else "failure"
        message = None if outcome == "success" else "Payment failed"
        return ReconciliationResult(order_id=order_id, outcome=outcome, message=message, duplicate=True)

    @staticmethod
    def _failure_reason(raw: Mapping[str, str], is_valid: bool) -> str:
        if raw.get("error_Message"):
            return raw["error_Message"]
        if not is_valid:
            return "Payment verification failed"
        return "Payment failed"
