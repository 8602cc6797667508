"""
Shopper-facing checkout and the two PayU callback endpoints.

The callbacks are hit by the gateway through the shopper's browser, so they
always answer with a redirect to a landing page, never with an error.
"""
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from services.order_service.schemas import OrderResponse
from shared.config.database import get_db
from shared.config.settings import Settings, get_settings
from shared.security import limiter

from .reconciler import CallbackReconciler
from .schemas import (
    CheckoutRequest,
    CheckoutResponse,
    GatewayRedirect,
    PaymentInitRequest,
    ReconciliationResult,
)
from .service import CheckoutService

router = APIRouter()


def get_checkout_service(settings: Settings = Depends(get_settings)) -> CheckoutService:
    return CheckoutService(settings)


def get_reconciler(settings: Settings = Depends(get_settings)) -> CallbackReconciler:
    return CallbackReconciler(settings)


def landing_redirect(settings: Settings, result: ReconciliationResult) -> RedirectResponse:
    query = {}
    if result.order_id is not None:
        query["orderId"] = result.order_id
    if result.outcome == "success":
        page = "success"
    else:
        page = "failure"
        query["error"] = result.message or "Payment failed"
    url = f"{settings.landing_base_url}/payment/{page}"
    if query:
        url = f"{url}?{urlencode(query)}"
    return RedirectResponse(url, status_code=303)


@router.post("/create", response_model=CheckoutResponse)
@limiter.limit(get_settings().checkout_rate_limit)
async def create_order(
    request: Request,                          # REQUIRED: slowapi needs this to check IP/Headers
    payload: CheckoutRequest,
    db: AsyncSession = Depends(get_db),
    checkout: CheckoutService = Depends(get_checkout_service),
):
    order = await checkout.create_order(db, payload)
    return CheckoutResponse(order=OrderResponse.model_validate(order))


@router.post("/payu-init", response_model=GatewayRedirect)
async def init_payment(
    payload: PaymentInitRequest,
    db: AsyncSession = Depends(get_db),
    checkout: CheckoutService = Depends(get_checkout_service),
):
    return await checkout.initiate_gateway_payment(db, payload.order_id)


@router.post("/payu-callback/success", include_in_schema=False)
async def payu_success_callback(
    request: Request,
    db: AsyncSession = Depends(get_db),
    reconciler: CallbackReconciler = Depends(get_reconciler),
    settings: Settings = Depends(get_settings),
):
    params = dict(await request.form())
    result = await reconciler.handle_success_callback(db, params)
    return landing_redirect(settings, result)


@router.post("/payu-callback/failure", include_in_schema=False)
async def payu_failure_callback(
    request: Request,
    db: AsyncSession = Depends(get_db),
    reconciler: CallbackReconciler = Depends(get_reconciler),
    settings: Settings = Depends(get_settings),
):
    params = dict(await request.form())
    result = await reconciler.handle_failure_callback(db, params)
    return landing_redirect(settings, result)
