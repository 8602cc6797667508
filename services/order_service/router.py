from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from shared.config.database import get_db
from shared.security.dependencies import AdminIdentity, get_current_admin
from .schemas import OrderDetailResponse, OrderResponse, OrderStatusUpdate
from .service import OrderService

# THIS PROTECTS THE ENTIRE ADMIN SURFACE
router = APIRouter(dependencies=[Depends(get_current_admin)])
public_router = APIRouter()

# Payment landing pages poll this after the gateway redirect
@public_router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_order(order_id: int, db: AsyncSession = Depends(get_db)):
    return await OrderService.get_order_detail(db, order_id)


@router.get("/", response_model=list[OrderResponse])
async def list_orders(db: AsyncSession = Depends(get_db)):
    return await OrderService.list_orders(db)

@router.get("/{order_id}", response_model=OrderDetailResponse)
async def admin_get_order(order_id: int, db: AsyncSession = Depends(get_db)):
    return await OrderService.get_order_detail(db, order_id)

@router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    admin: AdminIdentity = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.override_status(db, order_id, payload.status, admin.id)
