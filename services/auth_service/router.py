from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.config.settings import Settings, get_settings
from shared.security import limiter
from shared.security.dependencies import AdminIdentity, get_current_admin, require_superadmin

from .schemas import AdminCreate, AdminLogin, AdminResponse, AdminUpdate, TokenResponse
from .service import AuthService

router = APIRouter(tags=["Authentication"])
users_router = APIRouter(dependencies=[Depends(get_current_admin)], tags=["Admin users"])


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Authenticate an operator and receive a JWT access token",
)
@limiter.limit(get_settings().login_rate_limit)
async def login(
    request: Request,
    payload: AdminLogin,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return await AuthService.login(db, payload, settings)


@router.get(
    "/me",
    response_model=AdminResponse,
    summary="Get the current operator's profile",
)
async def get_me(
    admin: AdminIdentity = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await AuthService.get_admin_by_id(db, admin.id)


@users_router.get("/", response_model=list[AdminResponse])
async def list_admins(include_inactive: bool = True, db: AsyncSession = Depends(get_db)):
    return await AuthService.list_admins(db, include_inactive)


@users_router.post(
    "/",
    response_model=AdminResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_superadmin)],
)
async def create_admin(payload: AdminCreate, db: AsyncSession = Depends(get_db)):
    return await AuthService.create_admin(db, payload)


@users_router.put("/{user_id}", response_model=AdminResponse)
async def update_admin(
    user_id: int,
    payload: AdminUpdate,
    admin: AdminIdentity = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db),
):
    return await AuthService.update_admin(db, user_id, payload, admin.id)


@users_router.delete("/{user_id}")
async def delete_admin(
    user_id: int,
    admin: AdminIdentity = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db),
):
    await AuthService.deactivate_admin(db, user_id, admin.id)
    return {"message": "User deleted"}
