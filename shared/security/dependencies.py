from dataclasses import dataclass

from fastapi import Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from services.auth_service.repository import AdminUserRepository
from shared.config.database import get_db
from shared.config.settings import Settings, get_settings
from .jwt_handler import verify_access_token

# Defines the expected header format (Bearer <token>)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/admin/auth/login", auto_error=False)


@dataclass(frozen=True)
class AdminIdentity:
    id: int
    role: str

    @property
    def is_superadmin(self) -> bool:
        return self.role == "superadmin"


async def get_current_admin(
    request: Request,
    token: str = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
) -> AdminIdentity:
    """
    Dependency gating admin endpoints. Validates the JWT, then loads the
    operator so deactivation and role changes apply to live tokens.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not token:
        raise credentials_exception

    payload = verify_access_token(token, settings)
    if payload is None:
        raise credentials_exception

    try:
        admin_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise credentials_exception

    admin = await AdminUserRepository.get_by_id(db, admin_id)
    if admin is None or not admin.is_active:
        raise credentials_exception
    identity = AdminIdentity(id=admin.id, role=admin.role)

    # Store in request state for downstream use (like rate limiting)
    request.state.admin_id = identity.id
    return identity


async def require_superadmin(admin: AdminIdentity = Depends(get_current_admin)) -> AdminIdentity:
    if not admin.is_superadmin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Superadmin role required",
        )
    return admin
