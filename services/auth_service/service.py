"""
Operator accounts for the back office. Shoppers never authenticate; only
admins log in. Every gated request re-reads the operator row, so a
deactivated account or a changed role takes effect before the token expires.
"""
import structlog
from fastapi import HTTPException, status
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.settings import Settings
from shared.security.jwt_handler import create_access_token

from .models import AdminUser
from .repository import AdminUserRepository
from .schemas import AdminCreate, AdminLogin, AdminResponse, AdminUpdate, TokenResponse

logger = structlog.get_logger(__name__)

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class AuthService:

    @staticmethod
    def hash_password(password: str) -> str:
        return _pwd_context.hash(password)

    @staticmethod
    def verify_password(plain: str, hashed: str) -> bool:
        return _pwd_context.verify(plain, hashed)

    @staticmethod
    async def create_admin(db: AsyncSession, data: AdminCreate) -> AdminUser:
        existing = await AdminUserRepository.get_by_email(db, data.email)
        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already exists",
            )
        user = AdminUser(
            email=data.email,
            hashed_password=AuthService.hash_password(data.password),
            role=data.role,
            is_active=True,
        )
        return await AdminUserRepository.create(db, user)

    @staticmethod
    async def login(db: AsyncSession, data: AdminLogin, settings: Settings) -> TokenResponse:
        user = await AdminUserRepository.get_by_email(db, data.email)
        if not user or not AuthService.verify_password(data.password, user.hashed_password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password",
                headers={"WWW-Authenticate": "Bearer"},
            )
        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account is disabled",
            )
        token = create_access_token(data={"sub": str(user.id), "role": user.role}, settings=settings)
        return TokenResponse(access_token=token, admin=AdminResponse.model_validate(user))

    @staticmethod
    async def get_admin_by_id(db: AsyncSession, user_id: int) -> AdminUser:
        user = await AdminUserRepository.get_by_id(db, user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Admin not found")
        return user

    @staticmethod
    async def list_admins(db: AsyncSession, include_inactive: bool = True):
        return await AdminUserRepository.list_all(db, include_inactive)

    @staticmethod
    async def _get_or_404(db: AsyncSession, user_id: int) -> AdminUser:
        user = await AdminUserRepository.get_by_id(db, user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return user

    @staticmethod
    async def update_admin(db: AsyncSession, user_id: int, data: AdminUpdate, acting_admin_id: int) -> AdminUser:
        user = await AuthService._get_or_404(db, user_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        # An operator cannot lock themselves out
        if user_id == acting_admin_id and (
            changes.get("is_active") is False or changes.get("role", user.role) != user.role
        ):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot change your own role or deactivate yourself",
            )

        if "email" in changes and changes["email"] != user.email:
            if await AdminUserRepository.get_by_email(db, changes["email"]):
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Email already exists",
                )
            user.email = changes["email"]
        if "password" in changes:
            user.hashed_password = AuthService.hash_password(changes["password"])
        if "role" in changes:
            user.role = changes["role"]
        if "is_active" in changes:
            user.is_active = changes["is_active"]

        user = await AdminUserRepository.save(db, user)
        logger.info(
            "admin_user_updated",
            admin_id=user.id,
            fields=sorted(changes),
            acting_admin_id=acting_admin_id,
        )
        return user

    @staticmethod
    async def deactivate_admin(db: AsyncSession, user_id: int, acting_admin_id: int) -> AdminUser:
        """Accounts are deactivated, never removed, so audit logs keep resolving."""
        if user_id == acting_admin_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete yourself",
            )
        user = await AuthService._get_or_404(db, user_id)
        user.is_active = False
        user = await AdminUserRepository.save(db, user)
        logger.info("admin_user_deactivated", admin_id=user.id, acting_admin_id=acting_admin_id)
        return user
