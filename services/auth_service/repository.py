from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import AdminUser


class AdminUserRepository:

    @staticmethod
    async def create(db: AsyncSession, admin: AdminUser) -> AdminUser:
        db.add(admin)
        await db.commit()
        await db.refresh(admin)
        return admin

    @staticmethod
    async def save(db: AsyncSession, admin: AdminUser) -> AdminUser:
        """Commit changes made to an already loaded operator."""
        await db.commit()
        await db.refresh(admin)
        return admin

    @staticmethod
    async def get_by_id(db: AsyncSession, admin_id: int) -> Optional[AdminUser]:
        return await db.get(AdminUser, admin_id)

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[AdminUser]:
        result = await db.execute(select(AdminUser).where(AdminUser.email == email))
        return result.scalars().first()

    @staticmethod
    async def list_all(db: AsyncSession, include_inactive: bool = True):
        stmt = select(AdminUser).order_by(AdminUser.id)
        if not include_inactive:
            stmt = stmt.where(AdminUser.is_active.is_(True))
        result = await db.execute(stmt)
        return result.scalars().all()

