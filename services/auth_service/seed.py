"""
Creates the first superadmin so the back office can be reached.

Usage: python -m services.auth_service.seed
Reads INITIAL_ADMIN_EMAIL / INITIAL_ADMIN_PASSWORD from the environment.
"""
import asyncio
import sys

import structlog

from shared.config.database import AsyncSessionLocal, Base, engine
from shared.config.settings import get_settings
from shared.observability import configure_logging

from .repository import AdminUserRepository
from .schemas import AdminCreate
from .service import AuthService

logger = structlog.get_logger(__name__)


async def seed_admin() -> int:
    settings = get_settings()
    if not settings.initial_admin_email or not settings.initial_admin_password:
        logger.error("seed_admin_missing_credentials")
        return 1

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        existing = await AdminUserRepository.get_by_email(db, settings.initial_admin_email)
        if existing:
            logger.info("seed_admin_exists", email=existing.email)
            return 0
        admin = await AuthService.create_admin(
            db,
            AdminCreate(
                email=settings.initial_admin_email,
                password=settings.initial_admin_password,
                role="superadmin",
            ),
        )
    logger.info("seed_admin_created", admin_id=admin.id, email=admin.email)
    return 0


def main() -> None:
    configure_logging("storefront-seed", get_settings().log_level)
    sys.exit(asyncio.run(seed_admin()))


if __name__ == "__main__":
    main()
