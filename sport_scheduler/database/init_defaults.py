#!/usr/bin/env python3
"""
Initialize default database values.
This script is run on startup to make sure an admin account exists.
"""

import asyncio
import logging
import os

from sport_scheduler.database import db
from sport_scheduler.database.models import UserRole
from sport_scheduler.services import auth_service, user_service

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_NAME = "Admin"
DEFAULT_ADMIN_EMAIL = os.getenv("DEFAULT_ADMIN_EMAIL", "admin@example.com")
DEFAULT_ADMIN_PASSWORD = os.getenv("DEFAULT_ADMIN_PASSWORD", "admin123")


async def init_defaults() -> bool:
    """
    Create the default admin account if it does not exist yet.

    Returns:
        True if the admin was created, False if it already existed
    """
    async with db.AsyncSessionLocal() as session:
        existing = await user_service.get_user_by_email(session, DEFAULT_ADMIN_EMAIL)
        if existing:
            logger.info(f"Default admin already exists: {DEFAULT_ADMIN_EMAIL}")
            return False

        await user_service.create_user(
            session,
            name=DEFAULT_ADMIN_NAME,
            email=DEFAULT_ADMIN_EMAIL,
            password_hash=auth_service.hash_password(DEFAULT_ADMIN_PASSWORD),
            role=UserRole.ADMIN.value,
        )
        logger.info(f"Created default admin: {DEFAULT_ADMIN_EMAIL}")
        return True


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    async def _main():
        await db.init_database()
        await init_defaults()

    asyncio.run(_main())
