"""Seed system roles, default margins and an admin user."""
import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

from agency_pricing.auth.jwt import get_password_hash
from agency_pricing.auth.rbac import SYSTEM_ROLES
from agency_pricing.database import async_session_maker, init_db
from agency_pricing.logging_config import setup_logging
from agency_pricing.models.margin import Margin
from agency_pricing.models.user import CustomRole, LegacyRole, User, UserRole

logger = logging.getLogger("seed_roles")

DEFAULT_MARGINS = [30, 40, 50]
ADMIN_EMAIL = "admin@agency.local"
ADMIN_PASSWORD = "admin12345"


async def seed():
    await init_db()
    async with async_session_maker() as db:
        for name, (description, permissions) in SYSTEM_ROLES.items():
            existing = (await db.execute(select(CustomRole).where(CustomRole.name == name))).scalar_one_or_none()
            if existing is None:
                db.add(CustomRole(name=name, description=description, permissions=permissions, is_system=True))
                logger.info("Created system role %s", name)
            else:
                # Capability maps follow the code; descriptions edited by admins are kept
                existing.permissions = permissions
                existing.is_system = True

        for percentage in DEFAULT_MARGINS:
            r = await db.execute(select(Margin).where(Margin.percentage == percentage))
            if not r.scalar_one_or_none():
                db.add(Margin(percentage=percentage, is_active=True))
        await db.commit()

        r = await db.execute(select(User).where(User.email == ADMIN_EMAIL))
        if not r.scalar_one_or_none():
            user = User(
                email=ADMIN_EMAIL,
                hashed_password=get_password_hash(ADMIN_PASSWORD),
                full_name="Administrateur",
            )
            db.add(user)
            await db.flush()
            db.add(UserRole(user_id=user.id, role=LegacyRole.ADMIN))
            logger.info("Created admin user %s", ADMIN_EMAIL)
        await db.commit()
    logger.info("Seed complete (%s / %s)", ADMIN_EMAIL, ADMIN_PASSWORD)


if __name__ == "__main__":
    setup_logging()
    asyncio.run(seed())
