"""
Create the tables and load demo data.

    python -m pilgrimpath.seed

Demo users are created or reset; demo notifications are added only when the
notifications table is empty.
"""

import asyncio
import logging
from datetime import timedelta

from sqlalchemy import func, select

from pilgrimpath.core.config import settings
from pilgrimpath.core.database import AsyncSessionLocal, create_tables, engine
from pilgrimpath.core.logging import setup_logging
from pilgrimpath.core.security import get_password_hash
from pilgrimpath.models.common import utcnow
from pilgrimpath.models.notification import Notification
from pilgrimpath.models.user import User

logger = logging.getLogger(__name__)

DEMO_USERS = [
    {"name": "Admin User", "email": "admin@pilgrimpath.com", "password": "admin123",
     "phone": "+91 9876543210", "role": "admin", "language": "en"},
    {"name": "Sector Moderator", "email": "moderator@pilgrimpath.com", "password": "mod123",
     "phone": "+91 9876543214", "role": "moderator", "language": "en"},
    {"name": "John Doe", "email": "john@example.com", "password": "user123",
     "phone": "+91 9876543211", "role": "user", "language": "en"},
    {"name": "राम शर्मा", "email": "ram@example.com", "password": "user123",
     "phone": "+91 9876543212", "role": "user", "language": "hi"},
    {"name": "ராஜ் குமார்", "email": "raj@example.com", "password": "user123",
     "phone": "+91 9876543213", "role": "user", "language": "ta"},
]


def demo_notifications():
    now = utcnow()
    return [
        Notification(
            title="Crowd Alert",
            message="High crowd density detected in Sector A. Please use alternative routes.",
            type="alert",
            priority="high",
            sector="A",
            timestamp=now,
            is_read=False,
        ),
        Notification(
            title="Emergency Update",
            message="Medical emergency reported in Sector B. Medical team dispatched.",
            type="emergency",
            priority="critical",
            sector="B",
            timestamp=now - timedelta(minutes=5),
            is_read=False,
        ),
    ]


async def seed():
    await create_tables()
    async with AsyncSessionLocal() as session:
        for data in DEMO_USERS:
            result = await session.execute(select(User).where(User.email == data["email"]))
            user = result.scalar_one_or_none()
            if user is None:
                user = User(email=data["email"])
                session.add(user)
            user.name = data["name"]
            user.phone = data["phone"]
            user.role = data["role"]
            user.language = data["language"]
            user.is_active = True
            user.hashed_password = get_password_hash(data["password"])
            logger.info("Seeded user: %s (%s)", data["name"], data["email"])

        existing = (await session.execute(select(func.count(Notification.id)))).scalar_one()
        if existing == 0:
            session.add_all(demo_notifications())
            logger.info("Created demo notifications")
        await session.commit()
    await engine.dispose()


if __name__ == "__main__":
    setup_logging(settings.LOG_LEVEL)
    asyncio.run(seed())
