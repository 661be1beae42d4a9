"""
Credential store — user records keyed by id and by (unique, lowercase) email.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import User

logger = logging.getLogger(__name__)


class DuplicateEmail(Exception):
    """Another user already holds this email."""


def to_uuid(value: str | uuid.UUID) -> Optional[uuid.UUID]:
    """Parse an id; malformed ids come back as ``None``."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(value)
    except (ValueError, TypeError, AttributeError):
        return None


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    result = await session.execute(
        select(User).where(User.email == email.strip().lower())
    )
    return result.scalar_one_or_none()


async def get_user_by_id(session: AsyncSession, user_id: str | uuid.UUID) -> Optional[User]:
    uid = to_uuid(user_id)
    if uid is None:
        return None
    result = await session.execute(select(User).where(User.id == uid))
    return result.scalar_one_or_none()


async def create_user(
    session: AsyncSession,
    *,
    name: str,
    email: str,
    password_hash: str,
) -> User:
    """
    Insert a user holding an already-hashed password.

    Raises ``DuplicateEmail`` when the email is taken, including when a concurrent
    registration wins the race to the unique index.
    """
    if await get_user_by_email(session, email) is not None:
        raise DuplicateEmail(email)

    user = User(id=uuid.uuid4(), name=name, email=email, password_hash=password_hash, avatar=None)
    session.add(user)
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        raise DuplicateEmail(email) from exc
    logger.info("Created user %s", user.id)
    return user


async def count_users(session: AsyncSession) -> int:
    result = await session.execute(select(func.count()).select_from(User))
    return int(result.scalar_one())
