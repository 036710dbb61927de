"""Утилиты для преобразования моделей пользователей в схемы Pydantic."""
from collections.abc import Iterable
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User
from schemas.user import UserRead
from services.interests import fetch_interest_names


def build_user_read(user: User, interests: Optional[List[str]] = None) -> UserRead:
    return UserRead(
        id=user.id,
        oid=user.oid,
        email=user.email,
        display_name=user.display_name,
        tenant_id=user.tenant_id,
        full_name=user.full_name,
        age=user.age,
        is_rso=user.is_rso,
        major=user.major,
        bio=user.bio,
        image_key=user.image_key,
        interests=interests or [],
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


async def to_user_read(user: User, db: AsyncSession) -> UserRead:
    """Сконвертировать модель пользователя в UserRead со списком интересов."""
    interests = await fetch_interest_names(db, [user.id])
    return build_user_read(user, interests.get(user.id))


async def to_user_reads(users: Iterable[User], db: AsyncSession) -> List[UserRead]:
    """Сконвертировать список пользователей, интересы — одним запросом."""
    users = list(users)
    interests = await fetch_interest_names(db, [u.id for u in users])
    return [build_user_read(u, interests.get(u.id)) for u in users]
