import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Form
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from core.database import get_db
from core.security import get_current_user
from models.user import User
from schemas.user import UserRead
from services.interests import set_user_interests
from utils.s3 import BlobStoreError, delete_object, upload_image
from utils.user_helpers import to_user_read

router = APIRouter(prefix="/user", tags=["users"])

logger = logging.getLogger(__name__)

MIN_AGE = 16
MAX_AGE = 99


def _clean_value(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def _parse_age(value: str) -> Optional[int]:
    cleaned = _clean_value(value)
    if cleaned is None:
        return None
    try:
        age = int(cleaned)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Age must be a number")
    if not MIN_AGE <= age <= MAX_AGE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Age must be between {MIN_AGE} and {MAX_AGE}",
        )
    return age


@router.get(
    "/me",
    response_model=UserRead,
    summary="Получить свой профиль"
)
async def read_my_profile(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UserRead:
    return await to_user_read(current_user, db)


@router.post(
    "/profile",
    response_model=UserRead,
    summary="Обновить свой профиль (multipart/form-data)"
)
async def update_my_profile(
    full_name: Optional[str] = Form(None),
    age: Optional[str] = Form(None),
    major: Optional[str] = Form(None),
    bio: Optional[str] = Form(None),
    is_rso: Optional[bool] = Form(None),
    interests: Optional[List[str]] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UserRead:
    # Строка из пробелов очищает значение, отсутствующее поле не трогаем
    new_age = _parse_age(age) if age is not None else None

    image_key = None
    if image is not None and image.filename:
        data = await image.read()
        if data:
            try:
                image_key = await run_in_threadpool(
                    upload_image, data, f"profiles/{current_user.id}"
                )
            except ValueError as ve:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(ve))
            except BlobStoreError as e:
                raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    if full_name is not None:
        current_user.full_name = _clean_value(full_name)
    if age is not None:
        current_user.age = new_age
    if major is not None:
        current_user.major = _clean_value(major)
    if bio is not None:
        current_user.bio = _clean_value(bio)
    if is_rso is not None:
        current_user.is_rso = is_rso

    old_image_key = current_user.image_key
    if image_key is not None:
        current_user.image_key = image_key

    db.add(current_user)
    if interests is not None:
        await set_user_interests(db, current_user.id, interests)
    await db.commit()
    await db.refresh(current_user)

    logger.info("profile %s updated", current_user.id)

    if image_key is not None and old_image_key:
        try:
            await run_in_threadpool(delete_object, old_image_key)
        except BlobStoreError as e:
            logger.warning("could not delete old image %s: %s", old_image_key, e)

    return await to_user_read(current_user, db)
