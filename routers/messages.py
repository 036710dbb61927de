from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, status, UploadFile, File, Form
from fastapi.responses import Response
from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from core.database import get_db
from core.security import get_current_user
from models.message import Message
from models.user import User
from schemas.message import MessageRead
from utils.image_tools import content_type_for_key
from utils.s3 import BlobStoreError, download_object, upload_image

router = APIRouter(prefix="", tags=["messages"])

MAX_MESSAGE_LENGTH = 4000


@router.post(
    "/message",
    response_model=MessageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Отправить сообщение (текст и/или картинка)",
)
async def send_message(
    recipient_id: int = Form(..., description="ID получателя"),
    content: str = Form("", max_length=MAX_MESSAGE_LENGTH),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageRead:
    if recipient_id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot message yourself")

    data = await image.read() if image is not None and image.filename else b""
    content = content.strip()
    if not content and not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message is empty")

    recipient = await db.get(User, recipient_id)
    if not recipient:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recipient not found")

    message = Message(sender_id=current_user.id, recipient_id=recipient_id, content=content)
    db.add(message)
    # flush, чтобы получить id до загрузки картинки
    await db.flush()

    if data:
        try:
            message.image_key = await run_in_threadpool(
                upload_image, data, f"messages/{message.id}"
            )
        except ValueError as ve:
            await db.rollback()
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(ve))
        except BlobStoreError as e:
            await db.rollback()
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    await db.commit()
    await db.refresh(message)
    return MessageRead.model_validate(message)


@router.get(
    "/messages/{user_id}",
    response_model=List[MessageRead],
    summary="Переписка с пользователем, от старых к новым",
)
async def get_messages(
    user_id: int = Path(..., description="ID собеседника"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> List[MessageRead]:
    stmt = (
        select(Message)
        .where(
            or_(
                and_(Message.sender_id == current_user.id, Message.recipient_id == user_id),
                and_(Message.sender_id == user_id, Message.recipient_id == current_user.id),
            )
        )
        .order_by(Message.created_at.asc(), Message.id.asc())
    )
    messages = (await db.execute(stmt)).scalars().all()
    return [MessageRead.model_validate(m) for m in messages]


@router.get(
    "/messages/{message_id}/image",
    summary="Картинка из сообщения",
    response_class=Response,
)
async def get_message_image(
    message_id: int = Path(..., description="ID сообщения"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Response:
    message = await db.get(Message, message_id)
    # Чужие сообщения отдаём как отсутствующие
    if (
        not message
        or not message.image_key
        or current_user.id not in (message.sender_id, message.recipient_id)
    ):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found")

    try:
        data = await run_in_threadpool(download_object, message.image_key)
    except BlobStoreError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return Response(content=data, media_type=content_type_for_key(message.image_key))
