from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class MessageRead(BaseModel):
    id: int
    sender_id: int
    recipient_id: int
    content: str
    image_key: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
