from typing import Optional, List
from datetime import datetime

from pydantic import BaseModel, Field


class UserRead(BaseModel):
    """Публичное представление пользователя. Токены провайдера сюда не попадают."""

    id: int = Field(..., description="PK в базе данных")
    oid: str = Field(..., description="Object ID в Microsoft Entra ID")
    email: Optional[str] = None
    display_name: Optional[str] = None
    tenant_id: Optional[str] = None

    full_name: Optional[str] = Field(None, max_length=100)
    age: Optional[int] = None
    is_rso: bool = Field(False, description="Состоит ли в студенческой организации (RSO)")
    major: Optional[str] = Field(None, description="Специальность")
    bio: Optional[str] = None
    image_key: Optional[str] = Field(None, description="Ключ картинки профиля в хранилище")
    interests: List[str] = Field([], description="Названия интересов по алфавиту")

    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
