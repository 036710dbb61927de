from datetime import datetime

from pydantic import BaseModel

from schemas.user import UserRead


class MatchRead(BaseModel):
    id: int
    user1_id: int
    user2_id: int
    created_at: datetime

    class Config:
        from_attributes = True


class MatchWithUser(BaseModel):
    id: int
    user: UserRead
    created_at: datetime
