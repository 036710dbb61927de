from typing import Optional

from pydantic import BaseModel, Field

from schemas.match import MatchRead


class LikeCreate(BaseModel):
    liked_id: int = Field(..., gt=0, description="ID оцениваемого пользователя")
    is_like: bool = Field(..., description="true — лайк, false — пропуск")


class LikeResponse(BaseModel):
    # true только у запроса, который создал матч
    matched: bool
    match: Optional[MatchRead] = None
