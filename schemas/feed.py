from pydantic import BaseModel, Field

from schemas.user import UserRead


class CandidateRead(BaseModel):
    user: UserRead
    score: int = Field(..., ge=0, description="Очки совместимости")
