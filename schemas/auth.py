from typing import Literal

from pydantic import BaseModel


class TokenResponse(BaseModel):
    """
    Ответ при успешном логине.
    """
    access_token: str
    token_type: Literal["bearer"]
    has_profile: bool
    expires_in_ms: int
