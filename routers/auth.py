# routers/auth.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import create_access_token, verify_oauth_state
from schemas.auth import TokenResponse
from services.oauth import OAuthError, build_authorize_url, exchange_code, upsert_user

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get(
    "/login",
    summary="Редирект на страницу входа Microsoft",
)
async def login() -> RedirectResponse:
    return RedirectResponse(build_authorize_url(), status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.get(
    "/callback",
    response_model=TokenResponse,
    summary="OAuth callback: обмен code на токены → выдаёт JWT",
)
async def callback(
    code: str = Query(...),
    state: str = Query(...),
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    pkce_verifier = verify_oauth_state(state)

    try:
        claims = await exchange_code(code, pkce_verifier)
    except OAuthError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    user = await upsert_user(db, claims)

    access_token, expires = create_access_token(user.id)
    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        has_profile=bool(user.full_name),
        expires_in_ms=int(expires.timestamp() * 1000),
    )
