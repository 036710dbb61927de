"""Вход через Microsoft identity platform: authorization code + PKCE."""
import base64
import hashlib
import logging
import secrets
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

from aiohttp import ClientError, ClientSession, ClientTimeout
from jose import jwt, JWTError
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from core.config import settings
from core.database import upsert
from core.id_generator import MAX_ID_ATTEMPTS, IdAllocationError, generate_random_id
from core.security import create_oauth_state
from models.user import User

logger = logging.getLogger(__name__)

SCOPES = ("openid", "email", "profile", "offline_access")
TOKEN_TIMEOUT = ClientTimeout(total=10)


class OAuthError(Exception):
    pass


@dataclass
class IdTokenClaims:
    oid: str
    email: Optional[str] = None
    name: Optional[str] = None
    tid: Optional[str] = None


def _pkce_challenge(verifier: str) -> str:
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def build_authorize_url() -> str:
    verifier = secrets.token_urlsafe(64)
    params = {
        "client_id": settings.AZURE_CLIENT_ID,
        "response_type": "code",
        "redirect_uri": settings.REDIRECT_URL,
        "response_mode": "query",
        "scope": " ".join(SCOPES),
        "state": create_oauth_state(verifier),
        "code_challenge": _pkce_challenge(verifier),
        "code_challenge_method": "S256",
    }
    return f"{settings.authority_url}/authorize?{urlencode(params)}"


def parse_id_token(id_token: str) -> IdTokenClaims:
    """Читает claims без проверки подписи: токен получен напрямую от token endpoint."""
    try:
        claims = jwt.get_unverified_claims(id_token)
    except JWTError as e:
        raise OAuthError("malformed id_token") from e

    oid = claims.get("oid")
    if not oid:
        raise OAuthError("id_token has no 'oid' claim")
    return IdTokenClaims(
        oid=oid,
        email=claims.get("email") or claims.get("preferred_username"),
        name=claims.get("name"),
        tid=claims.get("tid"),
    )


async def exchange_code(code: str, pkce_verifier: str) -> IdTokenClaims:
    form = {
        "client_id": settings.AZURE_CLIENT_ID,
        "client_secret": settings.AZURE_CLIENT_SECRET,
        "code": code,
        "code_verifier": pkce_verifier,
        "redirect_uri": settings.REDIRECT_URL,
        "grant_type": "authorization_code",
    }
    status = None
    try:
        async with ClientSession(timeout=TOKEN_TIMEOUT) as session:
            async with session.post(f"{settings.authority_url}/token", data=form) as resp:
                status = resp.status
                payload = await resp.json(content_type=None)
    except ClientError as e:
        logger.warning("token exchange failed: %s", e)
        raise OAuthError(f"token exchange failed: {e}") from e
    except ValueError as e:
        # HTML-страница ошибки вместо JSON
        logger.warning("token endpoint returned non-JSON body (status %s)", status)
        raise OAuthError(f"token endpoint returned a non-JSON response ({status})") from e

    if not isinstance(payload, dict):
        raise OAuthError(f"unexpected token endpoint response ({status})")
    if status != 200:
        raise OAuthError(payload.get("error_description") or f"token endpoint returned {status}")

    id_token = payload.get("id_token")
    if not id_token:
        raise OAuthError("missing id_token")
    return parse_id_token(id_token)


async def upsert_user(db: AsyncSession, claims: IdTokenClaims) -> User:
    """
    Создаёт пользователя по oid или обновляет данные из провайдера.

    Сначала UPDATE по oid; если такого нет, INSERT ... ON CONFLICT DO NOTHING
    без conflict target. Пустой результат значит, что oid вставили
    параллельно или случайный id уже занят: тогда цикл повторяется.
    """
    provider_fields = {
        "email": claims.email,
        "display_name": claims.name,
        "tenant_id": claims.tid,
    }
    options = {"populate_existing": True}

    for _ in range(MAX_ID_ATTEMPTS):
        update_stmt = (
            update(User)
            .where(User.oid == claims.oid)
            .values(**provider_fields, updated_at=func.now())
            .returning(User)
        )
        user = (await db.scalars(update_stmt, execution_options=options)).one_or_none()

        if user is None:
            insert_stmt = (
                upsert(db, User)
                .values(id=generate_random_id("users"), oid=claims.oid, **provider_fields)
                .on_conflict_do_nothing()
                .returning(User)
            )
            user = (await db.scalars(insert_stmt, execution_options=options)).one_or_none()

        if user is not None:
            await db.commit()
            return user

        logger.warning("user id for oid %s already taken, retrying", claims.oid)

    await db.rollback()
    raise IdAllocationError(f"Could not allocate a user id for oid {claims.oid}")
