from datetime import timedelta

import pytest
from fastapi import HTTPException
from jose import jwt

from core.config import settings
from core.security import create_access_token, create_oauth_state, verify_oauth_state


def test_access_token_carries_user_id():
    token, expires = create_access_token(4200001)

    payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    assert payload["user_id"] == 4200001
    assert payload["exp"] == int(expires.timestamp())


def test_oauth_state_round_trip():
    state = create_oauth_state("verifier-123")
    assert verify_oauth_state(state) == "verifier-123"


def test_oauth_state_rejects_foreign_signature():
    forged = jwt.encode(
        {"purpose": "oauth_state", "pkce": "verifier-123"},
        "some-other-secret",
        algorithm="HS256",
    )

    with pytest.raises(HTTPException) as exc:
        verify_oauth_state(forged)

    assert exc.value.status_code == 400


def test_access_token_is_not_accepted_as_oauth_state():
    token, _ = create_access_token(1, expires_delta=timedelta(minutes=5))

    with pytest.raises(HTTPException) as exc:
        verify_oauth_state(token)

    assert exc.value.status_code == 400
