from datetime import timedelta

import jwt
import pytest

from app.core.config import settings
from app.core.errors import InvalidToken, TokenExpired
from app.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    needs_refresh,
    verify_password,
)
from conftest import API, auth


def test_token_roundtrip_keeps_identity():
    token = create_access_token(user_id=42, email="alice@example.com", role="admin")
    payload = decode_access_token(token)
    assert payload.user_id == 42
    assert payload.email == "alice@example.com"
    assert payload.role == "admin"
    assert payload.is_admin


def test_token_expires_after_a_day_by_default():
    token = create_access_token(user_id=1, email="a@example.com", role="user")
    claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    assert claims["exp"] - claims["iat"] == 24 * 60 * 60
    assert claims["sub"] == "1"


def test_expired_token_is_rejected():
    token = create_access_token(1, "a@example.com", "user", expires_delta=timedelta(seconds=-10))
    with pytest.raises(TokenExpired):
        decode_access_token(token)


def test_token_signed_with_another_key_is_invalid():
    forged = jwt.encode(
        {"sub": "1", "email": "a@example.com", "role": "admin", "exp": 9999999999},
        "some-other-secret-key-of-reasonable-length-1234",
        algorithm="HS256",
    )
    with pytest.raises(InvalidToken):
        decode_access_token(forged)


def test_garbage_token_is_invalid():
    with pytest.raises(InvalidToken):
        decode_access_token("not.a.token")


def test_refresh_advised_inside_last_hour():
    fresh = decode_access_token(create_access_token(1, "a@example.com", "user"))
    ending = decode_access_token(
        create_access_token(1, "a@example.com", "user", expires_delta=timedelta(minutes=30))
    )
    assert not needs_refresh(fresh)
    assert needs_refresh(ending)


def test_password_hash_is_one_way():
    hashed = get_password_hash("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)


def test_missing_token_is_unauthorized(client):
    response = client.get(f"{API}/user/stats")
    assert response.status_code == 401
    assert response.json()["code"] == "NO_TOKEN"


def test_expired_token_is_unauthorized(client):
    token = create_access_token(1, "a@example.com", "user", expires_delta=timedelta(seconds=-10))
    response = client.get(f"{API}/user/stats", headers=auth(token))
    assert response.status_code == 401
    assert response.json()["code"] == "TOKEN_EXPIRED"


def test_tampered_token_is_unauthorized(client, user_token):
    header, body, signature = user_token.split(".")
    tampered = f"{header}.{body}.{signature[::-1]}"
    response = client.get(f"{API}/user/stats", headers=auth(tampered))
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_TOKEN"


def test_refresh_header_on_nearly_expired_token(client, user_token):
    payload = decode_access_token(user_token)
    short = create_access_token(
        payload.user_id, payload.email, payload.role, expires_delta=timedelta(minutes=10)
    )
    response = client.get(f"{API}/user/stats", headers=auth(short))
    assert response.status_code == 200
    assert response.headers["X-Token-Refresh-Needed"] == "true"

    response = client.get(f"{API}/user/stats", headers=auth(user_token))
    assert "X-Token-Refresh-Needed" not in response.headers


def test_user_is_forbidden_from_admin_actions(client, user_token):
    response = client.post(f"{API}/roadmaps", headers=auth(user_token), json={
        "title": "Sneaky", "description": "Should not exist",
    })
    assert response.status_code == 403
    assert response.json()["code"] == "INSUFFICIENT_PRIVILEGES"


def test_anonymous_admin_action_is_unauthorized(client):
    response = client.post(f"{API}/roadmaps", json={"title": "x", "description": "y"})
    assert response.status_code == 401
