import pytest

from app.core.security import create_access_token
from conftest import API, auth, register_and_login


def register(client, **overrides):
    payload = {"username": "Alice", "email": "alice@example.com", "password": "secret123"}
    payload.update(overrides)
    return client.post(f"{API}/register", json=payload)


@pytest.mark.parametrize("username,password", [
    ("Alice", "secret123"),
    ("Someone Else", "another-password"),
])
def test_duplicate_email_is_rejected(client, username, password):
    assert register(client).status_code == 201
    response = register(client, username=username, password=password)
    assert response.status_code == 409
    assert response.json()["code"] == "EMAIL_EXISTS"


def test_duplicate_email_ignores_case(client):
    assert register(client).status_code == 201
    response = register(client, email="ALICE@Example.com")
    assert response.status_code == 409


@pytest.mark.parametrize("overrides,field", [
    ({"username": "   "}, "username"),
    ({"email": "not-an-email"}, "email"),
    ({"email": "alice@example..com"}, "email"),
    ({"email": "alice@"}, "email"),
    ({"password": "12345"}, "password"),
    ({"password": "      "}, "password"),
])
def test_registration_validation(client, overrides, field):
    response = register(client, **overrides)
    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert field in body["error"]


def test_registration_requires_all_fields(client):
    response = client.post(f"{API}/register", json={"email": "alice@example.com"})
    assert response.status_code == 400
    assert "username" in response.json()["error"]
    assert "password" in response.json()["error"]


def test_password_is_not_returned_or_stored_plain(client):
    body = register(client).json()
    assert "password" not in body
    assert "hashed_password" not in body


def test_login_errors_do_not_reveal_which_part_failed(client):
    register(client)
    unknown = client.post(f"{API}/login", json={"email": "nobody@example.com", "password": "secret123"})
    wrong = client.post(f"{API}/login", json={"email": "alice@example.com", "password": "nope-nope"})
    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json()
    assert unknown.json()["error"] == "Invalid email or password"


def test_login_normalizes_email_and_records_last_login(client):
    register(client)
    response = client.post(f"{API}/login", json={"email": " Alice@Example.COM ", "password": "secret123"})
    assert response.status_code == 200
    user = response.json()["user"]
    assert user["email"] == "alice@example.com"
    assert user["last_login"] is not None


def test_profile_roundtrip(client):
    token = register_and_login(client)
    profile = client.get(f"{API}/profile", headers=auth(token)).json()
    assert profile["username"] == "Alice"

    response = client.put(f"{API}/profile", headers=auth(token), json={"username": "Alice L."})
    assert response.status_code == 200
    assert response.json()["username"] == "Alice L."

    response = client.put(f"{API}/profile", headers=auth(token), json={"username": " "})
    assert response.status_code == 400


def test_bootstrap_admin_can_log_in(client):
    response = client.post(f"{API}/login", json={"email": "admin@learnpath.com", "password": "password123"})
    assert response.status_code == 200
    assert response.json()["user"]["role"] == "admin"


def test_token_for_removed_account_is_invalid(client):
    token = create_access_token(user_id=999, email="ghost@example.com", role="user")
    response = client.get(f"{API}/profile", headers=auth(token))
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_TOKEN"
