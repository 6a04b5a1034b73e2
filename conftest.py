import asyncio
import os

# Settings are read at import time, so the environment comes first
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test_learnpath.db"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256-signing"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ADMIN_EMAIL"] = "admin@learnpath.com"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "password123"

import pytest
from fastapi.testclient import TestClient

from app.db.session import drop_db, init_db
from app.main import app

API = "/api/v1"
ADMIN_CREDENTIALS = {"email": "admin@learnpath.com", "password": "password123"}


async def _reset_db():
    await drop_db()
    await init_db()


@pytest.fixture
def client():
    asyncio.run(_reset_db())
    with TestClient(app) as test_client:
        yield test_client


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def register_and_login(client, email="alice@example.com", password="secret123", username="Alice"):
    response = client.post(f"{API}/register", json={
        "username": username, "email": email, "password": password,
    })
    assert response.status_code == 201, response.text
    response = client.post(f"{API}/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["token"]


@pytest.fixture
def admin_token(client):
    response = client.post(f"{API}/login", json=ADMIN_CREDENTIALS)
    assert response.status_code == 200, response.text
    return response.json()["token"]


@pytest.fixture
def user_token(client):
    return register_and_login(client)


@pytest.fixture
def roadmap(client, admin_token):
    """Two modules: three tasks then one task."""
    response = client.post(f"{API}/roadmaps", headers=auth(admin_token), json={
        "title": "Full Stack Web Development",
        "description": "Frontend and backend with modern frameworks",
        "difficulty": "Intermediate",
        "duration": 120,
        "modules": [
            {
                "title": "Frontend Fundamentals",
                "tasks": [
                    {"title": "HTML & CSS Basics", "resource_url": "https://example.com/html"},
                    {"title": "JavaScript Fundamentals"},
                    {"title": "React Introduction"},
                ],
            },
            {
                "title": "Backend Development",
                "tasks": [{"title": "Node.js & Express"}],
            },
        ],
    })
    assert response.status_code == 201, response.text
    return response.json()


def task_ids(roadmap):
    return [task["id"] for module in roadmap["modules"] for task in module["tasks"]]
