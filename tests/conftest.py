import os

# avant tout import de planitech : base en mémoire, bcrypt rapide
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from planitech.core.config import jwt_settings
from planitech.db.repositories.users import UserRepository
from planitech.db.session import build_engine, get_session, init_db
from planitech.main import app
from planitech.security.password import hash_password
from planitech.security.tokens import create_access_token

PASSWORD = "password123"


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def _get_test_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_test_session
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    def _make(username: str, role: str = "member"):
        return UserRepository(session).create(
            username=username,
            email=f"{username}@test.local",
            hashed_password=hash_password(PASSWORD),
            first_name=username.capitalize(),
            role=role,
        )

    return _make


@pytest.fixture
def users(make_user):
    """Un compte par rôle + deux membres simples."""
    return {
        "admin": make_user("admin", "admin"),
        "lead": make_user("claire", "chef_projet"),
        "tech": make_user("tom", "technicien"),
        "support": make_user("sam", "support"),
        "member": make_user("lea", "member"),
        "outsider": make_user("max", "member"),
    }


def token_for(user) -> str:
    return create_access_token(
        user_id=user.id,
        username=user.username,
        email=user.email,
        settings=jwt_settings,
    )


@pytest.fixture
def headers():
    def _headers(user) -> dict:
        return {"Authorization": f"Bearer {token_for(user)}"}

    return _headers


@pytest.fixture
def project(client, users, headers):
    """Projet créé par le membre `lea` (propriétaire sans ligne project_member)."""
    response = client.post(
        "/api/v1/projects",
        json={"title": "Rénovation gymnase", "budget": 1000},
        headers=headers(users["member"]),
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def task(client, users, headers, project):
    response = client.post(
        f"/api/v1/tasks/project/{project['id']}",
        json={"title": "Diagnostic électrique", "assigned_to": users["tech"].id},
        headers=headers(users["admin"]),
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def token_of():
    return token_for
