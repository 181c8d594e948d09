import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "test"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret"

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import fantasy12.models  # noqa: F401
from fantasy12.auth import issue_token
from fantasy12.database import get_session
from fantasy12.models import Game, Round, User
from main import create_app

PASSWORD = "secret123"
VALID_TAX_ID = "123.456.789-00"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def make_client(engine):
    """Build a client around a fresh app bound to the test engine."""

    def override_session():
        with Session(engine) as request_session:
            yield request_session

    def factory(rate_limiter=None):
        app = create_app(rate_limiter=rate_limiter)
        app.dependency_overrides[get_session] = override_session
        return TestClient(app)

    return factory


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def make_user(session):
    """Insert a user directly, bypassing the API."""

    def factory(name="Player", email=None, role="user", balance=0, doubles=0, super_doubles=0):
        user = User(
            name=name,
            email=email or f"{name.lower().replace(' ', '.')}@fantasy12.com",
            role=role,
            balance=balance,
            doubles=doubles,
            super_doubles=super_doubles,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return factory


@pytest.fixture
def make_round(session):
    """Insert a round with ``games`` scheduled games ordered 1..n."""

    def factory(title="Rodada 1", status="open", games=3, start=None):
        start = start or datetime(2026, 5, 2, 16, 0, tzinfo=timezone.utc)
        round_ = Round(title=title, start_date=start, end_date=start + timedelta(days=2), status=status)
        session.add(round_)
        session.flush()
        for order in range(1, games + 1):
            session.add(Game(
                round_id=round_.id,
                team_a=f"Home {order}",
                team_b=f"Away {order}",
                date=start + timedelta(hours=order),
                order=order,
            ))
        session.commit()
        session.refresh(round_)
        return round_

    return factory


def auth_headers(user_or_token) -> dict:
    token = user_or_token
    if isinstance(user_or_token, User):
        token = issue_token(user_or_token.id, user_or_token.email)
    return {"Authorization": f"Bearer {token}"}


def register(client, name="Ana", email="ana@fantasy12.com", **extra) -> dict:
    payload = {"name": name, "email": email, "password": PASSWORD, **extra}
    response = client.post("/auth/register", json=payload)
    assert response.status_code == 201, response.text
    return response.json()
