import os
import tempfile
from pathlib import Path

_tmpdir = Path(tempfile.mkdtemp(prefix="rooms_test_"))
_db_path = _tmpdir / "test.db"

os.environ.setdefault("ENV", "test")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_db_path.as_posix()}")
os.environ.setdefault("APP_SECRET_KEY", "test-secret-key")
os.environ.setdefault("UPLOADS_DIR", (_tmpdir / "uploads").as_posix())
os.environ.setdefault("LOG_DIR", (_tmpdir / "logs").as_posix())
# Small pages so recompute walks several of them in tests.
os.environ.setdefault("RATING_PAGE_SIZE", "2")

import pytest
from fastapi.testclient import TestClient

from app.core.identity import Identity
from app.core.rate_limit import limiter
from app.db.base import Base
from app.db.session import engine, SessionLocal
from app.main import create_app
from app.models.rooms import Room
from app.models.users import UserAuth


@pytest.fixture()
def clean_db():
    limiter.reset()

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db(clean_db):
    session = SessionLocal()
    try:
        yield session
        session.commit()
    finally:
        session.close()


@pytest.fixture()
def client(clean_db):
    app = create_app()
    with TestClient(app) as c:
        yield c


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register(client, email="user@example.com", name="User") -> str:
    r = client.post("/auth/register", json={"email": email, "password": "password123", "name": name})
    assert r.status_code == 201, r.text
    return r.json()["access_token"]


def make_user(db, user_id: str, name: str | None = None) -> Identity:
    db.add(UserAuth(id=user_id, email=f"{user_id}@example.com", display_name=name))
    db.commit()
    return Identity(user_id=user_id, display_name=name)


def make_room(db, owner: Identity, **fields) -> Room:
    values = {
        "title": "Sunny room",
        "rent": 500,
        "deposit": 1000,
        "description": "",
        "location": "Downtown",
        "amenities": [],
        "images": [],
    }
    values.update(fields)
    room = Room(owner_id=owner.user_id, owner_name=owner.name, **values)
    db.add(room)
    db.commit()
    db.refresh(room)
    return room
