from __future__ import annotations

from collections.abc import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings


def _make_engine():
    connect_args = {}
    is_sqlite = settings.database_url.startswith("sqlite")
    if is_sqlite:
        connect_args = {"check_same_thread": False}
    eng = create_engine(settings.database_url, echo=False, future=True, connect_args=connect_args)

    if is_sqlite:
        # SQLite ignores FOREIGN KEY clauses unless asked per connection.
        @event.listens_for(eng, "connect")
        def _enable_foreign_keys(dbapi_conn, _record) -> None:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return eng


engine = _make_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
