from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    # Stored as naive UTC; SQLite has no timezone-aware DATETIME.
    return datetime.now(timezone.utc).replace(tzinfo=None)
