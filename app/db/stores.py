from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import StoreReadError, StoreWriteError
from app.db.base import utcnow
from app.models.favorites import Favorite
from app.models.reviews import Review
from app.models.rooms import Room

logger = logging.getLogger(__name__)


def composite_key(user_id: str, room_id: str) -> str:
    return f"{user_id}_{room_id}"


def _dialect_insert(db: Session):
    dialect = db.get_bind().dialect.name
    if dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert as dialect_insert
    elif dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert as dialect_insert
    else:
        return None
    return dialect_insert


class _Store:
    """Shared failure handling: every store call either succeeds or rolls back
    the session and raises StoreReadError / StoreWriteError."""

    collection = ""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _read_failed(self, what: str) -> StoreReadError:
        self.db.rollback()
        logger.exception("Read from %s failed: %s", self.collection, what)
        return StoreReadError(f"Failed to read {self.collection}")

    def _write_failed(self, what: str) -> StoreWriteError:
        self.db.rollback()
        logger.exception("Write to %s failed: %s", self.collection, what)
        return StoreWriteError(f"Failed to write {self.collection}")

    def _upsert(self, model, key: str, *, insert_only: dict[str, Any], fields: dict[str, Any]) -> None:
        """Create the row keyed by ``key`` or overwrite ``fields`` in place.

        ``insert_only`` values (creation timestamps) are written on first insert
        and left alone afterwards.
        """
        dialect_insert = _dialect_insert(self.db)
        if dialect_insert is not None:
            stmt = dialect_insert(model).values(id=key, **insert_only, **fields)
            stmt = stmt.on_conflict_do_update(index_elements=["id"], set_=fields)
            self.db.execute(stmt)
            return

        obj = self.db.get(model, key)
        if obj is None:
            self.db.add(model(id=key, **insert_only, **fields))
        else:
            for name, value in fields.items():
                setattr(obj, name, value)


class ReviewStore(_Store):
    collection = "reviews"

    def upsert(self, review_id: str, **fields: Any) -> Review:
        now = utcnow()
        try:
            self._upsert(Review, review_id, insert_only={"created_at": now}, fields={**fields, "updated_at": now})
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._write_failed(review_id) from exc

        try:
            review = self.db.get(Review, review_id, populate_existing=True)
        except SQLAlchemyError as exc:
            raise self._read_failed(review_id) from exc
        if review is None:
            raise StoreReadError(f"Review {review_id} vanished after write")
        return review

    def iter_ratings(self, room_id: str, *, page_size: int) -> Iterator[int]:
        """Yield the rating of every review for a room, one keyset page at a time."""
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        last_id: str | None = None
        while True:
            stmt = (
                select(Review.id, Review.rating)
                .where(Review.room_id == room_id)
                .order_by(Review.id)
                .limit(page_size)
            )
            if last_id is not None:
                stmt = stmt.where(Review.id > last_id)
            try:
                rows = self.db.execute(stmt).all()
            except SQLAlchemyError as exc:
                raise self._read_failed(f"ratings of room {room_id}") from exc
            if not rows:
                return

            for row in rows:
                yield row.rating

            if len(rows) < page_size:
                return
            last_id = rows[-1].id

    def list_for_room(self, room_id: str, *, limit: int, offset: int) -> tuple[list[Review], int]:
        stmt = select(Review).where(Review.room_id == room_id)
        try:
            total = self.db.scalar(select(func.count()).select_from(stmt.subquery()))
            items = list(
                self.db.scalars(
                    stmt.order_by(Review.updated_at.desc(), Review.id).limit(limit).offset(offset)
                ).all()
            )
        except SQLAlchemyError as exc:
            raise self._read_failed(f"reviews of room {room_id}") from exc
        return items, int(total or 0)


class RoomStore(_Store):
    collection = "rooms"

    def get(self, room_id: str) -> Room | None:
        try:
            return self.db.get(Room, room_id)
        except SQLAlchemyError as exc:
            raise self._read_failed(room_id) from exc

    def lock(self, room_id: str) -> Room | None:
        """Load a room with a row lock (FOR UPDATE), held until the next commit.

        Dialects without row locks (SQLite) ignore the clause.
        """
        stmt = select(Room).where(Room.id == room_id).with_for_update()
        try:
            return self.db.scalars(stmt.execution_options(populate_existing=True)).first()
        except SQLAlchemyError as exc:
            raise self._read_failed(room_id) from exc

    def scalars(self, stmt) -> list[Room]:
        try:
            return list(self.db.scalars(stmt).all())
        except SQLAlchemyError as exc:
            raise self._read_failed("query") from exc

    def count(self, stmt) -> int:
        try:
            return int(self.db.scalar(select(func.count()).select_from(stmt.subquery())) or 0)
        except SQLAlchemyError as exc:
            raise self._read_failed("count") from exc

    def add(self, room: Room) -> Room:
        try:
            self.db.add(room)
            self.db.commit()
            self.db.refresh(room)
        except SQLAlchemyError as exc:
            raise self._write_failed("new room") from exc
        return room

    def update(self, room: Room, fields: dict[str, Any]) -> Room:
        room_id = room.id
        try:
            for name, value in fields.items():
                setattr(room, name, value)
            room.updated_at = utcnow()
            self.db.add(room)
            self.db.commit()
            self.db.refresh(room)
        except SQLAlchemyError as exc:
            raise self._write_failed(room_id) from exc
        return room

    def delete(self, room: Room) -> None:
        room_id = room.id
        try:
            self.db.delete(room)
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._write_failed(room_id) from exc


class FavoriteStore(_Store):
    collection = "favorites"

    def upsert(self, *, user_id: str, room_id: str) -> None:
        key = composite_key(user_id, room_id)
        try:
            self._upsert(
                Favorite,
                key,
                insert_only={"created_at": utcnow()},
                fields={"user_id": user_id, "room_id": room_id},
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._write_failed(key) from exc

    def delete(self, *, user_id: str, room_id: str) -> None:
        key = composite_key(user_id, room_id)
        try:
            favorite = self.db.get(Favorite, key)
            if favorite is None:
                return
            self.db.delete(favorite)
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._write_failed(key) from exc

    def room_ids_for_user(self, user_id: str) -> list[str]:
        stmt = select(Favorite.room_id).where(Favorite.user_id == user_id).order_by(Favorite.created_at.desc())
        try:
            return list(self.db.scalars(stmt).all())
        except SQLAlchemyError as exc:
            raise self._read_failed(f"favorites of user {user_id}") from exc
