from __future__ import annotations

import json
import logging
from typing import Any

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.orm import Session

from app.core.errors import NotAuthorized, RoomNotFound
from app.core.identity import Identity, require_identity
from app.db.stores import RoomStore
from app.models.rooms import Room
from app.schemas.rooms import RoomSort

logger = logging.getLogger(__name__)

# Listing fields an owner may set; the rating summary is derived and owner/timestamps are managed here.
EDITABLE_FIELDS = ("title", "rent", "deposit", "description", "location", "amenities", "images", "featured")


def _clean_list(values: list[str] | None) -> list[str]:
    seen: list[str] = []
    for v in values or []:
        v = v.strip()
        if v and v not in seen:
            seen.append(v)
    return seen


def _clean_fields(data: dict[str, Any]) -> dict[str, Any]:
    fields = {k: v for k, v in data.items() if k in EDITABLE_FIELDS and v is not None}
    for key in ("title", "location", "description"):
        if key in fields:
            fields[key] = fields[key].strip()
    for key in ("amenities", "images"):
        if key in fields:
            fields[key] = _clean_list(fields[key])
    return fields


def get_room(db: Session, room_id: str) -> Room:
    room = RoomStore(db).get(room_id)
    if room is None:
        raise RoomNotFound(f"Room {room_id} not found")
    return room


def _owned_room(db: Session, identity: Identity, room_id: str, action: str) -> Room:
    room = get_room(db, room_id)
    if room.owner_id != identity.user_id:
        raise NotAuthorized(f"Not authorized to {action} this room")
    return room


def create_room(db: Session, *, identity: Identity | None, data: dict[str, Any]) -> Room:
    owner = require_identity(identity)
    room = Room(
        **_clean_fields(data),
        owner_id=owner.user_id,
        owner_name=owner.name,
        rating=0.0,
        reviews=0,
    )
    room = RoomStore(db).add(room)
    logger.info("Room created: id=%s owner=%s", room.id, owner.user_id)
    return room


def update_room(db: Session, *, identity: Identity | None, room_id: str, data: dict[str, Any]) -> Room:
    owner = require_identity(identity)
    room = _owned_room(db, owner, room_id, "update")
    room = RoomStore(db).update(room, _clean_fields(data))
    logger.info("Room updated: id=%s", room_id)
    return room


def delete_room(db: Session, *, identity: Identity | None, room_id: str) -> None:
    owner = require_identity(identity)
    room = _owned_room(db, owner, room_id, "delete")
    RoomStore(db).delete(room)
    logger.info("Room deleted: id=%s", room_id)


def list_rooms_by_owner(db: Session, *, identity: Identity | None) -> list[Room]:
    owner = require_identity(identity)
    stmt = select(Room).where(Room.owner_id == owner.user_id).order_by(Room.created_at.desc())
    return RoomStore(db).scalars(stmt)


def _has_amenity(amenity: str):
    # amenities is stored as JSON text, so match the element in its serialized, quoted form.
    token = json.dumps(amenity).replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return cast(Room.amenities, String).like(f"%{token}%", escape="\\")


_ORDERINGS = {
    RoomSort.newest: (Room.created_at.desc(), Room.id),
    RoomSort.rent_asc: (Room.rent.asc(), Room.created_at.desc(), Room.id),
    RoomSort.rent_desc: (Room.rent.desc(), Room.created_at.desc(), Room.id),
    RoomSort.rating: (Room.rating.desc(), Room.reviews.desc(), Room.created_at.desc(), Room.id),
}


def list_rooms(
    db: Session,
    *,
    q: str | None = None,
    location: str | None = None,
    amenities: list[str] | None = None,
    min_rent: int | None = None,
    max_rent: int | None = None,
    min_rating: float | None = None,
    featured: bool | None = None,
    sort: RoomSort = RoomSort.newest,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[Room], int]:
    stmt = select(Room)

    if q and q.strip():
        pattern = f"%{q.strip().lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(Room.title).like(pattern),
                func.lower(Room.location).like(pattern),
                func.lower(Room.description).like(pattern),
            )
        )
    if location:
        stmt = stmt.where(Room.location == location.strip())
    if min_rent is not None:
        stmt = stmt.where(Room.rent >= min_rent)
    if max_rent is not None:
        stmt = stmt.where(Room.rent <= max_rent)
    if min_rating is not None:
        stmt = stmt.where(Room.rating >= min_rating)
    if featured is not None:
        stmt = stmt.where(Room.featured == featured)

    for amenity in _clean_list(amenities):
        stmt = stmt.where(_has_amenity(amenity))

    stmt = stmt.order_by(*_ORDERINGS[sort])
    store = RoomStore(db)
    total = store.count(stmt)
    return store.scalars(stmt.limit(limit).offset(offset)), total
