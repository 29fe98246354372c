from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.core.identity import Identity, require_identity
from app.db.stores import FavoriteStore, RoomStore
from app.models.rooms import Room
from app.services.rooms import get_room

logger = logging.getLogger(__name__)


def add_favorite(db: Session, *, identity: Identity | None, room_id: str) -> None:
    user = require_identity(identity)
    get_room(db, room_id)
    FavoriteStore(db).upsert(user_id=user.user_id, room_id=room_id)


def remove_favorite(db: Session, *, identity: Identity | None, room_id: str) -> None:
    user = require_identity(identity)
    FavoriteStore(db).delete(user_id=user.user_id, room_id=room_id)


def list_favorites(db: Session, *, identity: Identity | None) -> list[Room]:
    user = require_identity(identity)
    rooms = RoomStore(db)

    result: list[Room] = []
    for room_id in FavoriteStore(db).room_ids_for_user(user.user_id):
        room = rooms.get(room_id)
        if room is None:
            logger.warning("Favorite room %s not found, may have been deleted", room_id)
            continue
        result.append(room)
    return result
