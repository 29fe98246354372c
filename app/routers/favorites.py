from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.deps import get_identity
from app.core.identity import Identity
from app.db.session import get_db
from app.routers.rooms import _to_room_response
from app.schemas.rooms import RoomListResponse
from app.services import favorites as favorite_service

router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.get("", response_model=RoomListResponse)
def list_favorites(
    identity: Identity | None = Depends(get_identity),
    db: Session = Depends(get_db),
) -> RoomListResponse:
    rooms = favorite_service.list_favorites(db, identity=identity)
    return RoomListResponse(items=[_to_room_response(r) for r in rooms], total=len(rooms))


@router.put("/{room_id}", status_code=204)
def add_favorite(
    room_id: str,
    identity: Identity | None = Depends(get_identity),
    db: Session = Depends(get_db),
) -> None:
    favorite_service.add_favorite(db, identity=identity, room_id=room_id)


@router.delete("/{room_id}", status_code=204)
def remove_favorite(
    room_id: str,
    identity: Identity | None = Depends(get_identity),
    db: Session = Depends(get_db),
) -> None:
    favorite_service.remove_favorite(db, identity=identity, room_id=room_id)
