from __future__ import annotations

from functools import partial

import anyio
from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session

from app.core.deps import get_identity
from app.core.identity import Identity
from app.db.session import get_db
from app.models.rooms import Room
from app.schemas.rooms import (
    ImageUploadResponse,
    RoomCreate,
    RoomListResponse,
    RoomResponse,
    RoomSort,
    RoomUpdate,
)
from app.services import rooms as room_service
from app.services.storage import save_room_image

router = APIRouter(prefix="/rooms", tags=["rooms"])


def _to_room_response(room: Room) -> RoomResponse:
    return RoomResponse(
        id=room.id,
        title=room.title,
        rent=room.rent,
        deposit=room.deposit,
        description=room.description,
        location=room.location,
        amenities=list(room.amenities or []),
        images=list(room.images or []),
        featured=room.featured,
        owner_id=room.owner_id,
        owner_name=room.owner_name,
        rating=room.rating,
        reviews=room.reviews,
        created_at=room.created_at,
        updated_at=room.updated_at,
    )


@router.get("", response_model=RoomListResponse)
def list_rooms(
    db: Session = Depends(get_db),
    q: str | None = Query(default=None, max_length=200),
    location: str | None = Query(default=None, max_length=200),
    amenities: list[str] | None = Query(default=None),
    min_rent: int | None = Query(default=None, ge=0),
    max_rent: int | None = Query(default=None, ge=0),
    min_rating: float | None = Query(default=None, ge=0, le=5),
    featured: bool | None = Query(default=None),
    sort: RoomSort = Query(default=RoomSort.newest),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> RoomListResponse:
    items, total = room_service.list_rooms(
        db,
        q=q,
        location=location,
        amenities=amenities,
        min_rent=min_rent,
        max_rent=max_rent,
        min_rating=min_rating,
        featured=featured,
        sort=sort,
        limit=limit,
        offset=offset,
    )
    return RoomListResponse(items=[_to_room_response(r) for r in items], total=total)


@router.post("", response_model=RoomResponse, status_code=201)
def create_room(
    payload: RoomCreate,
    identity: Identity | None = Depends(get_identity),
    db: Session = Depends(get_db),
) -> RoomResponse:
    room = room_service.create_room(db, identity=identity, data=payload.model_dump())
    return _to_room_response(room)


@router.get("/mine", response_model=RoomListResponse)
def my_rooms(
    identity: Identity | None = Depends(get_identity),
    db: Session = Depends(get_db),
) -> RoomListResponse:
    items = room_service.list_rooms_by_owner(db, identity=identity)
    return RoomListResponse(items=[_to_room_response(r) for r in items], total=len(items))


@router.post("/images", response_model=ImageUploadResponse, status_code=201)
async def upload_image(
    file: UploadFile = File(...),
    identity: Identity | None = Depends(get_identity),
) -> ImageUploadResponse:
    content = await file.read()
    fn = partial(
        save_room_image,
        identity=identity,
        filename=file.filename or "",
        content=content,
        content_type=file.content_type,
    )
    url = await anyio.to_thread.run_sync(fn)
    return ImageUploadResponse(url=url)


@router.get("/{room_id}", response_model=RoomResponse)
def get_room(room_id: str, db: Session = Depends(get_db)) -> RoomResponse:
    return _to_room_response(room_service.get_room(db, room_id))


@router.patch("/{room_id}", response_model=RoomResponse)
def update_room(
    room_id: str,
    payload: RoomUpdate,
    identity: Identity | None = Depends(get_identity),
    db: Session = Depends(get_db),
) -> RoomResponse:
    room = room_service.update_room(
        db, identity=identity, room_id=room_id, data=payload.model_dump(exclude_unset=True)
    )
    return _to_room_response(room)


@router.delete("/{room_id}", status_code=204)
def delete_room(
    room_id: str,
    identity: Identity | None = Depends(get_identity),
    db: Session = Depends(get_db),
) -> None:
    room_service.delete_room(db, identity=identity, room_id=room_id)
