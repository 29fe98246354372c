from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.deps import get_current_user, get_identity
from app.core.identity import Identity, require_identity
from app.core.rate_limit import rate_limit
from app.db.session import get_db
from app.db.stores import ReviewStore
from app.models.reviews import Review
from app.models.users import UserAuth
from app.schemas.reviews import ReviewCreate, ReviewListResponse, ReviewResponse
from app.schemas.rooms import RatingSummaryResponse
from app.services.ratings import recompute_rating, submit_review
from app.services.rooms import get_room

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rooms/{room_id}", tags=["reviews"])


def _to_review_response(r: Review) -> ReviewResponse:
    return ReviewResponse(
        id=r.id,
        room_id=r.room_id,
        user_id=r.user_id,
        user_name=r.user_name,
        rating=r.rating,
        comment=r.comment,
        created_at=r.created_at,
        updated_at=r.updated_at,
    )


@router.post(
    "/reviews",
    response_model=ReviewResponse,
    status_code=201,
    dependencies=[rate_limit("reviews:submit", limit=settings.review_rate_limit)],
)
def create_review(
    room_id: str,
    payload: ReviewCreate,
    identity: Identity | None = Depends(get_identity),
    db: Session = Depends(get_db),
) -> ReviewResponse:
    require_identity(identity)
    get_room(db, room_id)

    review = submit_review(
        db,
        identity=identity,
        room_id=room_id,
        rating=payload.rating,
        comment=payload.comment.strip(),
    )
    return _to_review_response(review)


@router.get("/reviews", response_model=ReviewListResponse)
def list_reviews(
    room_id: str,
    db: Session = Depends(get_db),
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> ReviewListResponse:
    get_room(db, room_id)
    items, total = ReviewStore(db).list_for_room(room_id, limit=limit, offset=offset)
    return ReviewListResponse(items=[_to_review_response(r) for r in items], total=total)


@router.post("/rating/recompute", response_model=RatingSummaryResponse)
def recompute_room_rating(
    room_id: str,
    current: UserAuth = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> RatingSummaryResponse:
    summary = recompute_rating(db, room_id=room_id)
    logger.info("Manual recompute by %s: room=%s", current.id, room_id)
    return RatingSummaryResponse(room_id=summary.room_id, rating=summary.average, reviews=summary.count)
