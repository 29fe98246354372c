from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import InvalidRating, RoomNotFound
from app.core.identity import Identity, require_identity
from app.db.stores import ReviewStore, RoomStore, composite_key
from app.models.reviews import Review

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


@dataclass(frozen=True)
class RatingSummary:
    room_id: str
    average: float
    count: int


def average_rating(total: int, count: int) -> float:
    """Mean of ``count`` ratings summing to ``total``, half-up to one decimal; 0.0 when empty."""
    if count <= 0:
        return 0.0
    mean = Decimal(total) / Decimal(count)
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def validate_rating(rating: object) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidRating()
    if not MIN_RATING <= rating <= MAX_RATING:
        raise InvalidRating()
    return rating


def submit_review(
    db: Session,
    *,
    identity: Identity | None,
    room_id: str,
    rating: int,
    comment: str = "",
) -> Review:
    """Create or replace the caller's review of a room, then refresh the room's rating.

    The review is committed before the recompute starts; if the recompute fails
    the review stays and the summary heals on the next submission.
    """
    reviewer = require_identity(identity)
    validate_rating(rating)

    review = ReviewStore(db).upsert(
        composite_key(reviewer.user_id, room_id),
        user_id=reviewer.user_id,
        room_id=room_id,
        user_name=reviewer.name,
        rating=rating,
        comment=comment or "",
    )
    logger.info("Review saved: user=%s room=%s rating=%s", reviewer.user_id, room_id, rating)

    recompute_rating(db, room_id=room_id)
    return review


def recompute_rating(db: Session, *, room_id: str) -> RatingSummary:
    rooms = RoomStore(db)

    # Row lock serializes concurrent recomputes of one room where the DB supports it.
    room = rooms.lock(room_id)
    if room is None:
        raise RoomNotFound(f"Room {room_id} not found")

    count = 0
    total = 0
    for rating in ReviewStore(db).iter_ratings(room_id, page_size=settings.rating_page_size):
        count += 1
        total += rating

    summary = RatingSummary(room_id=room_id, average=average_rating(total, count), count=count)
    rooms.update(room, {"rating": summary.average, "reviews": summary.count})

    logger.info("Rating recomputed: room=%s average=%s count=%s", room_id, summary.average, summary.count)
    return summary
