from __future__ import annotations

import logging
import sys

from sqlalchemy import select

from app.core.config import settings
from app.core.errors import RoomsError
from app.core.logging_config import configure_logging
from app.db.session import SessionLocal
from app.models.rooms import Room
from app.services.ratings import recompute_rating

logger = logging.getLogger(__name__)


def main() -> int:
    """Recompute the rating summary of one room (argv[1]) or of every room."""
    configure_logging(log_dir=settings.log_dir, level=settings.log_level, filename=settings.log_file)

    if len(sys.argv) > 2:
        print("Usage: python scripts/recompute_ratings.py [room_id]")
        return 2

    db = SessionLocal()
    try:
        if len(sys.argv) == 2:
            room_ids = [sys.argv[1]]
        else:
            room_ids = list(db.scalars(select(Room.id).order_by(Room.id)).all())

        failed = 0
        for room_id in room_ids:
            try:
                summary = recompute_rating(db, room_id=room_id)
            except RoomsError as exc:
                failed += 1
                print(f"{room_id}: {exc.detail}")
                continue
            print(f"{room_id}: rating={summary.average} reviews={summary.count}")

        logger.info("Recompute finished: rooms=%s failed=%s", len(room_ids), failed)
        return 1 if failed else 0
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
