from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, utcnow


class Room(Base):
    __tablename__ = "rooms"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    location: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    rent: Mapped[int] = mapped_column(Integer, nullable=False)
    deposit: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    amenities: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    owner_id: Mapped[str] = mapped_column(String(36), ForeignKey("users_auth.id"), nullable=False, index=True)
    owner_name: Mapped[str] = mapped_column(String(120), nullable=False)

    # Rating summary, derived from reviews by app.services.ratings.recompute_rating
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, index=True)
    reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    review_items: Mapped[list["Review"]] = relationship(
        back_populates="room", cascade="all, delete-orphan", passive_deletes=True
    )
    favorites: Mapped[list["Favorite"]] = relationship(
        back_populates="room", cascade="all, delete-orphan", passive_deletes=True
    )


Index("ix_rooms_owner_created_at", Room.owner_id, Room.created_at)
