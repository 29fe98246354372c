from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class RoomSort(str, Enum):
    newest = "newest"
    rent_asc = "rent_asc"
    rent_desc = "rent_desc"
    rating = "rating"


class RoomCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    rent: int = Field(ge=0)
    deposit: int = Field(default=0, ge=0)
    description: str = Field(default="", max_length=5000)
    location: str = Field(min_length=1, max_length=200)
    amenities: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    featured: bool = False


class RoomUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    rent: int | None = Field(default=None, ge=0)
    deposit: int | None = Field(default=None, ge=0)
    description: str | None = Field(default=None, max_length=5000)
    location: str | None = Field(default=None, min_length=1, max_length=200)
    amenities: list[str] | None = None
    images: list[str] | None = None
    featured: bool | None = None


class RoomResponse(BaseModel):
    id: str
    title: str
    rent: int
    deposit: int
    description: str
    location: str
    amenities: list[str]
    images: list[str]
    featured: bool
    owner_id: str
    owner_name: str
    rating: float
    reviews: int
    created_at: datetime
    updated_at: datetime


class RoomListResponse(BaseModel):
    items: list[RoomResponse]
    total: int


class RatingSummaryResponse(BaseModel):
    room_id: str
    rating: float
    reviews: int


class ImageUploadResponse(BaseModel):
    url: str
