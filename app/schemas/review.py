from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import datetime
import json

from app.core.config import settings


class CamelModel(BaseModel):
    # camelCase on the wire, snake_case in Python; unknown keys are dropped
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def _strip_required(v: str, field_label: str) -> str:
    if not v or not v.strip():
        raise ValueError(f"{field_label} cannot be empty or whitespace only")
    return v.strip()


class Ratings(CamelModel):
    food: float = Field(..., ge=1, le=5, description="Food rating between 1 and 5")
    service: float = Field(..., ge=1, le=5, description="Service rating between 1 and 5")
    environment: float = Field(..., ge=1, le=5, description="Environment rating between 1 and 5")


def _parse_ratings(v):
    # Multipart-style clients send ratings as a JSON string
    if isinstance(v, str):
        try:
            return json.loads(v)
        except ValueError:
            raise ValueError("Ratings must be an object or a JSON-encoded object")
    return v


class ReviewCreate(CamelModel):
    restaurant_name: str = Field(..., min_length=2, max_length=100, description="Name of the restaurant")
    address: str = Field(..., min_length=5, max_length=200)
    city: str = Field(..., min_length=2, max_length=100)
    ratings: Ratings
    price: float = Field(..., ge=1, le=5, description="Price level between 1 and 5")
    comment: str = Field(..., min_length=10, max_length=500)
    images: List[str] = Field(
        default_factory=list,
        max_length=settings.MAX_IMAGES_PER_REVIEW,
        description="Base64-encoded images, optionally as data URIs",
    )

    @field_validator("restaurant_name", "address", "city", "comment")
    @classmethod
    def not_blank(cls, v, info):
        return _strip_required(v, info.field_name.replace("_", " ").capitalize())

    @field_validator("ratings", mode="before")
    @classmethod
    def ratings_from_json(cls, v):
        return _parse_ratings(v)


class ReviewUpdate(CamelModel):
    """Partial update. Images are fixed at creation and not accepted here."""
    restaurant_name: Optional[str] = Field(None, min_length=2, max_length=100)
    address: Optional[str] = Field(None, min_length=5, max_length=200)
    city: Optional[str] = Field(None, min_length=2, max_length=100)
    ratings: Optional[Ratings] = None
    price: Optional[float] = Field(None, ge=1, le=5)
    comment: Optional[str] = Field(None, min_length=10, max_length=500)

    @field_validator("restaurant_name", "address", "city", "comment")
    @classmethod
    def not_blank(cls, v, info):
        if v is None:
            return v
        return _strip_required(v, info.field_name.replace("_", " ").capitalize())

    @field_validator("ratings", mode="before")
    @classmethod
    def ratings_from_json(cls, v):
        return _parse_ratings(v)

    def changes(self) -> dict:
        """Fields the client actually supplied, with nulls dropped."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class ReviewOut(CamelModel):
    id: str
    user_id: str
    restaurant_name: str
    address: str
    city: str
    ratings: Ratings
    price: float
    comment: str
    images: List[str] = []
    created_at: datetime
    updated_at: datetime


class PaginationOut(CamelModel):
    total: int
    total_pages: int
    current_page: int
    limit: int
    has_next_page: bool
    has_prev_page: bool


class PaginatedReviews(CamelModel):
    reviews: List[ReviewOut]
    pagination: PaginationOut


class ReviewDeleted(CamelModel):
    message: str = "Review deleted successfully"
    review_id: str
    failed_images: List[str] = []
