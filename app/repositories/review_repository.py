"""
Review repository: durable storage and retrieval of Review records.
"""
import math
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.db import models
from app.utils.exceptions import RepositoryError

logger = get_logger(__name__)

CREATABLE_FIELDS = (
    "user_id",
    "restaurant_name",
    "address",
    "city",
    "ratings",
    "price",
    "comment",
    "images",
)

# user_id, images and the timestamps are never merged from a caller payload
UPDATABLE_FIELDS = (
    "restaurant_name",
    "address",
    "city",
    "ratings",
    "price",
    "comment",
)


class ReviewRepository:
    """CRUD and newest-first pagination over the ``reviews`` table.

    The session and clock are injected so callers (and tests) control both.
    """

    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = models.utcnow):
        self.db = db
        self.clock = clock

    async def _commit(self, operation: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Review write failed", operation=operation, error=str(e))
            raise RepositoryError(f"Error during review {operation}: {e}", operation=operation) from e

    async def create(self, fields: Dict[str, Any]) -> models.Review:
        """Persist a new review. Any ``id`` or timestamp in ``fields`` is ignored."""
        data = {key: fields[key] for key in CREATABLE_FIELDS if key in fields}
        data["images"] = list(data.get("images") or [])
        now = self.clock()

        review = models.Review(
            id=models.generate_id(),
            created_at=now,
            updated_at=now,
            **data,
        )
        self.db.add(review)
        await self._commit("create")
        await self.db.refresh(review)
        return review

    async def get_by_id(self, review_id: str) -> Optional[models.Review]:
        """Return the review, or None when no review has this id."""
        try:
            result = await self.db.execute(
                select(models.Review).where(models.Review.id == review_id)
            )
        except SQLAlchemyError as e:
            raise RepositoryError(f"Error getting review: {e}", operation="get") from e
        return result.scalar_one_or_none()

    async def get_paginated(self, page: int = 1, limit: int = 10, user_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Newest-first window over the reviews, optionally restricted to one owner.

        Returns ``{"reviews": [...], "pagination": {...}}``. The owner filter is
        applied before the window, so ``total`` is the filtered count.
        """
        if page < 1 or limit < 1:
            raise ValueError("page and limit must be positive")

        count_stmt = select(func.count()).select_from(models.Review)
        stmt = select(models.Review)
        if user_id:
            count_stmt = count_stmt.where(models.Review.user_id == user_id)
            stmt = stmt.where(models.Review.user_id == user_id)

        offset = (page - 1) * limit
        stmt = (
            stmt.order_by(models.Review.created_at.desc(), models.Review.seq.asc())
            .offset(offset)
            .limit(limit)
        )

        try:
            total = (await self.db.execute(count_stmt)).scalar_one()
            reviews = (await self.db.execute(stmt)).scalars().all()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Error getting paginated reviews: {e}", operation="list") from e

        total_pages = math.ceil(total / limit)
        return {
            "reviews": list(reviews),
            "pagination": {
                "total": total,
                "total_pages": total_pages,
                "current_page": page,
                "limit": limit,
                "has_next_page": page < total_pages,
                "has_prev_page": page > 1,
            },
        }

    async def update(self, review_id: str, changes: Dict[str, Any]) -> models.Review:
        """Merge ``changes`` field by field and refresh ``updated_at``."""
        review = await self.get_by_id(review_id)
        if review is None:
            raise RepositoryError(f"Review {review_id} does not exist", operation="update")

        for key in UPDATABLE_FIELDS:
            if key in changes:
                setattr(review, key, changes[key])
        review.updated_at = self.clock()

        await self._commit("update")
        await self.db.refresh(review)
        return review

    async def delete(self, review_id: str) -> None:
        """Permanently remove the review."""
        try:
            result = await self.db.execute(
                delete(models.Review).where(models.Review.id == review_id)
            )
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise RepositoryError(f"Error deleting review: {e}", operation="delete") from e
        if result.rowcount == 0:
            await self.db.rollback()
            raise RepositoryError(f"Review {review_id} does not exist", operation="delete")
        await self._commit("delete")
