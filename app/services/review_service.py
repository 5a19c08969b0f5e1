"""
Review service layer: validation, ownership and media orchestration around
the review repository.
"""
import asyncio
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from app.core.config import settings
from app.core.identity import Principal
from app.core.logging import get_logger, log_business_event, log_security_event
from app.db import models
from app.repositories.review_repository import ReviewRepository
from app.schemas.review import ReviewCreate, ReviewUpdate
from app.utils.exceptions import MediaStoreError, MediaUploadError, NotFoundError, PermissionDeniedError
from app.utils.image_utils import ImagePayloadError, decode_image_payload

logger = get_logger(__name__)

UPDATE_OWN_SCOPE = "reviews:update_own"
DELETE_OWN_SCOPE = "reviews:delete_own"
DELETE_ANY_SCOPE = "reviews:delete_any"


@dataclass
class DeletionReport:
    review_id: str
    failed_images: List[str] = field(default_factory=list)


_LEADING_INT_RE = re.compile(r"^\s*[+-]?\d+")


def _parse_int(value: Union[int, str, None]) -> Optional[int]:
    """Leading integer of a query value, or None ("12abc" -> 12, "abc" -> None)."""
    if value is None or isinstance(value, int):
        return value
    match = _LEADING_INT_RE.match(value)
    return int(match.group()) if match else None


def clamp_pagination(page: Union[int, str, None], limit: Union[int, str, None]) -> Tuple[int, int]:
    """Page is at least 1; limit falls back to the default and is capped at the max.

    Unparseable values are treated as missing.
    """
    page = max(1, _parse_int(page) or 1)
    limit = _parse_int(limit) or settings.PAGINATION_DEFAULT_LIMIT
    limit = max(1, min(limit, settings.PAGINATION_MAX_LIMIT))
    return page, limit


class ReviewService:
    """Service class for review-related business logic."""

    def __init__(self, repository: ReviewRepository, media_store):
        self.repository = repository
        self.media_store = media_store

    async def _upload_images(self, payloads: List[str]) -> List[str]:
        """Decode every payload, then upload them concurrently.

        All-or-nothing: any failure aborts before the review is written.
        """
        if not payloads:
            return []

        decoded = []
        for index, payload in enumerate(payloads):
            try:
                decoded.append(decode_image_payload(payload))
            except ImagePayloadError as e:
                raise MediaUploadError(f"images[{index}]: {e}")

        try:
            urls = await asyncio.gather(*(self.media_store.upload(data) for data in decoded))
        except MediaStoreError as e:
            logger.error("Image upload failed", error=str(e), image_count=len(decoded))
            raise MediaUploadError(str(e))
        return list(urls)

    async def create_review(self, payload: ReviewCreate, principal: Principal) -> models.Review:
        image_urls = await self._upload_images(payload.images)

        fields = payload.model_dump(exclude={"images"})
        # Owner always comes from the verified token
        fields["user_id"] = principal.uid
        fields["images"] = image_urls

        review = await self.repository.create(fields)
        log_business_event("review_created", user_id=principal.uid, review_id=review.id, images=len(image_urls))
        return review

    async def get_review(self, review_id: str) -> models.Review:
        """Get review by ID or raise NotFoundError."""
        review = await self.repository.get_by_id(review_id)
        if review is None:
            raise NotFoundError("Review", review_id)
        return review

    async def list_reviews(self, user_id: Optional[str] = None) -> List[models.Review]:
        """First page of reviews, capped at REVIEWS_LIST_CAP, without metadata."""
        result = await self.repository.get_paginated(page=1, limit=settings.REVIEWS_LIST_CAP, user_id=user_id)
        return result["reviews"]

    async def list_reviews_paginated(
        self,
        page: Union[int, str, None] = None,
        limit: Union[int, str, None] = None,
        user_id: Optional[str] = None,
    ) -> dict:
        page, limit = clamp_pagination(page, limit)
        return await self.repository.get_paginated(page=page, limit=limit, user_id=user_id)

    async def update_review(self, review_id: str, payload: ReviewUpdate, principal: Principal) -> models.Review:
        """Merge the supplied fields; only the owner may update."""
        review = await self.get_review(review_id)

        if review.user_id != principal.uid or not principal.can(UPDATE_OWN_SCOPE):
            log_security_event("review_update_denied", review_id=review_id, user_id=principal.uid)
            raise PermissionDeniedError("update", "review")

        updated = await self.repository.update(review_id, payload.changes())
        log_business_event("review_updated", user_id=principal.uid, review_id=review_id)
        return updated

    async def _delete_images(self, urls: List[str]) -> List[str]:
        """Best-effort media cleanup. Returns the URLs that could not be deleted."""
        failed = []
        for url in urls:
            try:
                await self.media_store.delete(url)
            except MediaStoreError as e:
                logger.error("Failed to delete review image", url=url, error=str(e))
                failed.append(url)
        return failed

    async def delete_review(self, review_id: str, principal: Principal) -> DeletionReport:
        """Owner or moderator. Images go first; the record is always deleted after."""
        review = await self.get_review(review_id)

        may_delete_own = review.user_id == principal.uid and principal.can(DELETE_OWN_SCOPE)
        if not may_delete_own and not principal.can(DELETE_ANY_SCOPE):
            log_security_event("review_delete_denied", review_id=review_id, user_id=principal.uid)
            raise PermissionDeniedError("delete", "review")

        owner_id = review.user_id
        failed_images = await self._delete_images(list(review.images or []))
        await self.repository.delete(review_id)

        log_business_event(
            "review_deleted",
            user_id=principal.uid,
            review_id=review_id,
            owner_id=owner_id,
            failed_images=len(failed_images),
        )
        return DeletionReport(review_id=review_id, failed_images=failed_images)
