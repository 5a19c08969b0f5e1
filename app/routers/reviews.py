# app/routers/reviews.py
from fastapi import APIRouter, Depends, Query, Response, status
from typing import List, Optional
from app.core.config import settings
from app.core.identity import Principal
from app.schemas.review import PaginatedReviews, ReviewCreate, ReviewDeleted, ReviewOut, ReviewUpdate
from app.services.review_service import ReviewService
from app.utils.dependencies import get_current_principal, get_review_service, require_scope

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.get("", response_model=List[ReviewOut])
async def list_reviews(
    response: Response,
    user_id: Optional[str] = Query(None, alias="userId", description="Only reviews written by this user"),
    service: ReviewService = Depends(get_review_service),
):
    """Newest reviews first, truncated at REVIEWS_LIST_CAP (see X-Result-Cap)."""
    response.headers["X-Result-Cap"] = str(settings.REVIEWS_LIST_CAP)
    return await service.list_reviews(user_id=user_id)


@router.get("/paginated", response_model=PaginatedReviews)
async def list_reviews_paginated(
    page: Optional[str] = Query(None, description="1-based page number; unparseable values mean 1"),
    limit: Optional[str] = Query(
        None, description=f"Page size, capped at {settings.PAGINATION_MAX_LIMIT}; unparseable values mean the default"
    ),
    user_id: Optional[str] = Query(None, alias="userId"),
    service: ReviewService = Depends(get_review_service),
):
    return await service.list_reviews_paginated(page=page, limit=limit, user_id=user_id)


@router.get("/{review_id}", response_model=ReviewOut)
async def get_review(review_id: str, service: ReviewService = Depends(get_review_service)):
    return await service.get_review(review_id)


@router.post("", response_model=ReviewOut, status_code=status.HTTP_201_CREATED)
async def create_review(
    payload: ReviewCreate,
    principal: Principal = Depends(require_scope("reviews:create")),
    service: ReviewService = Depends(get_review_service),
):
    return await service.create_review(payload, principal)


@router.put("/{review_id}", response_model=ReviewOut)
async def update_review(
    review_id: str,
    payload: ReviewUpdate,
    principal: Principal = Depends(get_current_principal),
    service: ReviewService = Depends(get_review_service),
):
    return await service.update_review(review_id, payload, principal)


@router.delete("/{review_id}", response_model=ReviewDeleted)
async def delete_review(
    review_id: str,
    principal: Principal = Depends(get_current_principal),
    service: ReviewService = Depends(get_review_service),
):
    report = await service.delete_review(review_id, principal)
    return ReviewDeleted(review_id=report.review_id, failed_images=report.failed_images)
