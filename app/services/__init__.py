"""
Service layer package initialization.
"""
from .review_service import ReviewService, DeletionReport
from .media_service import CloudinaryMediaStore
from .user_service import AsyncUserService

__all__ = ["ReviewService", "DeletionReport", "CloudinaryMediaStore", "AsyncUserService"]
