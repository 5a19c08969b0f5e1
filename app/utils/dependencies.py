# app/utils/dependencies.py
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.identity import IdentityProvider, Principal, identity_provider
from app.db import database
from app.repositories.review_repository import ReviewRepository
from app.services.media_service import media_store
from app.services.review_service import ReviewService
from app.services.user_service import AsyncUserService
from app.utils.exceptions import ForbiddenError, UnauthorizedError

bearer_scheme = HTTPBearer(auto_error=False)


def get_identity_provider() -> IdentityProvider:
    return identity_provider


def get_media_store():
    return media_store


def get_review_repository(db: AsyncSession = Depends(database.get_db)) -> ReviewRepository:
    return ReviewRepository(db)


def get_review_service(
    repository: ReviewRepository = Depends(get_review_repository),
    media=Depends(get_media_store),
) -> ReviewService:
    return ReviewService(repository, media)


def get_user_service(db: AsyncSession = Depends(database.get_db)) -> AsyncUserService:
    return AsyncUserService(db)


def get_current_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> Principal:
    if credentials is None:
        if request.headers.get("Authorization"):
            raise UnauthorizedError('Authorization header must start with "Bearer "')
        raise UnauthorizedError("No authorization header provided")
    return provider.verify(credentials.credentials)


def require_scope(scope: str):
    def scope_checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not principal.can(scope):
            raise ForbiddenError("Not enough permissions")
        return principal
    return scope_checker
