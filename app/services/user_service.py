"""
User service layer backing the auth routes.
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional
from app.core import security
from app.db import models
from app.schemas.user import UserCreate
from app.utils.exceptions import NotFoundError, ConflictError


class AsyncUserService:
    """Async user service using AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, uid: str) -> models.User:
        """Get user by uid or raise NotFoundError."""
        user = await self.db.get(models.User, uid)
        if not user:
            raise NotFoundError("User", uid)
        return user

    async def get_user_by_email(self, email: str) -> Optional[models.User]:
        result = await self.db.execute(select(models.User).where(models.User.email == email))
        return result.scalar_one_or_none()

    async def register(self, payload: UserCreate) -> models.User:
        if await self.get_user_by_email(payload.email):
            raise ConflictError("Email already registered")

        user = models.User(
            uid=models.generate_id(),
            name=payload.name,
            email=payload.email,
            hashed_password=security.hash_password(payload.password),
            role=models.UserRole.user,
        )
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def authenticate(self, email: str, password: str) -> Optional[models.User]:
        """Return the user when the credentials match, otherwise None."""
        user = await self.get_user_by_email(email)
        if not user or not security.verify_password(password, user.hashed_password):
            return None
        return user

    async def update_role(self, uid: str, role: models.UserRole) -> models.User:
        user = await self.get_user(uid)
        user.role = role
        await self.db.commit()
        await self.db.refresh(user)
        return user
