"""Grant the admin role to an existing user, for bootstrapping moderators.

Usage: python scripts/promote_admin.py <email> [role]

Uses a plain synchronous DB connection, independent of the running API.
"""
import sys
from app.core.config import settings
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker
from app.db import models


def _get_sync_db_url():
    db_url = settings.DATABASE_URL
    if db_url.startswith("postgresql+asyncpg://"):
        return db_url.replace("postgresql+asyncpg://", "postgresql://")
    if db_url.startswith("sqlite+aiosqlite://"):
        return db_url.replace("sqlite+aiosqlite://", "sqlite://")
    return db_url


def main():
    if len(sys.argv) < 2:
        print("Usage: python scripts/promote_admin.py <email> [role]")
        sys.exit(1)

    email = sys.argv[1]
    role = models.UserRole(sys.argv[2]) if len(sys.argv) > 2 else models.UserRole.admin

    engine = create_engine(_get_sync_db_url())
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    try:
        user = session.execute(select(models.User).where(models.User.email == email)).scalar_one_or_none()
        if not user:
            print(f"User {email} not found")
            return
        user.role = role
        session.commit()
        print(f"Set {email} role to {role.value}; it applies from the user's next login or token refresh")
    finally:
        session.close()


if __name__ == "__main__":
    main()
