from sqlalchemy import Column, Integer, String, Float, Text, DateTime, JSON, Enum
from app.db.database import Base
from datetime import datetime, timezone
import enum
import uuid


def generate_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, enum.Enum):
    user = "user"
    admin = "admin"


class User(Base):
    __tablename__ = "users"
    uid = Column(String(32), primary_key=True, default=generate_id)
    name = Column(String, nullable=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(Enum(UserRole), default=UserRole.user, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class Review(Base):
    __tablename__ = "reviews"
    # seq records insertion order and breaks created_at ties
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(32), unique=True, index=True, nullable=False, default=generate_id)
    user_id = Column(String(32), index=True, nullable=False)
    restaurant_name = Column(String(100), nullable=False)
    address = Column(String(200), nullable=False)
    city = Column(String(100), nullable=False)
    ratings = Column(JSON, nullable=False)  # {"food": x, "service": y, "environment": z}
    price = Column(Float, nullable=False)
    comment = Column(Text, nullable=False)
    images = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), index=True, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
