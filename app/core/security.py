# app/core/security.py
from passlib.context import CryptContext
from jose import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from app.core.config import settings
import hashlib
import secrets

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

def hash_password(password: str) -> str:
    # In testing use a deterministic sha256-backed string prefixed with
    # a bcrypt-like identifier so the suite does not pay for bcrypt rounds.
    if settings.ENVIRONMENT == "testing":
        salt = secrets.token_hex(8)
        digest = hashlib.sha256(salt.encode("utf-8") + password.encode("utf-8")).hexdigest()
        return f"$2b${salt}${digest}"

    # Production: use bcrypt. Truncate to bcrypt's 72-byte limit.
    pw_bytes = password.encode("utf-8")
    if len(pw_bytes) > 72:
        pw_bytes = pw_bytes[:72]
    return pwd_context.hash(pw_bytes)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    if settings.ENVIRONMENT == "testing" and isinstance(hashed_password, str) and hashed_password.startswith("$2b$"):
        # Testing hashes use format: $2b$<salt>$<sha256_hex(salt+password)>
        try:
            _, _tag, salt, digest = hashed_password.split("$")
        except ValueError:
            return False
        expected = hashlib.sha256(salt.encode("utf-8") + plain_password.encode("utf-8")).hexdigest()
        return secrets.compare_digest(digest, expected)

    pw_bytes = plain_password.encode("utf-8")
    if len(pw_bytes) > 72:
        pw_bytes = pw_bytes[:72]
    return pwd_context.verify(pw_bytes, hashed_password)

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Sign an access token. ``data`` carries ``sub`` (the uid), ``email`` and ``role``."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    role = to_encode.get("role")
    if role:
        from app.core.permissions import get_scopes_for_role
        to_encode["scopes"] = get_scopes_for_role(role)

    to_encode.update({"exp": expire, "token_type": ACCESS_TOKEN_TYPE})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def create_refresh_token(data: dict) -> str:
    """Create a refresh token with longer expiry and a type marker."""
    to_encode = {
        "sub": data["sub"],
        "token_type": REFRESH_TOKEN_TYPE,
    }
    expire = datetime.now(timezone.utc) + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    to_encode["exp"] = expire
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def issue_token_pair(uid: str, email: str, role: str) -> dict:
    """Access + refresh tokens in the shape returned by the auth routes."""
    claims = {"sub": uid, "email": email, "role": role}
    return {
        "access_token": create_access_token(claims),
        "refresh_token": create_refresh_token(claims),
        "token_type": "bearer",
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    }

def decode_token(token: str) -> dict:
    """Decode and verify a token. Raises ``jose.JWTError`` (or its
    ``ExpiredSignatureError`` subclass) when the token is not acceptable."""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
