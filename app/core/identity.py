"""
Bearer-token identity provider.

Maps a bearer token to a verified principal. Route handlers and services only
ever see the ``Principal``; token parsing stays in this module.
"""
from typing import List, Optional

from jose import ExpiredSignatureError, JWTError
from pydantic import BaseModel

from app.core import security
from app.core.logging import get_logger, log_auth_event
from app.core.permissions import get_scopes_for_role, has_scope
from app.utils.exceptions import InvalidTokenError, TokenExpiredError

logger = get_logger(__name__)


class Principal(BaseModel):
    uid: str
    email: Optional[str] = None
    role: str = "user"
    scopes: List[str] = []

    def can(self, scope: str) -> bool:
        return has_scope(self.scopes, scope)


class IdentityProvider:
    """Verifies tokens signed by ``app.core.security``."""

    def _decode(self, token: str, expected_type: str) -> dict:
        try:
            payload = security.decode_token(token)
        except ExpiredSignatureError:
            log_auth_event("token_verification", success=False, reason="expired")
            raise TokenExpiredError()
        except JWTError as e:
            log_auth_event("token_verification", success=False, reason=str(e))
            raise InvalidTokenError()

        if payload.get("token_type") != expected_type:
            raise InvalidTokenError(f"Expected a {expected_type} token")
        if not payload.get("sub"):
            raise InvalidTokenError()
        return payload

    def verify(self, token: str) -> Principal:
        """Verify an access token and return the caller."""
        payload = self._decode(token, security.ACCESS_TOKEN_TYPE)
        role = payload.get("role") or "user"
        # Scopes are re-derived from the role, never taken from the token
        return Principal(
            uid=payload["sub"],
            email=payload.get("email"),
            role=role,
            scopes=get_scopes_for_role(role),
        )

    def verify_refresh(self, token: str) -> str:
        """Verify a refresh token and return the uid it was issued to."""
        payload = self._decode(token, security.REFRESH_TOKEN_TYPE)
        return payload["sub"]


identity_provider = IdentityProvider()
