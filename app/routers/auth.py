# app/routers/auth.py
from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from app.core import security
from app.core.config import settings
from app.core.identity import IdentityProvider, Principal
from app.core.logging import log_auth_event
from app.schemas.user import AuthResponse, RefreshRequest, Token, UserCreate, UserOut, VerifyRequest, VerifyResponse
from app.services.user_service import AsyncUserService
from app.utils.dependencies import get_current_principal, get_identity_provider, get_user_service
from app.utils.exceptions import InvalidTokenError, NotFoundError, UnauthorizedError
from app.utils.rate_limit import check_rate_limit, reset_rate_limit

router = APIRouter(prefix="/auth", tags=["auth"])


def _role_value(user) -> str:
    return user.role.value if hasattr(user.role, "value") else str(user.role)


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(payload: UserCreate, users: AsyncUserService = Depends(get_user_service)):
    user = await users.register(payload)
    log_auth_event("signup", user_email=user.email)
    tokens = security.issue_token_pair(user.uid, user.email, _role_value(user))
    return {"message": "User created successfully", "user": UserOut.model_validate(user), **tokens}


@router.post("/login", response_model=AuthResponse)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    users: AsyncUserService = Depends(get_user_service),
):
    rate_key = f"login:{form_data.username.lower()}"
    await check_rate_limit(rate_key, settings.LOGIN_RATE_LIMIT_ATTEMPTS, settings.LOGIN_RATE_LIMIT_WINDOW_SECONDS)

    user = await users.authenticate(form_data.username, form_data.password)
    if not user:
        log_auth_event("login", user_email=form_data.username, success=False)
        raise UnauthorizedError("Invalid credentials")

    await reset_rate_limit(rate_key)
    log_auth_event("login", user_email=user.email)
    tokens = security.issue_token_pair(user.uid, user.email, _role_value(user))
    return {"message": "Authentication successful", "user": UserOut.model_validate(user), **tokens}


@router.post("/refresh", response_model=Token)
async def refresh(
    payload: RefreshRequest,
    provider: IdentityProvider = Depends(get_identity_provider),
    users: AsyncUserService = Depends(get_user_service),
):
    uid = provider.verify_refresh(payload.refresh_token)
    # Role is re-read so promotions take effect on the next refresh
    try:
        user = await users.get_user(uid)
    except NotFoundError:
        raise InvalidTokenError("User no longer exists")
    log_auth_event("token_refresh", user_email=user.email)
    return security.issue_token_pair(user.uid, user.email, _role_value(user))


@router.post("/verify", response_model=VerifyResponse)
def verify(payload: VerifyRequest, provider: IdentityProvider = Depends(get_identity_provider)):
    principal = provider.verify(payload.id_token)
    return VerifyResponse(uid=principal.uid, email=principal.email)


@router.get("/me", response_model=UserOut)
async def get_me(
    principal: Principal = Depends(get_current_principal),
    users: AsyncUserService = Depends(get_user_service),
):
    return await users.get_user(principal.uid)
