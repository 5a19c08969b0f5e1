# app/routers/users.py
from fastapi import APIRouter, Depends
from app.core.identity import Principal
from app.core.logging import log_security_event
from app.schemas.user import RoleUpdate, UserOut
from app.services.user_service import AsyncUserService
from app.utils.dependencies import get_user_service, require_scope

router = APIRouter(prefix="/users", tags=["users"])

@router.patch("/{uid}/role", response_model=UserOut)
async def update_user_role(
    uid: str,
    payload: RoleUpdate,
    users: AsyncUserService = Depends(get_user_service),
    principal: Principal = Depends(require_scope("users:manage")),
    ):
    user = await users.update_role(uid, payload.role)
    log_security_event("role_changed", severity="low", target_uid=uid, role=payload.role.value, changed_by=principal.uid)
    return user
