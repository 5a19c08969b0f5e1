"""
Permission scope matrix for roles.
Defines the granular permissions (scopes) assigned to each UserRole.
"""
from typing import Dict, List, Union
from app.db.models import UserRole

# SCOPE DEFINITIONS
# reviews:create      -> Submit a new review
# reviews:update_own  -> Edit reviews the caller owns
# reviews:delete_own  -> Delete reviews the caller owns
# reviews:delete_any  -> Delete any review (moderation)
# users:manage        -> Change roles of other users

SCOPE_MATRIX: Dict[str, List[str]] = {
    UserRole.user.value: [
        "reviews:create",
        "reviews:update_own",
        "reviews:delete_own",
    ],
    UserRole.admin.value: ["*"]  # Wildcard grants all checks
}

def get_scopes_for_role(role: Union[str, UserRole, None]) -> List[str]:
    """
    Return the list of scopes for a given role.
    Handles both string inputs ("admin") and Enum inputs (UserRole.admin).
    """
    if isinstance(role, UserRole):
        role_key = role.value
    else:
        role_key = str(role)

    return SCOPE_MATRIX.get(role_key, [])

def has_scope(scopes: List[str], required: str) -> bool:
    return "*" in scopes or required in scopes
