# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Supabase-backed authentication for the dashboard, crew and sales apps.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

from app.auth.dependencies import (
    get_current_user,
    get_current_user_optional,
    get_org_context,
    get_supabase_user,
    require_mobile_api_key,
)
from app.auth.models import AuthUser, OrgContext

__all__ = [
    "get_current_user",
    "get_current_user_optional",
    "get_org_context",
    "get_supabase_user",
    "require_mobile_api_key",
    "AuthUser",
    "OrgContext",
]
