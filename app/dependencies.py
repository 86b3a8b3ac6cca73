# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# Annotated aliases for the dependencies most routes need, so handlers
# declare `user: SupabaseUserDep` instead of repeating Depends(...).
# =============================================================================

from typing import Annotated

from fastapi import Depends

from app.auth import (
    AuthUser,
    OrgContext,
    get_current_user,
    get_current_user_optional,
    get_org_context,
    get_supabase_user,
    require_mobile_api_key,
)

# Dashboard user (JWT verified locally)
CurrentUserDep = Annotated[AuthUser, Depends(get_current_user)]

OptionalUserDep = Annotated[AuthUser | None, Depends(get_current_user_optional)]

# Crew app / sync user (token checked by Supabase Auth)
SupabaseUserDep = Annotated[AuthUser, Depends(get_supabase_user)]

OrgContextDep = Annotated[OrgContext, Depends(get_org_context)]

# Router-level guard for /api/mobile
MOBILE_API_KEY_GUARD = [Depends(require_mobile_api_key)]
