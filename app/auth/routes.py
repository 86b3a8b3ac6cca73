# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Sign-in itself happens client-side with Supabase Auth. These endpoints
# hand the apps their profile and warehouses, and refresh sessions.
# =============================================================================

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status

from app.auth.dependencies import get_current_user, verify_with_supabase
from app.auth.models import AuthUser, SessionTokens, TokenLoginRequest, UserContextResponse
from core.services.profile_service import ProfileService
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("", response_model=UserContextResponse)
async def login_with_token(request: TokenLoginRequest) -> UserContextResponse:
    """
    Exchange a Supabase access token for the user's app context.

    Raises:
        400: If token is missing
        401: If Supabase rejects the token
    """
    if not request.token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Token is required")

    user = verify_with_supabase(request.token)
    logger.info(f"Mobile sign-in for user {user.id}")
    return UserContextResponse(**ProfileService.get_user_context(user.id, user.email))


@router.get("", response_model=SessionTokens)
async def refresh_session(
    x_refresh_token: Optional[str] = Header(default=None, alias="x-refresh-token"),
) -> SessionTokens:
    """
    Trade a refresh token (x-refresh-token header) for a new session.

    Raises:
        400: If the header is missing
        401: If Supabase refuses the refresh
    """
    if not x_refresh_token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Refresh token is required")

    session = SupabaseClient.refresh_session(x_refresh_token)
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Failed to refresh session")

    return SessionTokens(**session)


@router.get("/me", response_model=UserContextResponse)
async def get_current_user_info(user: AuthUser = Depends(get_current_user)) -> UserContextResponse:
    """Profile and warehouses for the dashboard's signed-in user."""
    return UserContextResponse(**ProfileService.get_user_context(user.id, user.email))


@router.get("/verify")
async def verify_token(user: AuthUser = Depends(get_current_user)) -> dict:
    """Cheap check that a stored token is still good."""
    return {"valid": True, "user_id": str(user.id), "email": user.email}
