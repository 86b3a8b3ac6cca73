# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================

from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """
    Caller identity, from a verified JWT or from Supabase Auth.

    Only what the token itself carries; profile data is looked up separately.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    email: Optional[str] = None


class OrgContext(BaseModel):
    """Authenticated user plus the organization their profile belongs to."""

    model_config = ConfigDict(frozen=True)

    user: AuthUser
    organization_id: str


class TokenLoginRequest(BaseModel):
    """Body of POST /api/v1/auth (the mobile app signs in client-side first)."""
    token: Optional[str] = None


class SessionTokens(BaseModel):
    access_token: str
    refresh_token: str
    expires_at: Optional[int] = None


class UserContextResponse(BaseModel):
    """User, profile (with organization name) and warehouse access."""
    id: UUID
    email: Optional[str] = None
    profile: Optional[dict[str, Any]] = None
    warehouses: list[dict[str, Any]] = []
