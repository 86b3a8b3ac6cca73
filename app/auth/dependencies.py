# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Three ways a caller proves who they are:
#
# - get_current_user:   Supabase JWT verified locally (ES256 via JWKS, or
#                       the legacy HS256 secret). Used by the web dashboard.
# - get_supabase_user:  Bearer token checked against Supabase Auth. Used by
#                       the crew app and the offline sync endpoint.
# - require_mobile_api_key: static x-api-key header for the sales app.
#
# Usage:
#   @router.get("/jobs")
#   async def jobs(user: AuthUser = Depends(get_supabase_user)):
#       ...
# =============================================================================

import hmac
import logging
import time
from typing import Optional
from uuid import UUID

import httpx
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from app.auth.models import AuthUser, OrgContext
from app.config import settings
from app.exceptions import AccessDeniedError, UnauthorizedError
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)

security = HTTPBearer()
security_optional = HTTPBearer(auto_error=False)

# JWKS keys rotate rarely; refetch hourly
_jwks_cache: dict = {}
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 3600


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# =============================================================================
# Local JWT Verification
# =============================================================================

def _fetch_jwks() -> dict:
    """Supabase's public signing keys, cached. A stale cache beats no keys."""
    global _jwks_cache, _jwks_cache_time

    now = time.time()
    if _jwks_cache and (now - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    jwks_url = f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1/.well-known/jwks.json"
    try:
        response = httpx.get(jwks_url, timeout=10)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch JWKS from {jwks_url}: {e}")
        return _jwks_cache or {"keys": []}

    _jwks_cache = response.json()
    _jwks_cache_time = now
    return _jwks_cache


def _get_signing_key(token: str) -> tuple[str | dict, str]:
    """
    Pick the verification key for a token from its header.

    Returns:
        (key, algorithm); HS256 tokens and unknown key ids use the shared secret
    """
    try:
        header = jwt.get_unverified_header(token)
    except JWTError:
        return settings.SUPABASE_JWT_SECRET, "HS256"

    alg = header.get("alg", "HS256")
    kid = header.get("kid")
    if alg == "HS256" or not kid:
        return settings.SUPABASE_JWT_SECRET, "HS256"

    for key in _fetch_jwks().get("keys", []):
        if key.get("kid") == kid:
            return key, alg

    logger.warning(f"No JWKS key for alg={alg}, kid={kid}; trying HS256 secret")
    return settings.SUPABASE_JWT_SECRET, "HS256"


def decode_access_token(token: str) -> AuthUser:
    """
    Verify a Supabase access token and return its subject.

    Raises:
        HTTPException: 401 if the signature, audience, expiry or subject is bad
    """
    try:
        key, algorithm = _get_signing_key(token)
        payload = jwt.decode(token, key, algorithms=[algorithm], audience="authenticated")
    except ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized(f"Invalid token: {e}")

    subject = payload.get("sub")
    if not subject:
        raise _unauthorized("Invalid token: missing user ID")

    try:
        user_id = UUID(subject)
    except ValueError:
        raise _unauthorized("Invalid token: malformed user ID")

    return AuthUser(id=user_id, email=payload.get("email"))


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> AuthUser:
    """Require a valid, locally verified Supabase JWT."""
    return decode_access_token(credentials.credentials)


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional),
) -> Optional[AuthUser]:
    """Like get_current_user, but anonymous or bad tokens yield None."""
    if credentials is None:
        return None
    try:
        return decode_access_token(credentials.credentials)
    except HTTPException:
        return None


# =============================================================================
# Supabase Auth Verification
# =============================================================================

def verify_with_supabase(token: str) -> AuthUser:
    """
    Ask Supabase Auth who owns a token.

    Raises:
        HTTPException: 401 "Invalid token" or "Token validation failed"
    """
    try:
        user = SupabaseClient.get_auth_user(token)
    except SupabaseClientError as e:
        logger.error(f"Supabase token check failed: {e}")
        raise _unauthorized("Token validation failed")

    if user is None:
        raise _unauthorized("Invalid token")

    return AuthUser(id=UUID(str(user.id)), email=getattr(user, "email", None))


async def get_supabase_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional),
) -> AuthUser:
    """Require a Bearer token that Supabase Auth accepts."""
    if credentials is None:
        raise _unauthorized("Missing authorization header")
    return verify_with_supabase(credentials.credentials)


async def get_org_context(user: Optional[AuthUser] = Depends(get_current_user_optional)) -> OrgContext:
    """
    Resolve the caller's organization from user_profiles.

    Raises:
        UnauthorizedError: 401 UNAUTHENTICATED without a valid token
        AccessDeniedError: 403 NO_ORGANIZATION if the profile has none
    """
    from core.services.profile_service import ProfileService

    if user is None:
        raise UnauthorizedError("Authentication required")

    organization_id = ProfileService.get_organization_id(user.id)
    if not organization_id:
        raise AccessDeniedError("User is not part of an organization", code="NO_ORGANIZATION")
    return OrgContext(user=user, organization_id=organization_id)


# =============================================================================
# Mobile API Key
# =============================================================================

async def require_mobile_api_key(
    x_api_key: Optional[str] = Header(default=None, alias="x-api-key"),
) -> None:
    """Gate for the sales app, which authenticates with a shared key."""
    if not settings.MOBILE_API_KEY:
        logger.error("MOBILE_API_KEY is not set; rejecting mobile request")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="API key not configured")

    if not x_api_key or not hmac.compare_digest(x_api_key.encode(), settings.MOBILE_API_KEY.encode()):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")
