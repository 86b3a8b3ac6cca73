# =============================================================================
# app/routers/tokens.py - AI Token Endpoints
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Query

from app.dependencies import OptionalUserDep, OrgContextDep
from app.exceptions import (
    AccessDeniedError,
    DatabaseOperationError,
    InvalidRequestError,
    UnauthorizedError,
)
from core.models.tokens import TokenCheckRequest
from core.services.token_service import TokenService
from lib.utils import utc_now_iso

router = APIRouter()


@router.post("/check-balance")
async def check_balance(request: TokenCheckRequest, user: OptionalUserDep):
    """
    Check or spend tokens for an AI feature.

    action="check" needs no session; action="deduct" charges the signed-in user.
    """
    if not request.organization_id or not request.feature_used:
        raise InvalidRequestError("Missing organizationId or featureUsed")

    if request.action == "check":
        return {"hasTokens": TokenService.has_enough_tokens(request.organization_id, request.feature_used)}

    if request.action == "deduct":
        if user is None:
            raise UnauthorizedError("Unauthorized - no user session")
        return TokenService.deduct_tokens(
            request.organization_id,
            str(user.id),
            request.feature_used,
            {"requestedAt": utc_now_iso()},
        )

    raise InvalidRequestError('Invalid action. Use "check" or "deduct"')


@router.get("/stats")
async def get_token_stats(
    context: OrgContextDep,
    organization_id: Annotated[str | None, Query(alias="organizationId")] = None,
):
    """Balance, allocation and usage per token type for the caller's organization."""
    if not organization_id:
        raise InvalidRequestError("Missing organizationId query parameter")

    if context.organization_id != organization_id:
        raise AccessDeniedError("Forbidden - no access to this organization")

    stats = TokenService.get_token_stats(organization_id)
    if stats is None:
        raise DatabaseOperationError("fetch token stats", "No token balances found")
    return stats
