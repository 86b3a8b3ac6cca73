# =============================================================================
# core/models/tokens.py - AI Token Schemas
# =============================================================================
# Organizations get a monthly allowance of AI tokens per feature family.
# Each AI feature costs a fixed number of tokens from its family's balance.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TokenType(str, Enum):
    """Feature family a token balance belongs to."""
    LEAD_GENERATION = "lead_generation"
    GOAL_GENERATION = "goal_generation"
    STRATEGY_ANALYSIS = "strategy_analysis"
    FORECAST = "forecast"
    GENERAL = "general"


class PlanTier(str, Enum):
    """Subscription tier; starter has no AI allowance."""
    STARTER = "starter"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class TokenCheckRequest(BaseModel):
    """
    Body of POST /api/v1/tokens/check-balance.

    Example:
        {"organizationId": "0b7f...", "featureUsed": "generate_leads", "action": "deduct"}
    """

    model_config = ConfigDict(populate_by_name=True)

    organization_id: str | None = Field(default=None, alias="organizationId")
    feature_used: str | None = Field(default=None, alias="featureUsed")

    # "check" (default) or "deduct"
    action: str = Field(default="check")
