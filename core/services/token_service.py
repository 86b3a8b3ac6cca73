# =============================================================================
# core/services/token_service.py - AI Token Balances
# =============================================================================
# Each organization holds one ai_tokens row per token type. AI features
# spend from the balance matching their feature name; every deduction is
# written to ai_token_usage_log.
#
# Usage:
#   if TokenService.has_enough_tokens(org_id, "generate_leads"):
#       result = TokenService.deduct_tokens(org_id, user_id, "generate_leads")
# =============================================================================

import logging
from datetime import timedelta
from typing import Any

from app.exceptions import DatabaseOperationError
from core.models.tokens import PlanTier, TokenType
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, to_float, utc_now, utc_now_iso

logger = logging.getLogger(__name__)

TOKEN_LIMITS: dict[str, dict[str, int]] = {
    PlanTier.STARTER.value: {
        TokenType.LEAD_GENERATION.value: 0,
        TokenType.GOAL_GENERATION.value: 0,
        TokenType.STRATEGY_ANALYSIS.value: 0,
        TokenType.FORECAST.value: 0,
        TokenType.GENERAL.value: 0,
    },
    PlanTier.PRO.value: {
        TokenType.LEAD_GENERATION.value: 50,
        TokenType.GOAL_GENERATION.value: 20,
        TokenType.STRATEGY_ANALYSIS.value: 100,
        TokenType.FORECAST.value: 30,
        TokenType.GENERAL.value: 50,
    },
    PlanTier.ENTERPRISE.value: {
        TokenType.LEAD_GENERATION.value: 500,
        TokenType.GOAL_GENERATION.value: 200,
        TokenType.STRATEGY_ANALYSIS.value: 1000,
        TokenType.FORECAST.value: 200,
        TokenType.GENERAL.value: 500,
    },
}

TOKEN_COSTS: dict[str, int] = {
    "generate_leads": 5,
    "generate_goal": 3,
    "analyze_strategy": 2,
    "forecast_revenue": 4,
    "analyze_efficiency": 2,
    "generate_insight": 1,
}
DEFAULT_TOKEN_COST = 1

REFRESH_PERIOD = timedelta(days=30)

TABLE = "ai_tokens"
USAGE_LOG_TABLE = "ai_token_usage_log"


def get_token_cost(feature: str) -> int:
    return TOKEN_COSTS.get(feature, DEFAULT_TOKEN_COST)


def get_token_type(feature: str) -> str:
    """Token family for a feature, matched by substring in priority order."""
    if "lead" in feature:
        return TokenType.LEAD_GENERATION.value
    if "goal" in feature:
        return TokenType.GOAL_GENERATION.value
    if "strategy" in feature:
        return TokenType.STRATEGY_ANALYSIS.value
    if "forecast" in feature:
        return TokenType.FORECAST.value
    return TokenType.GENERAL.value


class TokenService:

    @staticmethod
    def initialize_tokens(organization_id: str, plan: str) -> None:
        """Create one balance row per token type at the plan's allowance."""
        limits = TOKEN_LIMITS.get(plan, TOKEN_LIMITS[PlanTier.STARTER.value])
        refresh_date = (utc_now() + REFRESH_PERIOD).isoformat()

        rows = [
            {
                "organization_id": organization_id,
                "token_type": token_type,
                "balance": limit,
                "total_allocated": limit,
                "total_used": 0,
                "refresh_date": refresh_date,
            }
            for token_type, limit in limits.items()
        ]

        client = SupabaseClient.get_client()
        try:
            client.table(TABLE).insert(rows).execute()
        except Exception as e:
            raise DatabaseOperationError("initialize AI tokens", str(e))
        logger.info(f"Initialized {plan} token balances for org {organization_id}")

    @staticmethod
    def _fetch_row(organization_id: str, token_type: str) -> dict[str, Any] | None:
        return SupabaseClient.fetch_single(
            TABLE,
            {"organization_id": organization_id, "token_type": token_type},
        )

    @staticmethod
    def get_balance(organization_id: str, token_type: str) -> int:
        """Current balance; 0 if the row is missing or unreadable."""
        try:
            row = TokenService._fetch_row(organization_id, token_type)
        except Exception as e:
            logger.error(f"Failed to read {token_type} balance for org {organization_id}: {e}")
            return 0
        return int(to_float(row.get("balance"))) if row else 0

    @staticmethod
    def get_all_balances(organization_id: str) -> dict[str, int]:
        balances = {t.value: 0 for t in TokenType}

        client = SupabaseClient.get_client()
        try:
            response = (
                client.table(TABLE)
                .select("token_type, balance")
                .eq("organization_id", organization_id)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to read balances for org {organization_id}: {e}")
            return balances

        for row in response.data or []:
            balances[row["token_type"]] = int(to_float(row.get("balance")))
        return balances

    @staticmethod
    def has_enough_tokens(organization_id: str, feature: str) -> bool:
        balance = TokenService.get_balance(organization_id, get_token_type(feature))
        return balance >= get_token_cost(feature)

    @staticmethod
    def deduct_tokens(
        organization_id: str,
        user_id: str,
        feature: str,
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Spend the feature's cost from its token family.

        Returns:
            {"success": bool, "remaining_balance": int, "message": str}
        """
        token_type = get_token_type(feature)
        cost = get_token_cost(feature)

        row = TokenService._fetch_row(organization_id, token_type)
        balance = int(to_float(row.get("balance"))) if row else 0

        if balance < cost:
            return {
                "success": False,
                "remaining_balance": balance,
                "message": f"Insufficient tokens. Need {cost}, have {balance}",
            }

        remaining = balance - cost
        client = SupabaseClient.get_client()

        try:
            (
                client.table(TABLE)
                .update({
                    "balance": remaining,
                    "total_used": int(to_float(row.get("total_used"))) + cost,
                    "updated_at": utc_now_iso(),
                })
                .eq("organization_id", organization_id)
                .eq("token_type", token_type)
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("deduct AI tokens", str(e))

        try:
            client.table(USAGE_LOG_TABLE).insert({
                "organization_id": organization_id,
                "user_id": normalize_uuid(user_id),
                "token_type": token_type,
                "feature_used": feature,
                "tokens_deducted": cost,
                "remaining_balance": remaining,
                "metadata": metadata or {},
            }).execute()
        except Exception as e:
            logger.warning(f"Failed to log token usage for org {organization_id}: {e}")

        logger.info(f"Org {organization_id} spent {cost} {token_type} tokens on {feature}")
        return {
            "success": True,
            "remaining_balance": remaining,
            "message": f"Used {cost} tokens for {feature}",
        }

    @staticmethod
    def upgrade_tokens(organization_id: str, token_type: str, amount: int) -> None:
        """Add purchased tokens to both balance and allocation."""
        row = TokenService._fetch_row(organization_id, token_type)
        if not row:
            raise DatabaseOperationError("upgrade AI tokens", f"No {token_type} balance for organization")

        client = SupabaseClient.get_client()
        try:
            (
                client.table(TABLE)
                .update({
                    "balance": int(to_float(row.get("balance"))) + amount,
                    "total_allocated": int(to_float(row.get("total_allocated"))) + amount,
                    "updated_at": utc_now_iso(),
                })
                .eq("organization_id", organization_id)
                .eq("token_type", token_type)
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("upgrade AI tokens", str(e))

    @staticmethod
    def get_token_stats(organization_id: str) -> dict[str, Any] | None:
        """Totals across all token types, or None if the org has no rows."""
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table(TABLE)
                .select("*")
                .eq("organization_id", organization_id)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to read token stats for org {organization_id}: {e}")
            return None

        rows = response.data or []
        if not rows:
            return None

        by_type = {
            row["token_type"]: {
                "balance": int(to_float(row.get("balance"))),
                "allocated": int(to_float(row.get("total_allocated"))),
                "used": int(to_float(row.get("total_used"))),
            }
            for row in rows
        }
        return {
            "totalBalance": sum(t["balance"] for t in by_type.values()),
            "totalAllocated": sum(t["allocated"] for t in by_type.values()),
            "totalUsed": sum(t["used"] for t in by_type.values()),
            "byType": by_type,
            "refreshDate": rows[0].get("refresh_date"),
        }
