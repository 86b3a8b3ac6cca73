# =============================================================================
# core/services/revenue_service.py - Quarterly Revenue Summary
# =============================================================================

import logging
from datetime import date
from typing import Any

from app.exceptions import DatabaseOperationError
from lib.quarterly_revenue import (
    aggregate_quarterly_totals,
    calculate_average_job_value,
    calculate_profit_margin,
    calculate_qoq_growth,
    format_currency,
    format_growth,
    format_profit_margin,
    get_previous_quarters,
    get_quarter_color,
    get_quarter_date_range,
    get_quarter_label,
    quarter_key,
)
from lib.supabase_client import SupabaseClient
from lib.utils import round_half_up

logger = logging.getLogger(__name__)


class RevenueService:

    @staticmethod
    def fetch_jobs(organization_id: str, since: str) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("jobs")
                .select("id, event_date, income_amount, estimated_cost")
                .eq("organization_id", organization_id)
                .gte("event_date", since)
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("fetch jobs for revenue", str(e))
        return response.data or []

    @staticmethod
    def quarterly_summary(
        organization_id: str,
        count: int = 4,
        today: date | None = None,
    ) -> list[dict[str, Any]]:
        """
        Income, expenses and profit for the last `count` quarters, oldest first.

        Quarters with no jobs are reported as zeros so charts keep their axis.
        Growth compares income with the quarter before it in the list, so the
        first quarter always shows 0.
        """
        quarters = get_previous_quarters(count, today)
        oldest = quarters[0]
        since = get_quarter_date_range(oldest["quarter"], oldest["year"])["start"]

        totals = aggregate_quarterly_totals(
            RevenueService.fetch_jobs(organization_id, since.date().isoformat())
        )

        summary = []
        previous_income = 0.0
        for q in quarters:
            bucket = totals.get(
                quarter_key(q["quarter"], q["year"]),
                {"income": 0.0, "expenses": 0.0, "profit": 0.0, "job_count": 0},
            )
            income = bucket["income"]
            margin = calculate_profit_margin(income, bucket["expenses"])
            growth = calculate_qoq_growth(income, previous_income)

            summary.append({
                "quarter": q["quarter"],
                "year": q["year"],
                "label": get_quarter_label(q["quarter"], q["year"]),
                "color": get_quarter_color(q["quarter"]),
                "income": round_half_up(income),
                "expenses": round_half_up(bucket["expenses"]),
                "profit": round_half_up(bucket["profit"]),
                "jobCount": int(bucket["job_count"]),
                "averageJobValue": round_half_up(
                    calculate_average_job_value(income, int(bucket["job_count"]))
                ),
                "profitMargin": round_half_up(margin),
                "growth": round_half_up(growth, 1),
                "formatted": {
                    "income": format_currency(income),
                    "profit": format_currency(bucket["profit"]),
                    "profitMargin": format_profit_margin(margin),
                    "growth": format_growth(growth),
                },
            })
            previous_income = income

        return summary
