# =============================================================================
# lib/quarterly_revenue.py - Quarter Math and Revenue Formatting
# =============================================================================
# Calendar-quarter helpers and the formatters used by the revenue dashboard.
# All functions are pure; aggregate_quarterly_totals() folds job rows into
# "{year}-Q{n}" buckets.
# =============================================================================

import calendar
import math
from datetime import date, datetime
from typing import Any, Iterable

from lib.utils import parse_timestamp, to_float

QUARTER_COLORS = {
    1: "#3b82f6",
    2: "#10b981",
    3: "#f59e0b",
    4: "#ef4444",
}
DEFAULT_QUARTER_COLOR = "#6b7280"


def get_quarter(value: date | datetime) -> int:
    """Quarter (1-4) for a date."""
    return math.ceil(value.month / 3)


def get_current_quarter(today: date | None = None) -> dict[str, int]:
    """{"quarter": n, "year": yyyy} for today."""
    today = today or date.today()
    return {"quarter": get_quarter(today), "year": today.year}


def get_quarter_date_range(quarter: int, year: int) -> dict[str, datetime]:
    """
    First and last instant of a quarter.

    The end is 23:59:59.999 on the last day of the quarter's final month.
    """
    start_month = (quarter - 1) * 3 + 1
    end_month = quarter * 3
    last_day = calendar.monthrange(year, end_month)[1]
    return {
        "start": datetime(year, start_month, 1),
        "end": datetime(year, end_month, last_day, 23, 59, 59, 999000),
    }


def get_quarter_name(quarter: int) -> str:
    if quarter in (1, 2, 3, 4):
        return f"Q{quarter}"
    return "Invalid"


def get_quarter_label(quarter: int, year: int) -> str:
    """"Q1 2025" style label."""
    return f"{get_quarter_name(quarter)} {year}"


def format_currency(amount: float) -> str:
    """USD with thousands separators and cents: 1234.5 -> "$1,234.50"."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def calculate_profit(revenue: float, expenses: float) -> float:
    return revenue - expenses


def calculate_profit_margin(revenue: float, expenses: float) -> float:
    """Profit as a percentage of revenue; 0 when there is no revenue."""
    if revenue == 0:
        return 0
    return (revenue - expenses) / revenue * 100


def format_profit_margin(margin: float) -> str:
    return f"{margin:.1f}%"


def is_date_in_quarter(value: date | datetime, quarter: int, year: int) -> bool:
    if isinstance(value, datetime):
        value = value.replace(tzinfo=None)
    else:
        value = datetime(value.year, value.month, value.day)
    window = get_quarter_date_range(quarter, year)
    return window["start"] <= value <= window["end"]


def get_quarters_for_year(year: int) -> list[dict[str, int]]:
    return [{"quarter": q, "year": year} for q in range(1, 5)]


def get_previous_quarters(count: int = 4, today: date | None = None) -> list[dict[str, int]]:
    """
    The last `count` quarters including the current one, oldest first.

    Example (today in Q1 2025, count=3):
        [{"quarter": 3, "year": 2024}, {"quarter": 4, "year": 2024}, {"quarter": 1, "year": 2025}]
    """
    current = get_current_quarter(today)
    quarter, year = current["quarter"], current["year"]

    quarters = []
    for _ in range(count):
        quarters.append({"quarter": quarter, "year": year})
        quarter -= 1
        if quarter == 0:
            quarter = 4
            year -= 1

    quarters.reverse()
    return quarters


def calculate_qoq_growth(current: float, previous: float) -> float:
    """Quarter-over-quarter growth in percent; 0 when there is no baseline."""
    if previous == 0:
        return 0
    return (current - previous) / abs(previous) * 100


def format_growth(growth: float) -> str:
    """Signed one-decimal percentage: 12.34 -> "+12.3%"."""
    sign = "+" if growth > 0 else ""
    return f"{sign}{growth:.1f}%"


def get_quarter_color(quarter: int) -> str:
    return QUARTER_COLORS.get(quarter, DEFAULT_QUARTER_COLOR)


def calculate_average_job_value(total_revenue: float, job_count: int) -> float:
    if job_count == 0:
        return 0
    return total_revenue / job_count


def quarter_key(quarter: int, year: int) -> str:
    return f"{year}-Q{quarter}"


def aggregate_quarterly_totals(jobs: Iterable[dict[str, Any]]) -> dict[str, dict[str, float]]:
    """
    Bucket job rows by the quarter of their event_date.

    Each job contributes income_amount to income and estimated_cost to
    expenses. Jobs without an event_date are skipped.

    Returns:
        {"2025-Q1": {"income": .., "expenses": .., "profit": .., "job_count": ..}, ...}
    """
    totals: dict[str, dict[str, float]] = {}

    for job in jobs:
        event_date = parse_timestamp(job.get("event_date"))
        if event_date is None:
            continue

        key = quarter_key(get_quarter(event_date), event_date.year)
        bucket = totals.setdefault(key, {"income": 0.0, "expenses": 0.0, "profit": 0.0, "job_count": 0})
        bucket["income"] += to_float(job.get("income_amount"))
        bucket["expenses"] += to_float(job.get("estimated_cost"))
        bucket["job_count"] += 1

    for bucket in totals.values():
        bucket["profit"] = calculate_profit(bucket["income"], bucket["expenses"])

    return totals
