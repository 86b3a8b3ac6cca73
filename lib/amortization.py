# =============================================================================
# lib/amortization.py - Equipment Amortization Math
# =============================================================================
# Pure functions for spreading an item's purchase cost across the jobs it is
# expected to work over its useful life.
#
# Usage:
#   from lib.amortization import calculate_amortization_per_job
#   per_job = calculate_amortization_per_job(10000, 5, 50, 500)  # 38.0
# =============================================================================

from lib.utils import round_half_up


def calculate_amortization_per_job(
    purchase_cost: float,
    useful_life_years: float,
    estimated_jobs_per_year: float,
    residual_value: float = 0,
) -> float:
    """
    Cost recovered each time an item goes out on a job.

    Formula: (purchase_cost - residual_value) / (useful_life_years * jobs_per_year)

    Returns 0 when the item has no usable life or no expected jobs.
    Rounded to 4 decimals so small per-job amounts survive multiplication.

    Example:
        calculate_amortization_per_job(10000, 5, 50, 500)  # 38.0
    """
    if useful_life_years <= 0 or estimated_jobs_per_year <= 0:
        return 0

    depreciable = purchase_cost - residual_value
    total_jobs = useful_life_years * estimated_jobs_per_year
    return round_half_up(depreciable / total_jobs, 4)


def calculate_total_amortization_for_gear(
    amortization_per_job: float,
    quantity: int = 1,
) -> float:
    """Per-job amortization times quantity, rounded to cents."""
    return round_half_up(amortization_per_job * quantity, 2)


def calculate_amortization_with_markup(
    amortization: float,
    markup_percent: float = 10,
) -> float:
    """
    Apply a percentage markup to an amortization amount.

    Example:
        calculate_amortization_with_markup(114)  # 125.4
    """
    return round_half_up(amortization * (1 + markup_percent / 100), 2)


def calculate_remaining_value(
    purchase_cost: float,
    useful_life_years: float,
    years_used: float,
    residual_value: float = 0,
) -> float:
    """
    Straight-line book value after a number of years in service.

    Items with no useful life, or that have outlived it, are worth their
    residual value.
    """
    if useful_life_years <= 0 or years_used >= useful_life_years:
        return residual_value

    annual_depreciation = (purchase_cost - residual_value) / useful_life_years
    return round_half_up(purchase_cost - annual_depreciation * years_used, 2)
