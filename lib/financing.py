# =============================================================================
# lib/financing.py - Lease-to-Own Payment Calculator
# =============================================================================
# Standard amortized-loan payment math for the mobile financing calculator.
# Sales tax is added to the purchase price, the residual (buyout) amount is
# held back, and the remainder is financed at a fixed annual rate.
# =============================================================================

from lib.utils import round_half_up

DEFAULT_ANNUAL_RATE = 8.9
DEFAULT_RESIDUAL_PERCENTAGE = 10
MAX_TERM_MONTHS = 600


def calculate_monthly_payment(principal: float, annual_rate: float, term_months: int) -> float:
    """
    Monthly payment for a fully amortizing loan.

    payment = P * r(1+r)^n / ((1+r)^n - 1), where r is the monthly rate.
    A zero rate degrades to straight division.
    """
    if term_months <= 0:
        raise ValueError("term_months must be positive")

    monthly_rate = annual_rate / 100 / 12
    if monthly_rate == 0:
        return principal / term_months

    growth = (1 + monthly_rate) ** term_months
    return principal * (monthly_rate * growth) / (growth - 1)


def calculate_lease(
    purchase_cost: float,
    term_months: int,
    sales_tax: float = 0,
    residual_percentage: float = DEFAULT_RESIDUAL_PERCENTAGE,
    annual_rate: float = DEFAULT_ANNUAL_RATE,
) -> dict:
    """
    Full lease breakdown, keyed the way the mobile app reads it.

    Only the payment totals are rounded; intermediate amounts are returned
    as computed so the app can format them itself.

    Example:
        calculate_lease(10000, 36, sales_tax=8.25)["monthlyPayment"]
    """
    sales_tax_amount = purchase_cost * (sales_tax / 100)
    total_cost = purchase_cost + sales_tax_amount
    residual_amount = total_cost * (residual_percentage / 100)
    financed_amount = total_cost - residual_amount

    monthly_payment = calculate_monthly_payment(financed_amount, annual_rate, term_months)
    total_payments = monthly_payment * term_months
    total_interest = total_payments - financed_amount

    return {
        "purchaseCost": purchase_cost,
        "salesTax": sales_tax,
        "salesTaxAmount": sales_tax_amount,
        "totalCost": total_cost,
        "termMonths": term_months,
        "residualPercentage": residual_percentage,
        "residualAmount": residual_amount,
        "financedAmount": financed_amount,
        "annualInterestRate": annual_rate,
        "monthlyPayment": round_half_up(monthly_payment, 2),
        "totalPayments": round_half_up(total_payments, 2),
        "totalInterest": round_half_up(total_interest, 2),
        "totalCostWithInterest": round_half_up(total_payments + residual_amount, 2),
    }


def format_e164(phone_number: str) -> str:
    """
    Normalize a US phone number to E.164 for Twilio.

    Strips everything but digits and prefixes the US country code on
    10-digit numbers.

    Example:
        format_e164("(555) 123-4567")  # "+15551234567"
    """
    digits = "".join(ch for ch in phone_number if ch.isdigit())
    if len(digits) == 10 and not digits.startswith("1"):
        digits = "1" + digits
    return "+" + digits
