# =============================================================================
# core/models/financing.py - Lease-to-Own Schemas
# =============================================================================
# Used by the mobile sales app (/api/mobile/*). Field names follow the
# app's camelCase payloads via aliases.
# =============================================================================

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class CalculatorRequest(BaseModel):
    """
    Body of POST /api/mobile/calculator.

    Values arrive as numbers or numeric strings from the app's text fields.

    Example:
        {"purchaseCost": 12000, "termMonths": 36, "salesTax": 9.25, "residualPercentage": 10}
    """

    model_config = ConfigDict(populate_by_name=True)

    purchase_cost: Any = Field(default=None, alias="purchaseCost")
    term_months: Any = Field(default=None, alias="termMonths")
    sales_tax: Any = Field(default=0, alias="salesTax")
    residual_percentage: Any = Field(default=10, alias="residualPercentage")


class ClientCreateRequest(BaseModel):
    """Body of POST /api/mobile/clients. Name and email are required."""
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None


class ApplicationCreateRequest(BaseModel):
    """
    Body of POST /api/mobile/applications.

    When equipment_name is given, an equipment_items row is created
    alongside the application.
    """
    client_id: str | None = None
    equipment_cost: float | None = None
    term_months: int | None = None
    sales_tax_rate: float = 0
    residual_percentage: float = 10
    monthly_payment: float | None = None
    notes: str = ""
    equipment_name: str | None = None
