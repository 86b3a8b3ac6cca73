# =============================================================================
# core/models/job.py - Job, Gear and Amortization Schemas
# =============================================================================
# These models define the API contract for job booking:
# - JobCreateRequest: book a job with a gear list (POST /api/jobs)
# - AmortizationRequest: record amortization line items for a job
# - ClientForm / JobForm: dashboard form validation
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class JobStatus:
    """Job statuses that crew can still sign up for."""
    SCHEDULED = "Scheduled"
    CONFIRMED = "Confirmed"

    OPEN = (SCHEDULED, CONFIRMED)


class GearLine(BaseModel):
    """One gear row on a job booking."""

    # inventory_items.id
    gear_id: str = Field(..., description="Inventory item ID")

    quantity: int = Field(default=1, ge=1, description="Units booked")


class JobCreateRequest(BaseModel):
    """
    Body of POST /api/jobs.

    Example:
        {
            "client_name": "Riverside Church",
            "job_date": "2025-03-14",
            "gear": [{"gear_id": "a1b2...", "quantity": 4}],
            "total_price": 2450.00,
            "warehouse_location": "Nashville"
        }
    """

    client_name: str | None = Field(default=None)
    job_date: str | None = Field(default=None, description="Event start date (ISO)")
    gear: list[GearLine] | None = Field(default=None)
    total_price: float | None = Field(default=None, description="Quoted price")

    # Warehouse name, or "All Locations" to use the caller's default warehouse
    warehouse_location: str | None = Field(default=None)


class AmortizationGear(BaseModel):
    """One item to amortize against a job."""
    inventory_item_id: str
    quantity: int = Field(default=1, ge=1)


class AmortizationRequest(BaseModel):
    """
    Body of POST /api/amortization.

    Example:
        {"job_id": "c0ff...", "gear": [{"inventory_item_id": "a1b2...", "quantity": 3}]}
    """
    job_id: str | None = Field(default=None)
    gear: list[AmortizationGear] = Field(default_factory=list)


class ClientForm(BaseModel):
    """Client create/edit form. Only the name is required."""
    name: str = Field(..., min_length=1, description="Client name is required")
    email: EmailStr | None = Field(default=None)
    phone: str | None = Field(default=None)


class JobForm(BaseModel):
    """Job create/edit form."""
    code: str = Field(..., min_length=1, description="Job code is required")
    title: str | None = None
    client_id: str = Field(..., min_length=1, description="Client is required")
    venue: str | None = None
    start_at: datetime | None = None
    end_at: datetime | None = None
    notes: str | None = None
