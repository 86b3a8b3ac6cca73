# =============================================================================
# core/models/lead.py - Lead Schemas
# =============================================================================
# Leads are prospective clients collected from CSV imports and the website
# chat widget. Scores are computed by the calculate_lead_score() function.
# =============================================================================

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LeadStatus(str, Enum):
    """
    Pipeline status of a lead.

    - uncontacted: imported, nobody has reached out
    - new: created from an inbound conversation
    """
    UNCONTACTED = "uncontacted"
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"


class LeadScoreRequest(BaseModel):
    """Body of POST /api/leads/score."""

    model_config = ConfigDict(populate_by_name=True)

    lead_id: str | None = Field(default=None, alias="leadId")


class LeadImportRequest(BaseModel):
    """
    Body of POST /api/leads/import-csv.

    Rows are raw CSV records; column names vary by source and are
    normalized by LeadService.normalize_import_row().

    Example:
        {"leads": [{"contact_name": "Sam Lee", "contact_email": "SAM@venue.com", "venue": "The Basement"}]}
    """
    leads: Any = None
