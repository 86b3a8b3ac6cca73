# =============================================================================
# core/services/lead_service.py - Lead Scoring and Import
# =============================================================================
# Scores are computed in the database (calculate_lead_score); this service
# triggers recalculation, records the activity, and bulk-imports leads from
# CSV exports whose column names vary by source.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import (
    ConflictError,
    DatabaseOperationError,
    InvalidRequestError,
)
from core.models.lead import LeadStatus
from lib.supabase_client import SupabaseClient, SupabaseClientError, is_unique_violation
from lib.utils import normalize_uuid

logger = logging.getLogger(__name__)


def _first(row: dict[str, Any], *keys: str) -> Any:
    """First truthy value among the given column names."""
    for key in keys:
        if row.get(key):
            return row[key]
    return None


class LeadService:

    # -------------------------------------------------------------------------
    # Scoring
    # -------------------------------------------------------------------------

    @staticmethod
    def calculate_score(lead_id: str) -> Any:
        return SupabaseClient.call_rpc("calculate_lead_score", {"lead_id_param": lead_id})

    @staticmethod
    def score_lead(lead_id: str | None, user_id: UUID | str) -> dict[str, Any]:
        """
        Recalculate one lead's score and log a score_changed activity.

        Returns:
            {"score": <new score>}
        """
        if not lead_id:
            raise InvalidRequestError("leadId is required")

        try:
            score = LeadService.calculate_score(lead_id)
        except SupabaseClientError as e:
            raise DatabaseOperationError("calculate lead score", e.message)

        client = SupabaseClient.get_client()
        try:
            client.table("lead_activities").insert({
                "lead_id": lead_id,
                "activity_type": "score_changed",
                "title": "Score Updated",
                "description": f"Lead score recalculated to {score}",
                "metadata": {"new_score": score},
                "created_by": normalize_uuid(user_id),
            }).execute()
        except Exception as e:
            logger.warning(f"Could not log score activity for lead {lead_id}: {e}")

        return {"score": score}

    @staticmethod
    def recalculate_all() -> dict[str, Any]:
        """
        Recalculate every lead's score. A lead that fails is logged and skipped.
        """
        client = SupabaseClient.get_client()
        try:
            response = client.table("leads").select("id").execute()
        except Exception as e:
            raise DatabaseOperationError("fetch leads", str(e))

        leads = response.data or []
        updated = 0
        for lead in leads:
            try:
                LeadService.calculate_score(lead["id"])
                updated += 1
            except SupabaseClientError as e:
                logger.error(f"Score recalculation failed for lead {lead['id']}: {e}")

        logger.info(f"Recalculated scores for {updated}/{len(leads)} leads")
        return {"message": f"Updated scores for {len(leads)} leads", "updated": updated}

    # -------------------------------------------------------------------------
    # CSV Import
    # -------------------------------------------------------------------------

    @staticmethod
    def normalize_import_row(row: dict[str, Any], index: int) -> dict[str, Any]:
        """
        Map a raw CSV record onto leads columns.

        Args:
            row: Raw record
            index: 1-based row number, used in error messages

        Raises:
            InvalidRequestError: If the row has no email
        """
        email = _first(row, "email", "contact_email")
        if not email or not str(email).strip():
            raise InvalidRequestError(f"Lead {index}: Missing email address")

        lead = {
            "name": str(_first(row, "name", "contact_name") or "Unknown").strip(),
            "email": str(email).strip().lower(),
            "org": _first(row, "org", "organization", "company", "venue"),
            "title": _first(row, "title", "position", "job_title"),
            "snippet": _first(row, "snippet", "notes", "description"),
            "status": row.get("status") or LeadStatus.UNCONTACTED.value,
            "phone": row.get("phone"),
            "website": row.get("website"),
        }
        if row.get("source"):
            lead["source"] = row["source"]
        if row.get("venue"):
            lead["venue"] = row["venue"]
        return lead

    @staticmethod
    def import_leads(rows: Any) -> dict[str, Any]:
        """
        Insert a batch of CSV leads in one statement.

        Raises:
            InvalidRequestError: Empty payload or a row without email
            ConflictError: One or more emails already exist
        """
        if not isinstance(rows, list) or not rows:
            raise InvalidRequestError("No leads provided")

        leads = [
            LeadService.normalize_import_row(row if isinstance(row, dict) else {}, index)
            for index, row in enumerate(rows, start=1)
        ]

        client = SupabaseClient.get_client()
        try:
            response = client.table("leads").insert(leads).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise ConflictError(
                    "Some leads already exist (duplicate emails)",
                    code="DUPLICATE_LEADS",
                )
            raise DatabaseOperationError("import leads", str(e))

        inserted = response.data or []
        logger.info(f"Imported {len(inserted)} leads")
        return {
            "success": True,
            "count": len(inserted),
            "leads": inserted,
            "message": f"Successfully imported {len(inserted)} leads",
        }
