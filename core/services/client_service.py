# =============================================================================
# core/services/client_service.py - Client Directory
# =============================================================================

import logging
from typing import Any

from app.exceptions import DatabaseOperationError, InvalidRequestError
from core.models.financing import ClientCreateRequest
from core.models.job import ClientForm
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

OPTIONAL_CLIENT_FIELDS = ("phone", "company", "address", "city", "state", "zip")


class ClientService:

    @staticmethod
    def list_clients(limit: int = 100, offset: int = 0) -> list[dict[str, Any]]:
        """Contact list for the crew app."""
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("clients")
                .select("id, name, email, phone")
                .order("name")
                .range(offset, offset + limit - 1)
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("fetch clients", str(e))
        return response.data or []

    @staticmethod
    def search_clients(search: str | None = None, limit: int = 100) -> list[dict[str, Any]]:
        """Full client rows, optionally filtered by name/email/company substring."""
        client = SupabaseClient.get_client()
        try:
            query = client.table("clients").select("*")
            if search:
                query = query.or_(
                    f"name.ilike.%{search}%,email.ilike.%{search}%,company.ilike.%{search}%"
                )
            response = query.order("name").limit(limit).execute()
        except Exception as e:
            raise DatabaseOperationError("fetch clients", str(e))
        return response.data or []

    @staticmethod
    def create_client(request: ClientCreateRequest) -> dict[str, Any]:
        if not request.name or not request.email:
            raise InvalidRequestError("Name and email are required")

        row = {"name": request.name, "email": request.email}
        for field_name in OPTIONAL_CLIENT_FIELDS:
            row[field_name] = getattr(request, field_name) or None

        client = SupabaseClient.get_client()
        try:
            response = client.table("clients").insert(row).execute()
        except Exception as e:
            raise DatabaseOperationError("create client", str(e))

        created = response.data[0] if response.data else row
        logger.info(f"Created client {created.get('id')} ({request.email})")
        return created

    @staticmethod
    def create_from_form(form: ClientForm) -> dict[str, Any]:
        """Dashboard client form. Missing contact details are stored as empty strings."""
        row = {"name": form.name, "email": form.email or "", "phone": form.phone or ""}

        client = SupabaseClient.get_client()
        try:
            response = client.table("clients").insert([row]).execute()
        except Exception as e:
            raise DatabaseOperationError("create client", str(e))

        created = response.data[0] if response.data else row
        logger.info(f"Created client {created.get('id')} ({form.name})")
        return created
