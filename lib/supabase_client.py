# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# Typed wrapper around supabase-py. Two singleton clients are kept:
# - the service-role client for table, RPC and storage access (bypasses RLS)
# - the anon client for auth calls that act on behalf of a user
#   (token validation, session refresh)
#
# Table queries stay in core/services; this module owns the client lifecycle
# plus a few generic helpers shared by every service.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   client = SupabaseClient.get_client()
#   result = SupabaseClient.call_rpc("scan_direction", {...})
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST code for "JSON object requested, multiple (or no) rows returned"
NO_ROWS_CODE = "PGRST116"

# Postgres unique_violation
UNIQUE_VIOLATION_CODE = "23505"


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Carries a machine-readable code and, when known, how to fix it.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


def is_no_rows_error(error: Exception) -> bool:
    """True when PostgREST reports that a single-row query matched nothing."""
    return NO_ROWS_CODE in str(error)


def is_unique_violation(error: Exception) -> bool:
    """True when Postgres rejected an insert on a unique constraint."""
    return getattr(error, "code", None) == UNIQUE_VIOLATION_CODE or UNIQUE_VIOLATION_CODE in str(error)


class SupabaseClient:
    """
    Singleton access to the Supabase project.

    All methods are class methods so services can use the wrapper without
    instantiating it (and tests can patch it in one place).

    Example:
        client = SupabaseClient.get_client()
        rows = client.table("jobs").select("id, title").execute().data
    """

    _instance: Client | None = None
    _anon_instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the service-role client.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def get_anon_client(cls) -> Client:
        """
        Get or create the anon-key client used for user auth calls.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._anon_instance is None:
            try:
                cls._anon_instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_ANON_KEY
                )
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase anon client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_ANON_KEY in your .env file"
                )
        return cls._anon_instance

    @classmethod
    def reset(cls) -> None:
        """Drop cached clients (used by tests and after credential rotation)."""
        cls._instance = None
        cls._anon_instance = None

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    @classmethod
    def get_auth_user(cls, access_token: str) -> Any | None:
        """
        Validate an access token against Supabase Auth.

        Returns:
            The supabase-py User object, or None if the token is rejected

        Raises:
            SupabaseClientError: If Supabase Auth cannot be reached
        """
        client = cls.get_client()

        try:
            response = client.auth.get_user(access_token)
        except Exception as e:
            # gotrue raises AuthApiError for bad/expired tokens
            if getattr(e, "status", None) in (401, 403) or "invalid" in str(e).lower() or "expired" in str(e).lower():
                logger.debug(f"Supabase rejected token: {e}")
                return None
            raise SupabaseClientError(
                message=f"Token validation failed: {e}",
                code="AUTH_CHECK_FAILED",
                suggestion="Check that Supabase Auth is reachable",
            )

        return response.user if response else None

    @classmethod
    def refresh_session(cls, refresh_token: str) -> dict[str, Any] | None:
        """
        Exchange a refresh token for a new session.

        Returns:
            Dict with access_token, refresh_token, expires_at, or None if refused
        """
        client = cls.get_anon_client()

        try:
            response = client.auth.refresh_session(refresh_token)
        except Exception as e:
            logger.warning(f"Session refresh failed: {e}")
            return None

        session = response.session if response else None
        if session is None:
            return None

        return {
            "access_token": session.access_token,
            "refresh_token": session.refresh_token,
            "expires_at": session.expires_at,
        }

    # -------------------------------------------------------------------------
    # Generic Helpers
    # -------------------------------------------------------------------------

    @classmethod
    def call_rpc(cls, function_name: str, params: dict[str, Any]) -> Any:
        """
        Call a Postgres function through PostgREST.

        Returns:
            The function's return value (response.data)

        Raises:
            SupabaseClientError: If the function raised or the call failed
        """
        client = cls.get_client()

        try:
            response = client.rpc(function_name, params).execute()
            return response.data
        except Exception as e:
            raise SupabaseClientError(
                message=getattr(e, "message", None) or str(e),
                code="RPC_FAILED",
                details={"function": function_name},
            )

    @classmethod
    def fetch_single(
        cls,
        table: str,
        filters: dict[str, Any],
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """
        Fetch at most one row matching all equality filters.

        Returns:
            Row dict, or None if nothing matched

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            query = client.table(table).select(columns)
            for column, value in filters.items():
                query = query.eq(column, cls._normalize_uuid(value))

            response = query.maybe_single().execute()
            # maybe_single() returns None instead of an empty response in supabase-py v2
            return response.data if response else None

        except Exception as e:
            if is_no_rows_error(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch from {table}: {e}",
                code="FETCH_FAILED",
                details={"table": table, "filters": {k: str(v) for k, v in filters.items()}},
            )
