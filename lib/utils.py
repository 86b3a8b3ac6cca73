# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Small helpers used across services and routers:
# - UUID normalization for Supabase filters
# - Half-up rounding for currency and amortization math
# - ISO timestamps in UTC
# - ApplicationError base class for lib-level failures
# =============================================================================

import math
from datetime import datetime, timezone
from typing import Any
from uuid import UUID


# =============================================================================
# UUID Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Supabase filters expect plain strings, while route parameters arrive
    as UUID objects.

    Example:
        job_id = normalize_uuid(uuid_obj)  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


# =============================================================================
# Numeric Utilities
# =============================================================================

def round_half_up(value: float, places: int = 2) -> float:
    """
    Round a number half-up to a fixed number of decimal places.

    Python's built-in round() uses banker's rounding (round(0.125, 2) == 0.12),
    which drifts from the totals shown on cost estimates. This always
    rounds .5 up toward positive infinity, the same way the web dashboard does.

    Example:
        round_half_up(0.125, 2)  # 0.13
        round_half_up(-0.125, 2)  # -0.12
    """
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor


def to_float(value: Any, default: float = 0.0) -> float:
    """Coerce a DB or request value to float, falling back to default."""
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


# =============================================================================
# Time Utilities
# =============================================================================

def utc_now() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string for timestamp columns."""
    return utc_now().isoformat()


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """
    Parse a Postgres/ISO timestamp into an aware datetime.

    Accepts the trailing "Z" that PostgREST emits. Naive values are treated as UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# =============================================================================
# Base Error Class
# =============================================================================

class ApplicationError(Exception):
    """
    Base error class for lib-level failures (sync, rendering, third-party calls).

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging
    """

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
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
            result += f"\n  Suggestion: {self.suggestion}"
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "code": self.code,
            "message": self.message,
            "suggestion": self.suggestion,
            "details": self.details,
        }
