# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the Bright Ops business logic:
# - models/: Pydantic schemas for request validation
# - services/: Supabase-backed operations (one class per area)
#
# Services raise app.exceptions errors but never touch Request/Response
# objects, so routers stay thin and services stay testable.
# =============================================================================
