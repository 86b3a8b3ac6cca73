# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the FastAPI web application:
# - main.py: App entry point, middleware setup, error handlers
# - config.py: Environment variable loading and settings
# - exceptions.py: Domain errors and their JSON shape
# - auth/: Supabase JWT, Supabase Auth and API key dependencies
# - routers/: API endpoint definitions organized by feature
#
# Handlers stay thin and delegate to core/services.
# =============================================================================
