# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Bright Ops API:
# - test_amortization.py, test_financing.py, test_barcodes.py,
#   test_quarterly_revenue.py: pure calculation modules
# - test_conflict_resolver.py, test_network_monitor.py, test_outbox_sync.py:
#   offline sync client
# - test_*_service.py (scan, job, crew, directory, sync, ...): services
#   against a faked Supabase client
# - test_routes.py: API endpoints through TestClient
#
# Run tests with: pytest
# =============================================================================
