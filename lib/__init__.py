# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable, framework-free helpers:
# - supabase_client.py: Supabase client singletons and generic query helpers
# - amortization.py: per-job equipment cost recovery math
# - financing.py: lease-to-own payment calculator
# - barcodes.py: barcode naming and PNG rendering
# - quarterly_revenue.py: quarter math and revenue formatting
# - sync/: offline outbox, conflict resolution and sync client
# - utils.py: rounding, timestamps, UUID normalization, base error
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import ApplicationError, normalize_uuid, round_half_up

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Utils
    "ApplicationError",
    "normalize_uuid",
    "round_half_up",
]
