# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .amortization_service import AmortizationService
from .chat_service import ChatService
from .client_service import ClientService
from .crew_service import CrewService
from .financing_service import FinancingService
from .inventory_service import BarcodeExhaustedError, InventoryService
from .job_service import JobService
from .lead_service import LeadService
from .notification_service import NotificationService
from .profile_service import ProfileService
from .pullsheet_service import PullSheetService
from .revenue_service import RevenueService
from .scan_service import ScanService
from .sync_service import SyncService
from .token_service import TokenService

__all__ = [
    "AmortizationService",
    "ChatService",
    "ClientService",
    "CrewService",
    "FinancingService",
    "BarcodeExhaustedError",
    "InventoryService",
    "JobService",
    "LeadService",
    "NotificationService",
    "ProfileService",
    "PullSheetService",
    "RevenueService",
    "ScanService",
    "SyncService",
    "TokenService",
]
