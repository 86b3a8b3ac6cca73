# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for request validation:
# - scan.py: scan-direction and rig scan bodies
# - inventory.py: inventory lookup and barcode bodies
# - job.py: job booking, amortization and dashboard forms
# - pullsheet.py: pull sheet item updates and permissions
# - crew.py: availability and job assignment bodies
# - lead.py: lead scoring and CSV import
# - chat.py: website chat messages
# - financing.py: mobile lease-to-own app
# - notifications.py: SendGrid / Twilio sends
# - tokens.py: AI token balances
# - sync.py: offline outbox replay
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Warehouse Models - scanning, inventory, pull sheets
# -----------------------------------------------------------------------------
from .scan import RigScanRequest, ScanDirection, ScanDirectionRequest
from .inventory import BarcodeImageRequest, BarcodeSuggestRequest, InventoryScanRequest
from .pullsheet import PullSheetItemPatch, PullSheetPermissions, PullSheetQtyUpdate

# -----------------------------------------------------------------------------
# Job Models - booking, amortization, crew
# -----------------------------------------------------------------------------
from .job import (
    AmortizationGear,
    AmortizationRequest,
    ClientForm,
    GearLine,
    JobCreateRequest,
    JobForm,
    JobStatus,
)
from .crew import AssignmentStatus, AvailabilityRequest, JobAssignmentRequest

# -----------------------------------------------------------------------------
# Sales Models - leads, chat, financing, outbound messages
# -----------------------------------------------------------------------------
from .lead import LeadImportRequest, LeadScoreRequest, LeadStatus
from .chat import AutopilotRequest, ChatSendRequest, SenderType
from .financing import (
    ApplicationCreateRequest,
    ApplicationStatus,
    CalculatorRequest,
    ClientCreateRequest,
    PaymentStatus,
)
from .notifications import EmailSendRequest, SmsSendRequest

# -----------------------------------------------------------------------------
# Platform Models - AI tokens, sync
# -----------------------------------------------------------------------------
from .tokens import PlanTier, TokenCheckRequest, TokenType
from .sync import SYNCABLE_TABLES, SyncChange, SyncChangesRequest

__all__ = [
    # Warehouse
    "RigScanRequest",
    "ScanDirection",
    "ScanDirectionRequest",
    "BarcodeImageRequest",
    "BarcodeSuggestRequest",
    "InventoryScanRequest",
    "PullSheetItemPatch",
    "PullSheetPermissions",
    "PullSheetQtyUpdate",
    # Jobs
    "AmortizationGear",
    "AmortizationRequest",
    "ClientForm",
    "GearLine",
    "JobCreateRequest",
    "JobForm",
    "JobStatus",
    "AssignmentStatus",
    "AvailabilityRequest",
    "JobAssignmentRequest",
    # Sales
    "LeadImportRequest",
    "LeadScoreRequest",
    "LeadStatus",
    "AutopilotRequest",
    "ChatSendRequest",
    "SenderType",
    "ApplicationCreateRequest",
    "ApplicationStatus",
    "CalculatorRequest",
    "ClientCreateRequest",
    "PaymentStatus",
    "EmailSendRequest",
    "SmsSendRequest",
    # Platform
    "PlanTier",
    "TokenCheckRequest",
    "TokenType",
    "SYNCABLE_TABLES",
    "SyncChange",
    "SyncChangesRequest",
]
