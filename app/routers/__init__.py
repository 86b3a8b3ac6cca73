# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# FastAPI routers organized by feature:
# - health.py, tasks.py: service health and Celery task status
# - scan.py, inventory.py, barcode.py, pullsheets.py: warehouse
# - jobs.py, amortization.py, crew.py, directory.py: jobs and crew app
# - mobile.py: lease-to-own sales app (x-api-key)
# - leads.py, chat.py, notifications.py: sales and outreach
# - tokens.py, revenue.py: organization features
# - sync.py: offline outbox replay
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import tasks
from . import scan
from . import inventory
from . import barcode
from . import pullsheets
from . import jobs
from . import amortization
from . import crew
from . import directory
from . import mobile
from . import leads
from . import chat
from . import notifications
from . import tokens
from . import revenue
from . import sync

__all__ = [
    "health",
    "tasks",
    "scan",
    "inventory",
    "barcode",
    "pullsheets",
    "jobs",
    "amortization",
    "crew",
    "directory",
    "mobile",
    "leads",
    "chat",
    "notifications",
    "tokens",
    "revenue",
    "sync",
]
