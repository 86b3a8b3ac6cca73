# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# Entry point for the Bright Ops API. Configures middleware, routers, and
# exception handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.auth import routes as auth_routes
from app.config import settings
from app.dependencies import MOBILE_API_KEY_GUARD
from app.exceptions import (
    BrightOpsException,
    brightops_exception_handler,
    validation_exception_handler,
)
from app.routers import (
    amortization,
    barcode,
    chat,
    crew,
    directory,
    health,
    inventory,
    jobs,
    leads,
    mobile,
    notifications,
    pullsheets,
    revenue,
    scan,
    sync,
    tasks,
    tokens,
)

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log configuration on startup and shutdown."""
    logger.info(f"Starting Bright Ops API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    if not settings.MOBILE_API_KEY:
        logger.warning("MOBILE_API_KEY is not set; /api/mobile endpoints will reject all requests")
    if not settings.OPENAI_API_KEY:
        logger.info("OPENAI_API_KEY is not set; chat autopilot needs a per-user key")

    yield

    logger.info("Shutting down Bright Ops API")


app = FastAPI(
    title="Bright Ops API",
    description="""
## Rental Operations API for Bright Audio

Backend for the operations dashboard, the warehouse crew app and the
lease-to-own sales app.

### Surfaces

| Client | Auth | Prefix |
|--------|------|--------|
| Dashboard | Supabase JWT | `/api/...` |
| Crew app | Supabase Bearer token | `/api/v1/...` |
| Sales app | `x-api-key` header | `/api/mobile/...` |
| Offline outbox | Supabase Bearer token | `/api/sync/changes` |

### Key Features

- **Scanning**: check gear out/in against jobs, move whole rigs
- **Jobs**: booking with per-gear amortization
- **Pull sheets**: pick lists with a printable view
- **Leads & chat**: scoring, CSV import, website chat autopilot
- **Lease-to-own**: payment quotes, applications, collections
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Sign-in context and session refresh"},
        {"name": "Scanning", "description": "Barcode check-out/check-in and rig moves"},
        {"name": "Jobs", "description": "Job booking, amortization and listings"},
        {"name": "Inventory", "description": "Inventory lookup and barcode assignment"},
        {"name": "Barcodes", "description": "Barcode and QR label images"},
        {"name": "Pull Sheets", "description": "Pick lists and printable views"},
        {"name": "Crew", "description": "Availability and job assignments"},
        {"name": "Directory", "description": "Clients and warehouses"},
        {"name": "Mobile", "description": "Lease-to-own sales app (x-api-key)"},
        {"name": "Leads", "description": "Lead scoring and CSV import"},
        {"name": "Chat", "description": "Website chat and autopilot"},
        {"name": "Notifications", "description": "SendGrid email and Twilio SMS"},
        {"name": "Tokens", "description": "AI token balances"},
        {"name": "Revenue", "description": "Quarterly revenue summaries"},
        {"name": "Sync", "description": "Offline outbox replay"},
        {"name": "Tasks", "description": "Track background task progress"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(BrightOpsException)
async def handle_brightops_exception(request: Request, exc: BrightOpsException):
    """Handle domain exceptions raised by services."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code} {exc.message}")
    return await brightops_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints
app.include_router(auth_routes.router, prefix="/api/v1", tags=["Auth"])

# Health check endpoints
app.include_router(health.router, prefix="/api/v1", tags=["Health"])

# Task status endpoints
app.include_router(tasks.router, prefix="/api/v1/tasks", tags=["Tasks"])

# Warehouse
app.include_router(scan.router, prefix="/api", tags=["Scanning"])
app.include_router(inventory.router, prefix="/api/v1/inventory", tags=["Inventory"])
app.include_router(barcode.router, prefix="/api/barcode", tags=["Barcodes"])
app.include_router(pullsheets.router, prefix="/api/pullsheet", tags=["Pull Sheets"])
app.include_router(pullsheets.v1_router, prefix="/api/v1/pullsheets", tags=["Pull Sheets"])

# Jobs and crew
app.include_router(jobs.router, prefix="/api/jobs", tags=["Jobs"])
app.include_router(jobs.v1_router, prefix="/api/v1", tags=["Jobs"])
app.include_router(amortization.router, prefix="/api/amortization", tags=["Jobs"])
app.include_router(crew.router, prefix="/api/v1", tags=["Crew"])
app.include_router(directory.router, prefix="/api/v1", tags=["Directory"])

# Sales app (shared API key)
app.include_router(
    mobile.router,
    prefix="/api/mobile",
    tags=["Mobile"],
    dependencies=MOBILE_API_KEY_GUARD,
)

# Leads, chat and outbound messages
app.include_router(leads.router, prefix="/api/leads", tags=["Leads"])
app.include_router(chat.router, prefix="/api/chat", tags=["Chat"])
app.include_router(notifications.router, prefix="/api", tags=["Notifications"])

# Organization features
app.include_router(tokens.router, prefix="/api/v1/tokens", tags=["Tokens"])
app.include_router(revenue.router, prefix="/api/v1/revenue", tags=["Revenue"])

# Offline sync
app.include_router(sync.router, prefix="/api/sync", tags=["Sync"])


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """API info."""
    return {
        "name": "Bright Ops API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
