# =============================================================================
# app/routers/scan.py - Warehouse Scanning Endpoints
# =============================================================================
# Called by the handheld scanners. Check-out/check-in rules live in the
# scan_direction stored procedure; these handlers validate and forward.
# =============================================================================

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from core.models.scan import RigScanRequest, ScanDirectionRequest
from core.services.scan_service import ScanService

router = APIRouter()


@router.post("/scan-direction")
async def scan_direction(request: ScanDirectionRequest):
    """
    Check an item OUT to a job or back IN.

    Example body:
        {"jobCode": "JOB-1042", "code": "SPK-003", "direction": "OUT", "scannedBy": "Dana"}
    """
    return ScanService.scan_direction(request)


@router.get("/scan-direction", include_in_schema=False)
async def scan_direction_get():
    return JSONResponse(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        content={"detail": "Method Not Allowed"},
    )


@router.post("/inventory/rig-scan")
async def rig_scan(request: RigScanRequest):
    """
    Move every item in a rig container at once.

    Updates location and status for all member items and records one
    scan event per item.
    """
    return ScanService.rig_scan(request)
