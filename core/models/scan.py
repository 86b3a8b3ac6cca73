# =============================================================================
# core/models/scan.py - Scan Schemas
# =============================================================================
# Request bodies for warehouse scanning:
# - ScanDirectionRequest: check one serial/barcode OUT to or IN from a job
# - RigScanRequest: move every item in a rig container at once
#
# Required fields are declared optional here and checked by the service so
# clients get the exact error messages the handheld scanners expect.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ScanDirection(str, Enum):
    """
    Which way an item is moving relative to a job.

    - OUT: leaving the warehouse for the job
    - IN: returning from the job
    """
    OUT = "OUT"
    IN = "IN"


class ScanDirectionRequest(BaseModel):
    """
    Body of POST /api/scan-direction.

    Example:
        {
            "jobCode": "JOB-2025-014",
            "code": "SHURE-007",
            "direction": "OUT",
            "scannedBy": "Dana",
            "location": "Dock B"
        }
    """

    model_config = ConfigDict(populate_by_name=True)

    # Job the scan is recorded against
    job_code: str | None = Field(default=None, alias="jobCode")

    # Serial number or barcode printed on the item
    code: str | None = Field(default=None)

    # OUT / IN, case-insensitive
    direction: str | None = Field(default=None)

    scanned_by: str | None = Field(default=None, alias="scannedBy")
    location: str | None = Field(default=None)


class RigScanRequest(BaseModel):
    """Body of POST /api/inventory/rig-scan."""

    # Rig container barcode, always "RIG-..."
    barcode: str | None = Field(default=None, description="Rig container barcode")

    # New location and status applied to every item in the rig
    location: str | None = Field(default=None)
    status: str | None = Field(default=None)

    job_id: str | None = Field(default=None, description="Job the rig is moving for")
