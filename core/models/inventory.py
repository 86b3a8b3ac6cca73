# =============================================================================
# core/models/inventory.py - Inventory and Barcode Schemas
# =============================================================================

from typing import Literal

from pydantic import BaseModel, Field


class InventoryScanRequest(BaseModel):
    """
    Body of POST /api/v1/inventory (mobile barcode lookup).

    Example:
        {"barcode": "SHURE-007", "warehouse_id": "7d1c..."}
    """
    barcode: str | None = Field(default=None, description="Scanned barcode")
    warehouse_id: str | None = Field(default=None, description="Restrict the lookup to one warehouse")


class BarcodeSuggestRequest(BaseModel):
    """Body of POST /api/v1/inventory/barcode."""
    item_name: str = Field(..., min_length=1, description="Name used to derive the prefix")


class BarcodeImageRequest(BaseModel):
    """
    Body of POST /api/barcode.

    Example:
        {"data": "SHURE-007", "type": "code128", "width": 300, "height": 120}
    """

    # Payload to encode
    data: str = Field(..., min_length=1)

    # Symbology
    type: Literal["qr", "code128", "ean13"] = Field(default="qr")

    # Pixel dimensions; QR codes are square and only use width
    width: int = Field(default=200, ge=50, le=800)
    height: int = Field(default=200, ge=50, le=800)
