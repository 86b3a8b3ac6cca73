# =============================================================================
# app/routers/barcode.py - Barcode Image Endpoint
# =============================================================================
# Renders label images on demand for the print dialog. Bad input (empty
# data, unknown type, size out of range) is rejected by BarcodeImageRequest
# and comes back as a 400 with validation details.
# =============================================================================

import logging

from fastapi import APIRouter
from fastapi.responses import Response

from app.exceptions import InvalidRequestError
from core.models.inventory import BarcodeImageRequest
from lib.barcodes import BarcodeRenderError, render_barcode_png

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_class=Response)
async def generate_barcode_image(request: BarcodeImageRequest):
    """
    Render a QR, Code 128 or EAN-13 PNG.

    Example body:
        {"data": "SHURE-004", "type": "code128", "width": 300, "height": 120}
    """
    try:
        png = render_barcode_png(request.data, request.type, request.width, request.height)
    except BarcodeRenderError as e:
        raise InvalidRequestError(e.message, code=e.code, suggestion=e.suggestion, details=e.details)

    return Response(
        content=png,
        media_type="image/png",
        headers={"Content-Disposition": f'inline; filename="barcode-{request.type}.png"'},
    )
