# =============================================================================
# lib/barcodes.py - Barcode Naming and Image Rendering
# =============================================================================
# Two concerns live here:
# - Naming: inventory barcodes look like "PREFIX-001" where PREFIX comes
#   from the item name and the serial counts up per prefix.
# - Rendering: PNG images for QR, Code 128 and EAN-13 labels.
#
# Rendering uses qrcode for QR and python-barcode (Pillow ImageWriter)
# for linear symbologies.
# =============================================================================

import io
import logging
import re
from typing import Iterable, Literal

import barcode
import qrcode
from barcode.writer import ImageWriter
from qrcode.constants import ERROR_CORRECT_M

from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

BarcodeType = Literal["qr", "code128", "ean13"]

PREFIX_MAX_LENGTH = 6
DEFAULT_PREFIX = "ITEM"
SERIAL_WIDTH = 3

# Generic gear nouns that make poor prefixes ("Shure Mic" -> "SHURE")
_GENERIC_WORDS = re.compile(
    r"\b(Mixer|Microphone|Mic|Speaker|Cable|Light|LED|PAR)\b",
    re.IGNORECASE,
)
_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


class BarcodeRenderError(ApplicationError):
    """Raised when a barcode image cannot be produced for the given data."""

    def __init__(self, message: str, barcode_type: str):
        super().__init__(
            message=message,
            code="BARCODE_RENDER_FAILED",
            suggestion="EAN-13 requires 12 or 13 digits; Code 128 accepts ASCII text",
            details={"type": barcode_type},
        )


# =============================================================================
# Naming
# =============================================================================

def generate_prefix(item_name: str) -> str:
    """
    Derive a barcode prefix from an item name.

    Generic gear words are dropped first, then the first remaining word is
    upper-cased, stripped to alphanumerics and cut to 6 characters.

    Example:
        generate_prefix("Shure SM58 Microphone")  # "SHURE"
        generate_prefix("LED PAR")  # "LED" (nothing left, uses original)
    """
    if not item_name:
        return DEFAULT_PREFIX

    cleaned = _GENERIC_WORDS.sub("", item_name).strip()
    words = cleaned.split() or item_name.split()
    if not words:
        return DEFAULT_PREFIX

    prefix = _NON_ALNUM.sub("", words[0]).upper()[:PREFIX_MAX_LENGTH]
    return prefix or DEFAULT_PREFIX


def format_barcode(prefix: str, serial: int | str) -> str:
    """Join prefix and zero-padded serial: ("SHURE", 7) -> "SHURE-007"."""
    return f"{prefix}-{str(int(serial)).zfill(SERIAL_WIDTH)}"


def get_barcode_prefix(code: str) -> str:
    """Everything before the last dash, or the whole code when there is none."""
    if "-" not in code:
        return code
    return code.rsplit("-", 1)[0]


def get_barcode_serial(code: str) -> str:
    """Everything after the last dash, or "" when there is none."""
    if "-" not in code:
        return ""
    return code.rsplit("-", 1)[1]


def is_same_item_type(first: str, second: str) -> bool:
    """Two barcodes belong to the same item type when their prefixes match."""
    return get_barcode_prefix(first) == get_barcode_prefix(second)


def next_serial_from_barcodes(barcodes: Iterable[str | None]) -> str:
    """
    Next free serial given the existing barcodes for one prefix.

    Unparseable serials are ignored. Returns "001" when nothing usable exists.
    """
    highest = 0
    for code in barcodes:
        if not code:
            continue
        try:
            highest = max(highest, int(get_barcode_serial(code)))
        except ValueError:
            continue
    return str(highest + 1).zfill(SERIAL_WIDTH)


# =============================================================================
# Rendering
# =============================================================================

def render_qr_png(data: str, width: int = 200) -> bytes:
    """Render a square QR code PNG, error correction M with a 1-module margin."""
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, border=1)
    qr.add_data(data)
    qr.make(fit=True)

    image = qr.make_image(fill_color="black", back_color="white").get_image()
    image = image.resize((width, width))

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def render_linear_png(data: str, barcode_type: str, width: int = 200, height: int = 200) -> bytes:
    """
    Render a Code 128 or EAN-13 barcode PNG with human-readable text.

    Module width scales with the requested width (1 px per 100 px, minimum 1).
    """
    scale = max(1, width // 100)

    try:
        barcode_class = barcode.get_barcode_class(barcode_type)
        symbol = barcode_class(data, writer=ImageWriter())
        image = symbol.render({
            "module_width": 0.2 * scale,
            "module_height": max(5.0, height / 20),
            "quiet_zone": 2.0,
            "write_text": True,
            "font_size": 8,
            "text_distance": 3.0,
        })
    except Exception as e:
        logger.warning(f"Failed to render {barcode_type} for {data!r}: {e}")
        raise BarcodeRenderError(f"Could not render {barcode_type}: {e}", barcode_type)

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def render_barcode_png(
    data: str,
    barcode_type: BarcodeType = "qr",
    width: int = 200,
    height: int = 200,
) -> bytes:
    """Dispatch to the QR or linear renderer."""
    if barcode_type == "qr":
        return render_qr_png(data, width=width)
    return render_linear_png(data, barcode_type, width=width, height=height)
