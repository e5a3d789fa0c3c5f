"""
Table QR Codes

Each table gets a QR code that opens the customer menu with the table
number as a query parameter:

    {app_base_url}/menu/{restaurant_id}?table={table_number}

The image is stored on the table row as a PNG data URL so the dashboard
can show and download it without another round trip.
"""

import base64
import io
from typing import Optional
from urllib.parse import quote

import qrcode

from servelink.core.config import get_settings

DATA_URL_PREFIX = "data:image/png;base64,"


def build_menu_url(restaurant_id: str, table_number: str, base_url: Optional[str] = None) -> str:
    """URL a customer lands on after scanning the table's code."""
    base = (base_url or get_settings().app_base_url).rstrip("/")
    return f"{base}/menu/{restaurant_id}?table={quote(table_number, safe='')}"


def encode_png(payload: str) -> bytes:
    """Render payload as a QR code PNG."""
    image = qrcode.make(payload)
    buffer = io.BytesIO()
    image.save(buffer)
    return buffer.getvalue()


def encode_data_url(payload: str) -> str:
    """Render payload as a QR code PNG data URL."""
    return DATA_URL_PREFIX + base64.b64encode(encode_png(payload)).decode("ascii")


def decode_data_url(data_url: str) -> bytes:
    """Raw PNG bytes of a data URL produced by encode_data_url."""
    if not data_url.startswith(DATA_URL_PREFIX):
        raise ValueError("Not a PNG data URL")
    return base64.b64decode(data_url[len(DATA_URL_PREFIX):])


def table_qr_code(restaurant_id: str, table_number: str) -> str:
    return encode_data_url(build_menu_url(restaurant_id, table_number))
