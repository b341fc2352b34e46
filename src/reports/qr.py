"""QR code rendering for the HTML report."""

from __future__ import annotations

import base64
from io import BytesIO

import qrcode
from qrcode.constants import ERROR_CORRECT_Q

from extractors.exceptions import ReportError

DATA_URI_PREFIX = "data:image/png;base64,"


def qr_png(text: str, box_size: int = 4, border: int = 4) -> bytes:
    """
    Encode ``text`` as a PNG QR code.

    Uses error-correction level Q (about 25% of codewords recoverable).

    Raises:
        ReportError: If the text cannot be encoded
    """
    try:
        qr = qrcode.QRCode(
            error_correction=ERROR_CORRECT_Q,
            box_size=box_size,
            border=border,
        )
        qr.add_data(text)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")
    except Exception as exc:
        raise ReportError(f"Could not QR-encode URL: {exc}") from exc

    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def qr_data_uri(text: str) -> str:
    """Return ``text`` as a base64 PNG data URI suitable for ``<img src>``."""
    return DATA_URI_PREFIX + base64.b64encode(qr_png(text)).decode("ascii")
