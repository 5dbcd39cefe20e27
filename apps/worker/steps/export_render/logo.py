"""
Logo loading for the spreadsheet header band.

A logo can come as raw bytes, a filesystem path, or an http(s) URL.
Any failure is reported as a Warning; the export goes on without it.
"""
from __future__ import annotations

import io
import logging
import os
import struct
from pathlib import Path
from typing import Optional

import requests
from PIL import Image, UnidentifiedImageError

from packages.shared.models import Warning

logger = logging.getLogger(__name__)

LOGO_FETCH_TIMEOUT_SECONDS = float(os.getenv("LOGO_FETCH_TIMEOUT_SECONDS", "10"))

# What Pillow raises for corrupt or truncated image data.
IMAGE_DECODE_ERRORS = (
    OSError,
    SyntaxError,
    ValueError,
    struct.error,
    UnidentifiedImageError,
    Image.DecompressionBombError,
)


def _read_source(source: bytes | str | Path) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    text = str(source).strip()
    if text.lower().startswith(("http://", "https://")):
        resp = requests.get(text, timeout=LOGO_FETCH_TIMEOUT_SECONDS)
        resp.raise_for_status()
        return resp.content
    return Path(text).read_bytes()


def image_size(data: bytes) -> tuple[int, int]:
    with Image.open(io.BytesIO(data)) as img:
        return img.size


def load_logo(source: bytes | str | Path | None) -> tuple[Optional[bytes], Optional[Warning]]:
    """Return (image bytes, None) on success or (None, Warning) on any failure."""
    if source is None or (isinstance(source, (str, bytes)) and not source):
        return None, None
    try:
        data = _read_source(source)
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
    except (requests.RequestException, *IMAGE_DECODE_ERRORS) as exc:
        logger.warning(f"Logo could not be loaded, exporting without it: {exc}")
        return None, Warning(code="LOGO_UNAVAILABLE", message=f"Logo could not be loaded: {exc}", field="logo")
    return data, None
