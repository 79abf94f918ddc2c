"""Image decoder — facade over Pillow.

Converts encoded image bytes (PNG, JPEG, WebP, ...) → PixelBuffer.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import re

import numpy as np
from PIL import Image, UnidentifiedImageError

from app.errors import DecodeError
from app.raster.buffer import PixelBuffer

logger = logging.getLogger(__name__)

_DATA_URL_RE = re.compile(r"^data:[^;,]*(;[^,]*)?,", re.IGNORECASE)


def decode_image(data: bytes) -> PixelBuffer:
    """Decode encoded image bytes into an RGBA PixelBuffer."""
    if not data:
        raise DecodeError("Empty image payload")
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            rgba = img.convert("RGBA")
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise DecodeError(f"Could not decode image: {e}") from e

    arr = np.asarray(rgba, dtype=np.uint8)
    logger.debug("Decoded %dx%d image", arr.shape[1], arr.shape[0])
    return PixelBuffer(arr)


def decode_base64_image(payload: str) -> PixelBuffer:
    """Decode a base64 string or data URL into a PixelBuffer."""
    text = payload.strip()
    m = _DATA_URL_RE.match(text)
    if m:
        text = text[m.end():]
    try:
        raw = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64 image payload: {e}") from e
    return decode_image(raw)
