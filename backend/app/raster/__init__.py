"""Raster input: pixel buffers and the image decoding boundary."""

from app.raster.buffer import PixelBuffer
from app.raster.decoder import decode_base64_image, decode_image

__all__ = ["PixelBuffer", "decode_image", "decode_base64_image"]
