"""Tests for PixelBuffer and the Pillow-backed decoder."""

import base64
import io

import numpy as np
import pytest
from PIL import Image

from app.engine.context import Rectangle
from app.errors import DecodeError, InvalidBufferError
from app.raster import PixelBuffer, decode_base64_image, decode_image
from tests.conftest import BLUE, canvas, fill_rect


def _png_bytes(arr: np.ndarray) -> bytes:
    out = io.BytesIO()
    Image.fromarray(arr).save(out, format="PNG")
    return out.getvalue()


# ── PixelBuffer ──


def test_from_rgba_bytes():
    data = bytes([255, 0, 0, 255] * 6)
    buf = PixelBuffer.from_rgba_bytes(3, 2, data)
    assert (buf.width, buf.height) == (3, 2)
    assert buf.pixel(2, 1) == (255, 0, 0, 255)


def test_from_rgba_bytes_length_mismatch():
    with pytest.raises(InvalidBufferError):
        PixelBuffer.from_rgba_bytes(3, 2, bytes(10))


@pytest.mark.parametrize("width, height", [(0, 5), (5, 0), (-1, 5)])
def test_from_rgba_bytes_bad_dimensions(width, height):
    with pytest.raises(InvalidBufferError):
        PixelBuffer.from_rgba_bytes(width, height, b"")


@pytest.mark.parametrize(
    "arr",
    [
        np.zeros((4, 4), dtype=np.uint8),
        np.zeros((4, 4, 3), dtype=np.uint8),
        np.zeros((0, 4, 4), dtype=np.uint8),
        np.zeros((4, 4, 4), dtype=np.float32),
    ],
)
def test_invalid_arrays_rejected(arr):
    with pytest.raises(InvalidBufferError):
        PixelBuffer(arr)


def test_buffer_is_read_only_copy():
    arr = canvas(10, 10)
    buf = PixelBuffer(arr)
    arr[0, 0, :3] = 0
    assert buf.pixel(0, 0) == (255, 255, 255, 255)
    with pytest.raises(ValueError):
        buf.data[0, 0, 0] = 1


def test_from_array_rgb_gets_opaque_alpha():
    rgb = np.zeros((3, 4, 3), dtype=np.uint8)
    buf = PixelBuffer.from_array(rgb)
    assert buf.data.shape == (3, 4, 4)
    assert np.all(buf.alpha() == 255)


def test_crop_is_clipped():
    buf = PixelBuffer(fill_rect(canvas(50, 40), 10, 10, 20, 10, BLUE))
    inner = buf.crop(Rectangle(10, 10, 20, 10))
    assert (inner.width, inner.height) == (20, 10)
    assert np.all(inner.rgb() == BLUE)

    clipped = buf.crop(Rectangle(40, 30, 100, 100))
    assert (clipped.width, clipped.height) == (10, 10)


# ── Decoder ──


def test_decode_png_round_trip():
    arr = fill_rect(canvas(30, 20), 5, 5, 10, 8, BLUE)
    buf = decode_image(_png_bytes(arr))
    assert (buf.width, buf.height) == (30, 20)
    assert np.array_equal(buf.data, arr)


def test_decode_rgb_png_is_opaque():
    rgb = np.full((8, 8, 3), 200, dtype=np.uint8)
    buf = decode_image(_png_bytes(rgb))
    assert buf.pixel(3, 3) == (200, 200, 200, 255)


def test_decode_garbage():
    with pytest.raises(DecodeError):
        decode_image(b"definitely not an image")


def test_decode_empty():
    with pytest.raises(DecodeError):
        decode_image(b"")


def test_decode_base64_and_data_url():
    png = _png_bytes(canvas(4, 4))
    encoded = base64.b64encode(png).decode("ascii")
    assert decode_base64_image(encoded).width == 4
    assert decode_base64_image(f"data:image/png;base64,{encoded}").height == 4


def test_decode_bad_base64():
    with pytest.raises(DecodeError):
        decode_base64_image("not base64 at all!")


def test_buffers_compare_by_value():
    assert PixelBuffer(canvas(10, 10)) == PixelBuffer(canvas(10, 10))
    assert hash(PixelBuffer(canvas(10, 10))) == hash(PixelBuffer(canvas(10, 10)))
    assert PixelBuffer(canvas(10, 10)) != PixelBuffer(canvas(10, 10, BLUE))
    assert PixelBuffer(canvas(10, 10)) != PixelBuffer(canvas(10, 5))
