"""
Frame decoding - turn a raw camera buffer into a cropped greyscale bitmap
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

import numpy as np

_logger = logging.getLogger(__name__)


class LuminanceSource(Protocol):
    """Anything that can render the cropped luminance of a frame."""

    def render_cropped_greyscale_bitmap(self) -> Optional[np.ndarray]:
        ...


class PlanarYUVLuminanceSource:
    """
    Luminance source for planar YUV camera frames (NV21 and similar).

    Only the Y plane is read: the first ``data_width * data_height`` bytes of the
    buffer. The chroma planes that follow, if any, are ignored.

    Usage:
        source = PlanarYUVLuminanceSource(data, 640, 480, left=80, top=60, width=480, height=360)
        bitmap = source.render_cropped_greyscale_bitmap()  # (360, 480) uint8
    """

    def __init__(
        self,
        yuv_data: bytes,
        data_width: int,
        data_height: int,
        left: int = 0,
        top: int = 0,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ):
        width = data_width if width is None else width
        height = data_height if height is None else height

        if data_width <= 0 or data_height <= 0:
            raise ValueError(f"Invalid frame size: {data_width}x{data_height}")
        if left < 0 or top < 0 or width <= 0 or height <= 0:
            raise ValueError(f"Invalid crop rectangle: ({left}, {top}, {width}, {height})")
        if left + width > data_width or top + height > data_height:
            raise ValueError("Crop rectangle must fit within the frame")
        if len(yuv_data) < data_width * data_height:
            raise ValueError(
                f"Buffer holds {len(yuv_data)} bytes, need {data_width * data_height} for the Y plane"
            )

        self.yuv_data = yuv_data
        self.data_width = data_width
        self.data_height = data_height
        self.left = left
        self.top = top
        self.width = width
        self.height = height

    def render_cropped_greyscale_bitmap(self) -> Optional[np.ndarray]:
        """Return the cropped Y plane as a (height, width) uint8 array."""
        plane = np.frombuffer(
            self.yuv_data, dtype=np.uint8, count=self.data_width * self.data_height
        ).reshape(self.data_height, self.data_width)
        crop = plane[self.top:self.top + self.height, self.left:self.left + self.width]
        # copy so the bitmap does not keep the caller's buffer alive
        return np.ascontiguousarray(crop).copy()


def decode_frame(
    build_source: Callable[[bytes, int, int], LuminanceSource],
    data: bytes,
    width: int,
    height: int,
) -> Optional[np.ndarray]:
    """
    Decode a raw frame into a greyscale bitmap.

    Args:
        build_source: Factory returning a LuminanceSource for (data, width, height)
        data: Raw pixel buffer
        width: Declared frame width
        height: Declared frame height

    Returns:
        Cropped greyscale bitmap, or None if the frame cannot be decoded
    """
    if not data or width <= 0 or height <= 0:
        _logger.debug("decode_frame: empty frame (%d bytes, %dx%d)", len(data or b""), width, height)
        return None

    try:
        source = build_source(data, width, height)
    except ValueError as e:
        _logger.debug("decode_frame: cannot build luminance source: %s", e)
        return None

    if source is None:
        return None

    bitmap = source.render_cropped_greyscale_bitmap()
    if bitmap is None or bitmap.size == 0:
        return None
    return bitmap
