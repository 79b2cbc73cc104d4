"""
Image Preprocessor - OpenCV enhancement applied before recognition

Pipeline:
    grayscale -> Gaussian blur -> blackhat (dark text on light background)
    -> [adaptive threshold, off by default] -> resize back to the input size
"""
from typing import Optional

import cv2
import numpy as np

from .config import PipelineConfig


class ImagePreprocessor:
    """
    Deterministic enhancement of a decoded frame.

    The input array is never modified and the output has the same width and
    height as the input, single channel uint8.

    Usage:
        preprocessor = ImagePreprocessor()
        enhanced = preprocessor.process(bitmap)
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()
        self._rect_kernel = cv2.getStructuringElement(
            cv2.MORPH_RECT, tuple(self.config.blackhat_kernel)
        )

    @staticmethod
    def to_grayscale(bitmap: np.ndarray) -> np.ndarray:
        """Convert RGB/RGBA input to one channel; 2-D input is copied as-is."""
        if bitmap.ndim == 2:
            return bitmap.copy()
        channels = bitmap.shape[2]
        if channels == 1:
            return bitmap[:, :, 0].copy()
        if channels == 4:
            return cv2.cvtColor(bitmap, cv2.COLOR_RGBA2GRAY)
        return cv2.cvtColor(bitmap, cv2.COLOR_RGB2GRAY)

    def process(self, bitmap: np.ndarray) -> np.ndarray:
        """
        Enhance a bitmap for text recognition.

        Args:
            bitmap: (H, W), (H, W, 3) RGB or (H, W, 4) RGBA uint8 array

        Returns:
            (H, W) uint8 array
        """
        height, width = bitmap.shape[:2]

        mat = self.to_grayscale(bitmap)
        if mat.dtype != np.uint8:
            mat = mat.astype(np.uint8)

        mat = cv2.GaussianBlur(mat, tuple(self.config.blur_kernel), 0)
        # Blackhat reveals regions darker than their surroundings (text strokes)
        mat = cv2.morphologyEx(mat, cv2.MORPH_BLACKHAT, self._rect_kernel)

        if self.config.adaptive_threshold:
            mat = cv2.adaptiveThreshold(
                mat, 255,
                cv2.ADAPTIVE_THRESH_GAUSSIAN_C, cv2.THRESH_BINARY,
                self.config.threshold_block_size, self.config.threshold_c,
            )

        # cv2.resize takes (width, height)
        return cv2.resize(mat, (width, height))
