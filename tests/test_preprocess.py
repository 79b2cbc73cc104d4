"""
Tests for frame decoding and image preprocessing
"""
import numpy as np
import pytest

from capture_ocr.config import PipelineConfig
from capture_ocr.luminance import PlanarYUVLuminanceSource, decode_frame
from capture_ocr.preprocess import ImagePreprocessor


class TestPlanarYUVLuminanceSource:
    """Tests for PlanarYUVLuminanceSource"""

    def test_render_full_frame(self):
        """Test the Y plane is returned when no crop is given"""
        data = bytes(range(12)) + b"\x80" * 6
        source = PlanarYUVLuminanceSource(data, 4, 3)

        bitmap = source.render_cropped_greyscale_bitmap()

        assert bitmap.shape == (3, 4)
        assert bitmap.dtype == np.uint8
        assert bitmap[2, 3] == 11

    def test_render_cropped(self):
        """Test crop rectangle selects the right pixels"""
        data = bytes(range(12))
        source = PlanarYUVLuminanceSource(data, 4, 3, left=1, top=1, width=2, height=2)

        bitmap = source.render_cropped_greyscale_bitmap()

        assert bitmap.tolist() == [[5, 6], [9, 10]]

    def test_crop_outside_frame_rejected(self):
        """Test crop that does not fit raises ValueError"""
        with pytest.raises(ValueError):
            PlanarYUVLuminanceSource(bytes(12), 4, 3, left=3, top=0, width=2, height=2)

    def test_short_buffer_rejected(self):
        """Test buffer smaller than the Y plane raises ValueError"""
        with pytest.raises(ValueError):
            PlanarYUVLuminanceSource(bytes(5), 4, 3)


class TestDecodeFrame:
    """Tests for decode_frame"""

    def test_decode_valid_frame(self):
        bitmap = decode_frame(PlanarYUVLuminanceSource, bytes(range(12)), 4, 3)
        assert bitmap is not None
        assert bitmap.shape == (3, 4)

    def test_decode_empty_buffer(self):
        """Test empty buffer is a decode failure, not an exception"""
        assert decode_frame(PlanarYUVLuminanceSource, b"", 4, 3) is None

    def test_decode_malformed_buffer(self):
        """Test malformed buffer is a decode failure"""
        assert decode_frame(PlanarYUVLuminanceSource, bytes(3), 4, 3) is None

    def test_decode_source_renders_nothing(self):
        class NullSource:
            def render_cropped_greyscale_bitmap(self):
                return None

        assert decode_frame(lambda d, w, h: NullSource(), bytes(12), 4, 3) is None


class TestImagePreprocessor:
    """Tests for ImagePreprocessor"""

    @staticmethod
    def _text_like_image(width=80, height=40):
        img = np.full((height, width), 230, dtype=np.uint8)
        # thin dark strokes, like characters on paper
        img[10:30, 10:12] = 20
        img[10:30, 20:22] = 20
        img[19:21, 30:60] = 20
        return img

    def test_output_dimensions_preserved(self):
        """Test output has the same width and height as the input"""
        img = self._text_like_image(width=97, height=41)
        out = ImagePreprocessor().process(img)

        assert out.shape == (41, 97)
        assert out.dtype == np.uint8

    def test_rgb_and_rgba_inputs(self):
        """Test colour inputs are reduced to one channel"""
        gray = self._text_like_image()
        rgb = np.stack([gray] * 3, axis=2)
        rgba = np.dstack([rgb, np.full(gray.shape, 255, dtype=np.uint8)])

        pre = ImagePreprocessor()
        assert pre.process(rgb).shape == gray.shape
        assert pre.process(rgba).shape == gray.shape
        assert np.array_equal(pre.process(rgb), pre.process(gray))

    def test_deterministic_and_input_untouched(self):
        img = self._text_like_image()
        original = img.copy()
        pre = ImagePreprocessor()

        first = pre.process(img)
        second = pre.process(img)

        assert np.array_equal(first, second)
        assert np.array_equal(img, original)

    def test_blackhat_highlights_dark_strokes(self):
        """Test dark strokes become bright and flat background goes dark"""
        img = self._text_like_image()
        out = ImagePreprocessor().process(img)

        assert out[20, 11] > 100   # stroke
        assert out[35, 75] < 10    # background

    def test_adaptive_threshold_disabled_by_default(self):
        assert PipelineConfig().adaptive_threshold is False

    def test_adaptive_threshold_binarizes(self):
        """Test enabling the threshold yields a binary image"""
        img = self._text_like_image()
        out = ImagePreprocessor(PipelineConfig(adaptive_threshold=True)).process(img)

        assert set(np.unique(out).tolist()) <= {0, 255}
        assert out.shape == img.shape
