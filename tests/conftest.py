"""
Shared fakes for pipeline tests
"""
from typing import Optional

import numpy as np
import pytest

from capture_ocr.controller import CaptureController
from capture_ocr.ocr_engine import PageIteratorLevel, RecognitionEngine, ResultCursor
from capture_ocr.result import BoundingBox


class FakeCursor(ResultCursor):
    """Cursor over a fixed list of boxes; can fail after N boxes."""

    def __init__(self, boxes: list[BoundingBox], fail_after: Optional[int] = None):
        self.boxes = boxes
        self.fail_after = fail_after
        self.index = 0
        self.served = 0
        self.begin_calls = 0
        self.dispose_calls = 0

    def begin(self) -> None:
        self.begin_calls += 1
        self.index = 0

    def advance(self, level: PageIteratorLevel) -> bool:
        if self.index + 1 >= len(self.boxes):
            self.index = len(self.boxes)
            return False
        self.index += 1
        return True

    def bounding_box(self, level: PageIteratorLevel) -> Optional[BoundingBox]:
        if self.fail_after is not None and self.served >= self.fail_after:
            raise RuntimeError("engine crashed while iterating")
        if self.index >= len(self.boxes):
            return None
        self.served += 1
        return self.boxes[self.index]

    def dispose(self) -> None:
        self.dispose_calls += 1


class FakeEngine(RecognitionEngine):
    """In-memory engine that records every call."""

    def __init__(
        self,
        text: Optional[str] = "abc",
        confidences: Optional[list[int]] = None,
        words: Optional[list[BoundingBox]] = None,
        symbols: Optional[list[BoundingBox]] = None,
        fail_after_symbols: Optional[int] = None,
        fail_on_set_image: bool = False,
    ):
        self.text = text
        self.confidences = [90, 85, 70] if confidences is None else confidences
        self.words = words if words is not None else [
            BoundingBox(0, 0, 10, 10), BoundingBox(12, 0, 10, 10), BoundingBox(24, 0, 10, 10),
        ]
        self.symbols = symbols if symbols is not None else [
            BoundingBox(i * 4, 0, 3, 10) for i in range(5)
        ]
        self.fail_after_symbols = fail_after_symbols
        self.fail_on_set_image = fail_on_set_image
        self.calls: list[str] = []
        self.cursor: Optional[FakeCursor] = None
        self.image = None

    def set_image(self, bitmap):
        self.calls.append("set_image")
        if self.fail_on_set_image:
            raise RuntimeError("engine rejected image")
        self.image = bitmap

    def get_text(self):
        self.calls.append("get_text")
        return self.text

    def word_confidences(self):
        self.calls.append("word_confidences")
        return list(self.confidences)

    def mean_confidence(self):
        self.calls.append("mean_confidence")
        return int(sum(self.confidences) / len(self.confidences)) if self.confidences else 0

    def get_regions(self):
        self.calls.append("get_regions")
        return [BoundingBox(0, 0, 40, 12)]

    def get_textlines(self):
        self.calls.append("get_textlines")
        return [BoundingBox(0, 0, 36, 10)]

    def get_words(self):
        self.calls.append("get_words")
        return list(self.words)

    def get_strips(self):
        self.calls.append("get_strips")
        return [BoundingBox(0, 0, 36, 11)]

    def result_cursor(self):
        self.calls.append("result_cursor")
        self.cursor = FakeCursor(list(self.symbols), fail_after=self.fail_after_symbols)
        return self.cursor

    def clear_state(self):
        self.calls.append("clear_state")
        self.image = None


class FakeProgress:
    def __init__(self):
        self.dismiss_calls = 0

    def dismiss(self):
        self.dismiss_calls += 1


class RecordingController(CaptureController):
    """CaptureController that counts halt requests."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.stop_calls = 0

    def stop_handler(self):
        self.stop_calls += 1
        super().stop_handler()


def make_frame(width: int = 64, height: int = 32) -> bytes:
    """Light background with a dark bar, as a Y plane followed by NV21 chroma."""
    y_plane = np.full((height, width), 220, dtype=np.uint8)
    y_plane[height // 3: 2 * height // 3, width // 4: 3 * width // 4] = 30
    chroma = np.full(width * height // 2, 128, dtype=np.uint8)
    return y_plane.tobytes() + chroma.tobytes()


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def progress():
    return FakeProgress()


@pytest.fixture
def controller(progress):
    return RecordingController(progress_indicator=progress)


@pytest.fixture
def frame():
    return make_frame()
