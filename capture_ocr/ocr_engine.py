"""
OCR Engine - recognition engine interface used by the single-shot pipeline

The pipeline never creates or owns an engine: callers inject one and stay
responsible for not issuing overlapping requests against it.
"""
from abc import ABC, abstractmethod
from contextlib import contextmanager
from enum import IntEnum
from typing import Iterator, Optional

import numpy as np

from .result import BoundingBox


class PageIteratorLevel(IntEnum):
    """Result granularity, coarsest to finest (Tesseract RIL values)"""
    BLOCK = 0
    PARA = 1
    TEXTLINE = 2
    WORD = 3
    SYMBOL = 4


class ResultCursor(ABC):
    """
    Stateful cursor over recognized elements.

    Must be started with begin() and released with dispose() exactly once.
    Prefer scoped_cursor() over calling these directly.
    """

    @abstractmethod
    def begin(self) -> None:
        """Move to the first element."""
        raise NotImplementedError

    @abstractmethod
    def advance(self, level: PageIteratorLevel) -> bool:
        """Move to the next element at level. Returns False when there is none."""
        raise NotImplementedError

    @abstractmethod
    def bounding_box(self, level: PageIteratorLevel) -> Optional[BoundingBox]:
        """Box of the current element, or None if the cursor has no element."""
        raise NotImplementedError

    @abstractmethod
    def dispose(self) -> None:
        raise NotImplementedError


class RecognitionEngine(ABC):
    """
    Capability set of a text-recognition engine.

    Usage:
        engine.set_image(bitmap)
        text = engine.get_text()
        with scoped_cursor(engine) as cursor:
            boxes = collect_boxes(cursor, PageIteratorLevel.SYMBOL)
        engine.clear_state()
    """

    @abstractmethod
    def set_image(self, bitmap: np.ndarray) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_text(self) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def word_confidences(self) -> list[int]:
        raise NotImplementedError

    @abstractmethod
    def mean_confidence(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def get_regions(self) -> list[BoundingBox]:
        raise NotImplementedError

    @abstractmethod
    def get_textlines(self) -> list[BoundingBox]:
        raise NotImplementedError

    @abstractmethod
    def get_words(self) -> list[BoundingBox]:
        raise NotImplementedError

    @abstractmethod
    def get_strips(self) -> list[BoundingBox]:
        raise NotImplementedError

    @abstractmethod
    def result_cursor(self) -> ResultCursor:
        raise NotImplementedError

    @abstractmethod
    def clear_state(self) -> None:
        """Forget the current image and any recognition results."""
        raise NotImplementedError


@contextmanager
def scoped_cursor(engine: RecognitionEngine) -> Iterator[ResultCursor]:
    """Obtain the engine's result cursor, begin it, and always dispose it on exit."""
    cursor = engine.result_cursor()
    try:
        cursor.begin()
        yield cursor
    finally:
        cursor.dispose()


def collect_boxes(cursor: ResultCursor, level: PageIteratorLevel) -> list[BoundingBox]:
    """
    Walk a begun cursor and return one box per element at level.

    An empty cursor (no current element) yields an empty list.
    """
    boxes: list[BoundingBox] = []
    while True:
        box = cursor.bounding_box(level)
        if box is None:
            break
        boxes.append(box)
        if not cursor.advance(level):
            break
    return boxes
