"""
Recognition result record, filled in by the background stage and handed to the consumer
"""
import time
from dataclasses import dataclass, field
from typing import Optional

import numpy as np


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in image pixels"""
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height


@dataclass
class RecognitionResult:
    """
    Output of one recognition request.

    Created once when the background stage starts and filled in field by field.
    ``text`` is only set when recognition succeeded; a result without text is a failure
    even if some box collections were populated before the failure.
    """
    text: Optional[str] = None
    word_confidences: list[int] = field(default_factory=list)
    mean_confidence: int = 0
    region_boxes: list[BoundingBox] = field(default_factory=list)
    line_boxes: list[BoundingBox] = field(default_factory=list)
    word_boxes: list[BoundingBox] = field(default_factory=list)
    strip_boxes: list[BoundingBox] = field(default_factory=list)
    character_boxes: list[BoundingBox] = field(default_factory=list)
    image: Optional[np.ndarray] = field(default=None, repr=False)
    recognition_time_ms: int = 0
    timestamp: float = field(default_factory=time.time)

    @property
    def success(self) -> bool:
        return self.text is not None

    def __str__(self) -> str:
        return f"{self.text} {self.mean_confidence} {self.recognition_time_ms}ms"
