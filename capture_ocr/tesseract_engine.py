"""
Tesseract adapter - RecognitionEngine backed by pytesseract
"""
import logging
import os
from typing import Optional

import numpy as np
import pytesseract
from pytesseract import Output  # type: ignore

from .ocr_engine import PageIteratorLevel, RecognitionEngine, ResultCursor
from .result import BoundingBox

_logger = logging.getLogger(__name__)

# Allow override on Windows (desktop dev)
if os.name == "nt":
    tpath = os.getenv("TESSERACT_PATH")
    if tpath and os.path.exists(tpath):
        pytesseract.pytesseract.tesseract_cmd = tpath

# image_to_data "level" column
_LEVEL_BLOCK = 2
_LEVEL_PARA = 3
_LEVEL_LINE = 4
_LEVEL_WORD = 5


def _safe_int(x, default: int = -1) -> int:
    try:
        return int(float(x))
    except (TypeError, ValueError):
        return default


class TesseractSymbolCursor(ResultCursor):
    """Cursor over the symbol boxes reported by image_to_boxes."""

    def __init__(self, boxes: list[BoundingBox]):
        self._boxes = boxes
        self._index = 0
        self._disposed = False

    def begin(self) -> None:
        self._index = 0

    def advance(self, level: PageIteratorLevel) -> bool:
        if self._disposed or level != PageIteratorLevel.SYMBOL:
            return False
        if self._index + 1 >= len(self._boxes):
            self._index = len(self._boxes)
            return False
        self._index += 1
        return True

    def bounding_box(self, level: PageIteratorLevel) -> Optional[BoundingBox]:
        if self._disposed or self._index >= len(self._boxes):
            return None
        return self._boxes[self._index]

    def dispose(self) -> None:
        self._disposed = True
        self._boxes = []


class TesseractEngine(RecognitionEngine):
    """
    Tesseract recognition through pytesseract.

    image_to_data is run once per image and cached. It supplies the text, and its
    levels map to region (block), strip (paragraph), line and word boxes.

    Usage:
        engine = TesseractEngine(lang="eng")
        engine.set_image(gray)
        text = engine.get_text()
    """

    def __init__(self, lang: str = "eng", psm: int = 6, oem: int = 1, extra_config: str = ""):
        self.lang = lang
        self.psm = psm
        self.oem = oem
        self.extra_config = extra_config
        self._image: Optional[np.ndarray] = None
        self._data: Optional[dict] = None

    def _config(self) -> str:
        parts = [f"--oem {self.oem}", f"--psm {self.psm}"]
        if self.extra_config:
            parts.append(self.extra_config)
        return " ".join(parts)

    def _require_image(self) -> np.ndarray:
        if self._image is None:
            raise RuntimeError("No image set on TesseractEngine")
        return self._image

    def _get_data(self) -> dict:
        if self._data is None:
            self._data = pytesseract.image_to_data(
                self._require_image(), lang=self.lang, config=self._config(),
                output_type=Output.DICT,
            )
        return self._data

    def _boxes_at(self, level: int) -> list[BoundingBox]:
        data = self._get_data()
        boxes = []
        for i, lvl in enumerate(data.get("level", [])):
            if _safe_int(lvl) != level:
                continue
            boxes.append(BoundingBox(
                int(data["left"][i]), int(data["top"][i]),
                int(data["width"][i]), int(data["height"][i]),
            ))
        return boxes

    def _word_indices(self) -> list[int]:
        """Indices of real words; confidences and word boxes both use this list."""
        data = self._get_data()
        indices = []
        for i, lvl in enumerate(data.get("level", [])):
            if _safe_int(lvl) != _LEVEL_WORD:
                continue
            if not str(data["text"][i] or "").strip():
                continue
            if _safe_int(data["conf"][i]) < 0:
                continue
            indices.append(i)
        return indices

    def set_image(self, bitmap: np.ndarray) -> None:
        self._image = np.ascontiguousarray(bitmap, dtype=np.uint8)
        self._data = None

    def get_text(self) -> Optional[str]:
        """
        Text of the recognized words, rebuilt from the cached image_to_data pass.

        Words on a line are joined by spaces, lines by newlines and paragraphs
        by a blank line. A page without words gives "".
        """
        data = self._get_data()
        words = set(self._word_indices())
        lines: list[tuple[int, list[str]]] = []
        para = 0
        for i, lvl in enumerate(data.get("level", [])):
            level = _safe_int(lvl)
            if level == _LEVEL_PARA:
                para += 1
            elif level == _LEVEL_LINE:
                lines.append((para, []))
            elif i in words:
                if not lines:
                    lines.append((para, []))
                lines[-1][1].append(str(data["text"][i]).strip())

        chunks = []
        prev_para = None
        for line_para, line_words in lines:
            if not line_words:
                continue
            if prev_para is not None:
                chunks.append("\n\n" if line_para != prev_para else "\n")
            chunks.append(" ".join(line_words))
            prev_para = line_para

        text = "".join(chunks)
        # blank pages come back as whitespace or a bare form feed
        return text if text.strip() else ""

    def word_confidences(self) -> list[int]:
        data = self._get_data()
        return [_safe_int(data["conf"][i]) for i in self._word_indices()]

    def mean_confidence(self) -> int:
        confs = self.word_confidences()
        if not confs:
            return 0
        return int(round(sum(confs) / len(confs)))

    def get_regions(self) -> list[BoundingBox]:
        return self._boxes_at(_LEVEL_BLOCK)

    def get_textlines(self) -> list[BoundingBox]:
        return self._boxes_at(_LEVEL_LINE)

    def get_words(self) -> list[BoundingBox]:
        data = self._get_data()
        return [
            BoundingBox(
                int(data["left"][i]), int(data["top"][i]),
                int(data["width"][i]), int(data["height"][i]),
            )
            for i in self._word_indices()
        ]

    def get_strips(self) -> list[BoundingBox]:
        # pytesseract exposes no strip level; paragraphs are the nearest band
        return self._boxes_at(_LEVEL_PARA)

    def result_cursor(self) -> ResultCursor:
        image = self._require_image()
        image_height = image.shape[0]
        data = pytesseract.image_to_boxes(
            image, lang=self.lang, config=self._config(), output_type=Output.DICT
        )
        boxes = []
        for i in range(len(data.get("char", []))):
            left, bottom = int(data["left"][i]), int(data["bottom"][i])
            right, top = int(data["right"][i]), int(data["top"][i])
            # image_to_boxes uses a bottom-left origin
            boxes.append(BoundingBox(left, image_height - top, right - left, top - bottom))
        _logger.debug("TesseractEngine: %d symbol boxes", len(boxes))
        return TesseractSymbolCursor(boxes)

    def clear_state(self) -> None:
        self._image = None
        self._data = None

    def __repr__(self):
        return f"TesseractEngine(lang={self.lang!r}, psm={self.psm}, oem={self.oem})"
