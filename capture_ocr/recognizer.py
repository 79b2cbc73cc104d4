"""
Recognition Invoker - drive the engine and copy its output into a RecognitionResult
"""
import logging
import re
from typing import Optional

import numpy as np

from .config import PipelineConfig
from .ocr_engine import PageIteratorLevel, RecognitionEngine, collect_boxes, scoped_cursor
from .result import RecognitionResult

_logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s")


def normalize_text(text: str, config: Optional[PipelineConfig] = None) -> str:
    """Apply the configured text cleanup (whitespace stripping, upper case)."""
    config = config or PipelineConfig()
    if config.strip_whitespace:
        text = _WHITESPACE.sub("", text.strip())
    if config.uppercase:
        text = text.upper()
    return text


def _halt_after_fault(controller) -> None:
    """Best-effort recovery after an engine fault."""
    try:
        controller.stop_handler()
    except AttributeError:
        # controller already gone
        pass
    except Exception:
        _logger.warning("recognize: failed to halt continuous mode", exc_info=True)


def recognize(
    engine: RecognitionEngine,
    bitmap: np.ndarray,
    result: RecognitionResult,
    controller=None,
    config: Optional[PipelineConfig] = None,
) -> bool:
    """
    Run recognition on an enhanced bitmap.

    Args:
        engine: Injected recognition engine
        bitmap: Enhanced greyscale image
        result: Record to fill in
        controller: Owner to notify (stop_handler) if the engine faults
        config: Text cleanup options

    Returns:
        True if text was recognized. False if no text was found or the engine
        faulted; in both cases result.text stays unset.
    """
    try:
        engine.set_image(bitmap)
        text = engine.get_text()

        if not text:
            return False

        result.word_confidences = list(engine.word_confidences())
        result.mean_confidence = int(engine.mean_confidence())
        result.region_boxes = list(engine.get_regions())
        result.line_boxes = list(engine.get_textlines())
        result.word_boxes = list(engine.get_words())
        result.strip_boxes = list(engine.get_strips())

        with scoped_cursor(engine) as cursor:
            character_boxes = collect_boxes(cursor, PageIteratorLevel.SYMBOL)
        result.character_boxes = character_boxes

    except Exception:
        _logger.exception(
            "Caught error in request to recognition engine. Stopping continuous mode."
        )
        # engine state is reset by the task's terminal cleanup
        _halt_after_fault(controller)
        return False

    result.image = bitmap
    result.text = normalize_text(text, config)
    return True
