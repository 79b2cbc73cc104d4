"""
RecognizeTask - one-shot recognition of a single camera frame

Runs decode -> preprocess -> recognize on a background thread, then posts the
outcome to the controller's execution context where the tagged message is
delivered and the engine state is cleared.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Optional

from .config import PipelineConfig
from .luminance import decode_frame
from .messages import Message, MessageKind
from .ocr_engine import RecognitionEngine
from .preprocess import ImagePreprocessor
from .recognizer import recognize
from .result import RecognitionResult

_logger = logging.getLogger(__name__)


class RecognizeTask:
    """
    Single-shot recognition request.

    Not re-entrant: create one task per frame and never run two tasks against
    the same engine at once.

    Usage:
        task = RecognizeTask(controller, engine, data, width, height)
        task.execute()               # background thread
        controller.run_pending(30)   # consumer thread runs on_post_execute
    """

    def __init__(
        self,
        controller,
        engine: Optional[RecognitionEngine],
        data: bytes,
        width: int,
        height: int,
        config: Optional[PipelineConfig] = None,
    ):
        self.controller = controller
        self.engine = engine
        self.data = data
        self.width = width
        self.height = height
        self.config = config or PipelineConfig()
        self.result = RecognitionResult()
        self.success = False
        self._dispatched = False
        self._thread: Optional[threading.Thread] = None

    def run_in_background(self) -> bool:
        """
        Decode, enhance and recognize the frame.

        Never raises; any unexpected error is logged and reported as failure.
        """
        start = time.time()
        self.result = RecognitionResult()

        try:
            bitmap = decode_frame(
                self.controller.build_luminance_source, self.data, self.width, self.height
            )
            if bitmap is None:
                return False

            enhanced = ImagePreprocessor(self.config).process(bitmap)
            success = recognize(self.engine, enhanced, self.result, self.controller, self.config)
        except Exception:
            _logger.exception("RecognizeTask: frame preparation failed")
            return False

        if success:
            self.result.recognition_time_ms = int((time.time() - start) * 1000)
        return success

    def on_post_execute(self, success: bool) -> None:
        """
        Deliver the outcome and clear the engine. Runs once; later calls are ignored.
        """
        if self._dispatched:
            return
        self._dispatched = True
        self.success = success

        try:
            self._deliver(success)
        except Exception:
            _logger.exception("RecognizeTask: failed to deliver result")
        finally:
            self._clear_engine()

    def _deliver(self, success: bool) -> None:
        controller = self.controller
        handler = controller.get_handler() if controller is not None else None
        if handler is None:
            # controller detached, nobody to tell
            return

        kind = MessageKind.DECODE_SUCCEEDED if success else MessageKind.DECODE_FAILED
        handler.send(Message(kind, self.result))

        progress = controller.get_progress_indicator()
        if progress is not None:
            progress.dismiss()

    def _clear_engine(self) -> None:
        if self.engine is None:
            return
        try:
            self.engine.clear_state()
        except Exception:
            _logger.exception("RecognizeTask: failed to clear engine state")

    def _run(self) -> None:
        success = self.run_in_background()
        try:
            self.controller.post(self.on_post_execute, success)
        except Exception:
            _logger.exception("RecognizeTask: cannot post result, dispatching on worker thread")
            self.on_post_execute(success)

    def execute(self) -> threading.Thread:
        """Start background recognition and return the worker thread."""
        if self._thread is not None:
            raise RuntimeError("RecognizeTask can only be executed once")
        self._thread = threading.Thread(target=self._run, daemon=True, name="ocr-recognize")
        self._thread.start()
        return self._thread
