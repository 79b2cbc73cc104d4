"""
Capture controller - owner of the result handler and the consumer execution context
"""
from __future__ import annotations

import logging
import queue
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from .luminance import LuminanceSource, PlanarYUVLuminanceSource
from .messages import Handler, QueueHandler

_logger = logging.getLogger(__name__)


class ProgressIndicator(Protocol):
    def dismiss(self) -> None:
        ...


class Controller(Protocol):
    """What RecognizeTask needs from the component that started it."""

    def build_luminance_source(self, data: bytes, width: int, height: int) -> LuminanceSource:
        ...

    def get_handler(self) -> Optional[Handler]:
        ...

    def get_progress_indicator(self) -> Optional[ProgressIndicator]:
        ...

    def stop_handler(self) -> None:
        """Halt continuous recognition mode."""
        ...

    def post(self, callback: Callable, *args) -> None:
        """Run callback(*args) on the consumer's execution context."""
        ...


@dataclass
class FramingRect:
    """Crop rectangle applied to every frame"""
    left: int
    top: int
    width: int
    height: int


def build_framed_source(
    data: bytes, width: int, height: int, rect: Optional[FramingRect] = None
) -> PlanarYUVLuminanceSource:
    """Luminance source for a YUV frame, cropped to rect when given."""
    if rect is None:
        return PlanarYUVLuminanceSource(data, width, height)
    return PlanarYUVLuminanceSource(
        data, width, height, rect.left, rect.top, rect.width, rect.height
    )


class CaptureController:
    """
    Plain-Python controller.

    Callbacks given to post() are queued and executed by whichever thread calls
    run_pending(), which plays the role of the UI thread.

    Usage:
        controller = CaptureController()
        RecognizeTask(controller, engine, data, w, h).execute()
        controller.run_pending(timeout=30.0)
        message = controller.handler.receive()
    """

    def __init__(
        self,
        handler: Optional[Handler] = None,
        progress_indicator: Optional[ProgressIndicator] = None,
        framing_rect: Optional[FramingRect] = None,
        continuous_mode: bool = False,
    ):
        self.handler = handler if handler is not None else QueueHandler()
        self.progress_indicator = progress_indicator
        self.framing_rect = framing_rect
        self.continuous_mode = continuous_mode
        self._callbacks: queue.Queue = queue.Queue()

    def build_luminance_source(self, data: bytes, width: int, height: int) -> LuminanceSource:
        return build_framed_source(data, width, height, self.framing_rect)

    def get_handler(self) -> Optional[Handler]:
        return self.handler

    def get_progress_indicator(self) -> Optional[ProgressIndicator]:
        return self.progress_indicator

    def detach(self) -> None:
        """Drop the handler; later results are discarded silently."""
        self.handler = None

    def stop_handler(self) -> None:
        if self.continuous_mode:
            _logger.info("CaptureController: continuous recognition stopped")
        self.continuous_mode = False

    def post(self, callback: Callable, *args) -> None:
        self._callbacks.put((callback, args))

    def run_pending(self, timeout: Optional[float] = None) -> int:
        """
        Run posted callbacks on the calling thread.

        Args:
            timeout: Seconds to wait for the first callback. None runs only
                     what is already queued.

        Returns:
            Number of callbacks executed
        """
        executed = 0
        block = timeout is not None
        while True:
            try:
                callback, args = self._callbacks.get(block=block, timeout=timeout)
            except queue.Empty:
                break
            callback(*args)
            executed += 1
            block = False
        return executed
