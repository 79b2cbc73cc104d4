"""
Workers - Qt background thread and controller for single-shot recognition

The recognition runs in a QThread; its completion signal is delivered to the
controller's (GUI) thread, where the result message is emitted and the
progress dialog dismissed.
"""
from typing import Callable, Optional

from PySide6.QtCore import QObject, QSettings, QThread, Qt, Signal, Slot

from capture_ocr.config import PipelineConfig
from capture_ocr.controller import FramingRect, build_framed_source
from capture_ocr.luminance import LuminanceSource
from capture_ocr.recognize_task import RecognizeTask


class RecognizeWorker(QThread):
    """
    Background thread running one RecognizeTask.

    Signals:
        complete: (task, success)
    """

    complete = Signal(object, bool)

    def __init__(self, task: RecognizeTask, parent=None):
        super().__init__(parent)
        self.task = task

    def run(self):
        """Run the background stage; dispatch happens in the receiver's thread."""
        success = self.task.run_in_background()
        self.complete.emit(self.task, success)


class QtCaptureController(QObject):
    """
    Controller living in the GUI thread.

    Signals:
        message_received: (Message) - one per recognition while attached
        continuous_stopped: ()
    """

    message_received = Signal(object)
    continuous_stopped = Signal()
    _posted = Signal(object, object)

    def __init__(
        self,
        progress_dialog=None,
        framing_rect: Optional[FramingRect] = None,
        config: Optional[PipelineConfig] = None,
        parent=None,
    ):
        super().__init__(parent)
        self.progress_dialog = progress_dialog
        self.framing_rect = framing_rect
        self.config = config or get_recognition_settings()
        self.continuous_mode = False
        self._attached = True
        self._posted.connect(self._invoke, Qt.ConnectionType.QueuedConnection)

    # Controller interface

    def build_luminance_source(self, data: bytes, width: int, height: int) -> LuminanceSource:
        return build_framed_source(data, width, height, self.framing_rect)

    def get_handler(self):
        return self if self._attached else None

    def get_progress_indicator(self):
        if self.progress_dialog is None:
            return None
        return _DialogDismisser(self.progress_dialog)

    def stop_handler(self) -> None:
        self.continuous_mode = False
        self.continuous_stopped.emit()

    def post(self, callback: Callable, *args) -> None:
        self._posted.emit(callback, args)

    # Handler interface

    def send(self, message) -> None:
        self.message_received.emit(message)

    @Slot(object, object)
    def _invoke(self, callback, args):
        callback(*args)

    @Slot(object, bool)
    def _on_worker_complete(self, task: RecognizeTask, success: bool):
        task.on_post_execute(success)

    def detach(self) -> None:
        """Stop delivering results (e.g. the window is closing)."""
        self._attached = False

    def start_recognition(self, engine, data: bytes, width: int, height: int) -> RecognizeWorker:
        """Start one recognition in a RecognizeWorker and return it."""
        task = RecognizeTask(self, engine, data, width, height, config=self.config)
        worker = RecognizeWorker(task, parent=self)
        # self lives in the GUI thread, so this is a queued connection
        worker.complete.connect(self._on_worker_complete)
        worker.finished.connect(worker.deleteLater)
        if self.progress_dialog is not None:
            self.progress_dialog.show()
        worker.start()
        return worker


class _DialogDismisser:
    """Adapts a QProgressDialog (or any widget) to the ProgressIndicator protocol."""

    def __init__(self, dialog):
        self._dialog = dialog

    def dismiss(self) -> None:
        self._dialog.hide()


def get_recognition_settings() -> PipelineConfig:
    """
    Get recognition settings from QSettings.

    Returns:
        PipelineConfig with the user's toggles; unset keys keep the defaults.
    """
    settings = QSettings("CaptureOCR", "CaptureOCR")
    defaults = PipelineConfig()
    return PipelineConfig(
        adaptive_threshold=settings.value(
            "preprocess/adaptive_threshold", defaults.adaptive_threshold, type=bool
        ),
        strip_whitespace=settings.value(
            "text/strip_whitespace", defaults.strip_whitespace, type=bool
        ),
        uppercase=settings.value("text/uppercase", defaults.uppercase, type=bool),
        language=settings.value("engine/language", defaults.language),
        page_seg_mode=settings.value("engine/page_seg_mode", defaults.page_seg_mode, type=int),
    )
