"""
Result channel - tagged messages delivered to the consumer
"""
import queue
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from .result import RecognitionResult


class MessageKind(Enum):
    DECODE_SUCCEEDED = "ocr_decode_succeeded"
    DECODE_FAILED = "ocr_decode_failed"


@dataclass
class Message:
    """Outcome of one recognition request"""
    kind: MessageKind
    result: RecognitionResult

    @property
    def succeeded(self) -> bool:
        return self.kind is MessageKind.DECODE_SUCCEEDED


class Handler(Protocol):
    def send(self, message: Message) -> None:
        ...


class QueueHandler:
    """
    Thread-safe handler backed by queue.Queue.

    Usage:
        handler = QueueHandler()
        ...
        message = handler.receive(timeout=5.0)
    """

    def __init__(self):
        self._queue: queue.Queue = queue.Queue()

    def send(self, message: Message) -> None:
        self._queue.put(message)

    def receive(self, timeout: Optional[float] = None) -> Optional[Message]:
        """Return the next message, or None if none arrives within timeout."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def pending(self) -> int:
        return self._queue.qsize()
