"""ProgressSink implementations: a server-sent event stream and a log sink."""

import queue
import threading
from collections.abc import Iterator

from article_common.logging import setup_logging

from domain.models import Phase, ProgressEvent, TranscriptionResult
from response_models import (
    ErrorMessage,
    ProgressMessage,
    ResultMessage,
    StreamMessage,
    TranscriptionResponse,
)

from .interfaces import ProgressSink

logger = setup_logging()


def encode_event(message: StreamMessage) -> str:
    """Encodes one message as a server-sent event."""
    return f"data: {message.model_dump_json(by_alias=True, exclude_none=True)}\n\n"


class QueueProgressChannel(ProgressSink):
    """
    Hands progress from a pipeline thread to a streaming response.

    The run emits into an unbounded queue and never blocks, so a consumer
    that disconnects does not stall or abort the run. The stream ends after
    exactly one terminal ``result`` or ``error`` message.
    """

    def __init__(self):
        self._queue: queue.Queue = queue.Queue()
        self._lock = threading.Lock()
        self._terminated = False

    @property
    def terminated(self) -> bool:
        return self._terminated

    def emit(self, event: ProgressEvent) -> None:
        if event.phase == Phase.ERROR:
            self.fail(event.message)
            return
        self._put(
            ProgressMessage(
                phase=event.phase,
                percent=event.percent,
                message=event.message,
                detail=event.detail,
            )
        )

    def finish(self, result: TranscriptionResult) -> None:
        """Publishes the transcript as the terminal message."""
        self._put(ResultMessage(result=TranscriptionResponse.from_result(result)), True)

    def fail(self, message: str) -> None:
        """Publishes an error as the terminal message."""
        self._put(ErrorMessage(message=message), True)

    def messages(self) -> Iterator[StreamMessage]:
        while True:
            message = self._queue.get()
            yield message
            if message.type != "progress":
                return

    def stream(self) -> Iterator[str]:
        for message in self.messages():
            yield encode_event(message)

    def _put(self, message: StreamMessage, terminal: bool = False) -> None:
        with self._lock:
            if self._terminated:
                logger.warning(
                    "Dropped message after terminal event", extra={"type": message.type}
                )
                return
            if terminal:
                self._terminated = True
            self._queue.put(message)


class LoggingProgressSink(ProgressSink):
    """Records progress in the service log for non-streaming requests."""

    def __init__(self, run_label: str):
        self._run_label = run_label

    def emit(self, event: ProgressEvent) -> None:
        logger.info(
            "Transcription progress",
            extra={
                "run": self._run_label,
                "phase": event.phase.value,
                "percent": event.percent,
                "progress_message": event.message,
            },
        )
