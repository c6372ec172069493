"""Progress reporting for a single run."""

from typing import Any

from article_common.logging import setup_logging

from infrastructure.interfaces import ProgressSink

from .models import Phase, ProgressEvent

logger = setup_logging()


class ProgressReporter:
    """
    Emits progress events to a sink while enforcing the channel contract.

    Percentages never decrease within a run, and exactly one terminal event
    (``complete`` or ``error``) is emitted; anything reported after it is
    dropped.
    """

    def __init__(self, sink: ProgressSink):
        self._sink = sink
        self._percent = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def update(
        self,
        phase: Phase,
        percent: float,
        message: str,
        detail: dict[str, Any] | None = None,
    ) -> None:
        if phase in (Phase.COMPLETE, Phase.ERROR):
            raise ValueError("Terminal phases are reported with complete() or fail()")
        self._emit(phase, min(int(percent), 99), message, detail)

    def band(self, start: float, end: float, done: int, total: int) -> float:
        """Maps ``done`` of ``total`` steps onto the [start, end] percent range."""
        if total <= 0:
            return end
        return start + (end - start) * done / total

    def complete(self, message: str, detail: dict[str, Any] | None = None) -> None:
        self._emit(Phase.COMPLETE, 100, message, detail)
        self._closed = True

    def fail(self, message: str, detail: dict[str, Any] | None = None) -> None:
        self._emit(Phase.ERROR, self._percent, message, detail)
        self._closed = True

    def _emit(
        self, phase: Phase, percent: int, message: str, detail: dict[str, Any] | None
    ) -> None:
        if self._closed:
            logger.warning(
                "Progress reported after terminal event",
                extra={"phase": phase.value, "progress_message": message},
            )
            return
        self._percent = max(self._percent, max(0, percent))
        self._sink.emit(
            ProgressEvent(
                phase=phase, percent=self._percent, message=message, detail=detail
            )
        )
