"""Wall-clock budget of a single run."""

import time

from exceptions import PipelineTimeoutError


class Deadline:
    """Tracks the remaining time of a run and fails once it is spent."""

    def __init__(self, limit_seconds: float, clock=time.monotonic):
        self._limit = limit_seconds
        self._clock = clock
        self._expires_at = clock() + limit_seconds

    def remaining(self, stage: str = "processing") -> float:
        """
        Returns the seconds left in the budget.

        Raises:
            PipelineTimeoutError: If nothing is left.
        """
        left = self._expires_at - self._clock()
        if left <= 0:
            raise PipelineTimeoutError(self._limit, stage)
        return left

    def check(self, stage: str) -> None:
        self.remaining(stage)
