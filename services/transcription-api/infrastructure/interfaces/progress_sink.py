"""Abstract interface for progress observers."""

from abc import ABC, abstractmethod

from domain.models import ProgressEvent


class ProgressSink(ABC):
    """Receives progress events of one run, in emission order."""

    @abstractmethod
    def emit(self, event: ProgressEvent) -> None:
        """
        Delivers one event to the observer.

        Implementations must not raise when the observer has gone away;
        the run continues regardless of who is listening.

        Args:
            event: The progress event.
        """
