"""Ordered strategy chains that stop at the first success."""

from collections.abc import Callable, Sequence
from typing import Generic, NamedTuple, TypeVar

from article_common.logging import setup_logging

logger = setup_logging()

T = TypeVar("T")


class Strategy(NamedTuple, Generic[T]):
    """A named way of producing a value."""

    name: str
    attempt: Callable[[], T]


class StrategiesExhaustedError(Exception):
    """Raised when every strategy of a chain failed."""

    def __init__(self, chain: str, failures: list[tuple[str, Exception]]):
        self.chain = chain
        self.failures = failures
        tried = ", ".join(name for name, _ in failures) or "none"
        super().__init__(f"All strategies for {chain} failed (tried: {tried})")


def first_successful(
    chain: str,
    strategies: Sequence[Strategy[T]],
    recoverable: tuple[type[Exception], ...],
) -> T:
    """
    Tries each strategy in order and returns the first result.

    Only exceptions listed in ``recoverable`` move the chain on to the next
    strategy; anything else propagates immediately.

    Args:
        chain: Name of the chain, used in logs and errors.
        strategies: Strategies in order of preference.
        recoverable: Exception types meaning "try the next one".

    Returns:
        The value produced by the first strategy that succeeded.

    Raises:
        StrategiesExhaustedError: If every strategy failed.
    """
    failures: list[tuple[str, Exception]] = []
    for strategy in strategies:
        try:
            value = strategy.attempt()
        except recoverable as e:
            logger.info(
                "Strategy failed, trying next",
                extra={"chain": chain, "strategy": strategy.name, "error": str(e)},
            )
            failures.append((strategy.name, e))
            continue
        if failures:
            logger.info(
                "Fallback strategy succeeded",
                extra={"chain": chain, "strategy": strategy.name},
            )
        return value
    raise StrategiesExhaustedError(chain, failures)
