"""Time-based chunk planning."""

import math

from .models import ChunkPlan

# Backends reject audio shorter than this.
MIN_CHUNK_SECONDS = 0.1


def plan_chunks(
    duration_seconds: float, window_seconds: float = 600.0
) -> list[ChunkPlan]:
    """
    Divides a media duration into consecutive fixed-size windows.

    The windows tile [0, duration) with no gaps or overlaps; only the last
    one may be shorter than the window. A remainder shorter than
    ``MIN_CHUNK_SECONDS`` is added to the previous window instead, so that
    window may be slightly longer. A duration that fits into a single
    window still yields one entry.

    Args:
        duration_seconds: Total media duration.
        window_seconds: Length of every chunk but the last.

    Returns:
        Planned chunks ordered by index.

    Raises:
        ValueError: If either argument is not a positive finite number.
    """
    for name, value in (("duration", duration_seconds), ("window", window_seconds)):
        if not math.isfinite(value) or value <= 0:
            raise ValueError(f"{name} must be a positive number, got {value!r}")

    count = math.ceil(duration_seconds / window_seconds)
    plan = []
    for index in range(count):
        start = index * window_seconds
        length = min(window_seconds, duration_seconds - start)
        if length <= 0:
            # ceil() rounding on float noise can produce an empty tail
            break
        if length < MIN_CHUNK_SECONDS and plan:
            previous = plan[-1]
            plan[-1] = ChunkPlan(
                index=previous.index,
                start_seconds=previous.start_seconds,
                duration_seconds=previous.duration_seconds + length,
            )
            break
        plan.append(
            ChunkPlan(index=index, start_seconds=start, duration_seconds=length)
        )
    return plan
