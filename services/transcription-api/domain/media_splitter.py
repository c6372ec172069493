"""Cutting large media into bounded-size speech chunks."""

import os
from collections.abc import Callable

from article_common.logging import setup_logging

from config import PipelineConfig
from exceptions import MediaToolError, SplitFailedError
from infrastructure.interfaces import MediaToolkit

from .deadline import Deadline
from .models import Chunk, ChunkPlan

logger = setup_logging()


class MediaSplitter:
    """
    Re-encodes planned time windows of a source file into MP3 chunks.

    Every chunk is re-encoded to mono, 16kHz, 64kbps even when the source is
    already compressed, which keeps each chunk far below the backend's
    per-request size limit.
    """

    def __init__(self, toolkit: MediaToolkit, config: PipelineConfig):
        self._toolkit = toolkit
        self._config = config

    def split(
        self,
        input_path: str,
        output_dir: str,
        plan: list[ChunkPlan],
        deadline: Deadline | None = None,
        on_chunk: Callable[[int, int], None] | None = None,
    ) -> list[Chunk]:
        """
        Produces one encoded chunk per planned window, in index order.

        Args:
            input_path: Absolute path of the source media.
            output_dir: Workspace directory for the chunk files.
            plan: Planned windows from ``plan_chunks``.
            deadline: Run budget bounding each transcode.
            on_chunk: Called with (chunks_done, total) after each chunk.

        Returns:
            The chunks, ordered by index.

        Raises:
            SplitFailedError: If the plan is empty, a transcode fails or a
                chunk comes out larger than the chunk limit.
            PipelineTimeoutError: If the run budget runs out.
        """
        if not plan:
            raise SplitFailedError("media duration could not be determined")

        total = len(plan)
        chunks: list[Chunk] = []
        for planned in plan:
            output_path = os.path.join(output_dir, f"chunk_{planned.index:03d}.mp3")
            timeout = deadline.remaining("splitting") if deadline else None
            try:
                self._toolkit.transcode_segment(
                    input_path=input_path,
                    output_path=output_path,
                    start_seconds=planned.start_seconds,
                    duration_seconds=planned.duration_seconds,
                    bitrate=self._config.chunk_bitrate,
                    sample_rate=self._config.chunk_sample_rate,
                    channels=self._config.chunk_channels,
                    timeout=timeout,
                )
                size = os.path.getsize(output_path)
            except (MediaToolError, OSError, ValueError) as e:
                if deadline:
                    deadline.check("splitting")
                logger.exception(
                    "Chunk transcode failed",
                    extra={"chunk_index": planned.index, "input_path": input_path},
                )
                raise SplitFailedError(f"chunk {planned.index} could not be encoded", e) from e

            if size > self._config.max_chunk_bytes:
                raise SplitFailedError(
                    f"chunk {planned.index} is {size} bytes, "
                    f"over the {self._config.max_chunk_bytes} byte limit"
                )

            chunks.append(
                Chunk(
                    index=planned.index,
                    start_seconds=planned.start_seconds,
                    duration_seconds=planned.duration_seconds,
                    path=output_path,
                    size_bytes=size,
                )
            )
            logger.info(
                "Chunk encoded",
                extra={"chunk_index": planned.index, "total": total, "size": size},
            )
            if on_chunk:
                on_chunk(len(chunks), total)

        return chunks
