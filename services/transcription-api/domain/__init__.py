"""Domain layer exports."""

from .chunk_planner import plan_chunks
from .deadline import Deadline
from .media_probe import MediaProbe, estimate_duration
from .media_splitter import MediaSplitter
from .models import (
    AudioRequired,
    CaptionTranscript,
    Chunk,
    ChunkPlan,
    MediaSource,
    Phase,
    ProgressEvent,
    StagedObject,
    TranscriptionResult,
)
from .progress import ProgressReporter
from .transcript_builder import TranscriptBuilder

__all__ = [
    "AudioRequired",
    "CaptionTranscript",
    "Chunk",
    "ChunkPlan",
    "Deadline",
    "MediaProbe",
    "MediaSource",
    "MediaSplitter",
    "Phase",
    "ProgressEvent",
    "ProgressReporter",
    "StagedObject",
    "TranscriptBuilder",
    "TranscriptionResult",
    "estimate_duration",
    "plan_chunks",
]
