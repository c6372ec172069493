"""Handler layer exports."""

from .source_acquirer import SourceAcquirer
from .transcription_pipeline import PreparedRun, TranscriptionPipeline

__all__ = ["PreparedRun", "SourceAcquirer", "TranscriptionPipeline"]
