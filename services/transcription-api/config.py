"""Application configuration loaded from environment variables."""

import os
from typing import Literal

from article_common import MinioConfig
from pydantic import BaseModel

MB = 1024 * 1024


class OpenAIConfig(BaseModel, frozen=True):
    """OpenAI Whisper API configuration."""

    api_key: str
    model_name: str = "whisper-1"
    max_retries: int = 2


class AssemblyAIConfig(BaseModel, frozen=True):
    """AssemblyAI API configuration."""

    api_key: str


class PipelineConfig(BaseModel, frozen=True):
    """Limits and encoding settings of the transcription pipeline."""

    language: str = "ja"
    max_upload_bytes: int = 500 * MB
    # Whisper rejects requests over 25MB; keep a margin.
    direct_limit_bytes: int = 24 * MB
    max_chunk_bytes: int = 24 * MB
    chunk_window_seconds: float = 600.0
    chunk_bitrate: str = "64k"
    chunk_sample_rate: int = 16000
    chunk_channels: int = 1
    run_timeout_seconds: float = 600.0
    workspace_root: str | None = None


class MediaToolkitConfig(BaseModel, frozen=True):
    """Optional explicit locations of the ffmpeg binaries."""

    ffmpeg_path: str | None = None
    ffprobe_path: str | None = None


class YouTubeConfig(BaseModel, frozen=True):
    """Caption language cascade and download settings."""

    preferred_language: str = "ja"
    secondary_language: str = "en"
    socket_timeout_seconds: int = 30


class AppConfig(BaseModel, frozen=True):
    """Root application configuration."""

    transcription_backend: Literal["openai", "assemblyai"] = "openai"
    minio: MinioConfig
    openai: OpenAIConfig
    assemblyai: AssemblyAIConfig
    pipeline: PipelineConfig
    media: MediaToolkitConfig
    youtube: YouTubeConfig


def load_config() -> AppConfig:
    """Loads configuration from environment variables."""
    language = os.getenv("TRANSCRIPTION_LANGUAGE", "ja")
    return AppConfig(
        transcription_backend=os.getenv("TRANSCRIPTION_BACKEND", "openai"),
        minio=MinioConfig(
            endpoint=os.getenv("MINIO_ENDPOINT", "minio:9000"),
            user=os.getenv("MINIO_USER", ""),
            password=os.getenv("MINIO_PASSWORD", ""),
            bucket_name=os.getenv("MINIO_BUCKET", "uploads"),
            secure=os.getenv("MINIO_SECURE", "false").lower() == "true",
        ),
        openai=OpenAIConfig(
            api_key=os.getenv("OPENAI_API_KEY", ""),
            model_name=os.getenv("OPENAI_TRANSCRIPTION_MODEL", "whisper-1"),
        ),
        assemblyai=AssemblyAIConfig(
            api_key=os.getenv("ASSEMBLYAI_API_KEY", ""),
        ),
        pipeline=PipelineConfig(
            language=language,
            max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(500 * MB))),
            run_timeout_seconds=float(os.getenv("PIPELINE_RUN_TIMEOUT_SECONDS", "600")),
            workspace_root=os.getenv("WORKSPACE_ROOT") or None,
        ),
        media=MediaToolkitConfig(
            ffmpeg_path=os.getenv("FFMPEG_PATH") or None,
            ffprobe_path=os.getenv("FFPROBE_PATH") or None,
        ),
        youtube=YouTubeConfig(
            preferred_language=os.getenv("CAPTION_LANGUAGE", language),
            secondary_language=os.getenv("CAPTION_SECONDARY_LANGUAGE", "en"),
        ),
    )
