"""FastAPI dependency injection configuration."""

from functools import lru_cache

import assemblyai as aai
from article_common import get_minio_client
from article_common.logging import setup_logging
from openai import OpenAI
from youtube_transcript_api import YouTubeTranscriptApi

from config import AppConfig, load_config
from handlers import SourceAcquirer, TranscriptionPipeline
from infrastructure import (
    AssemblyAITranscriber,
    FFmpegToolkit,
    MinioStorageClient,
    OpenAITranscriber,
    YouTubeCaptionProvider,
    YtDlpAudioDownloader,
)
from infrastructure.interfaces import MediaToolkit, StorageClient, TranscriptionService

logger = setup_logging()


@lru_cache
def get_config() -> AppConfig:
    """Returns the application configuration."""
    return load_config()


@lru_cache
def get_storage() -> StorageClient:
    """Returns the object storage client, creating the bucket on first use."""
    config = get_config()
    storage = MinioStorageClient(get_minio_client(config.minio))
    storage.ensure_bucket_exists(config.minio.bucket_name)
    return storage


@lru_cache
def get_transcription_service() -> TranscriptionService:
    """Returns the configured speech-to-text backend."""
    config = get_config()
    logger.info(
        "Transcription backend selected",
        extra={"backend": config.transcription_backend},
    )
    if config.transcription_backend == "assemblyai":
        aai.settings.api_key = config.assemblyai.api_key
        return AssemblyAITranscriber(aai.Transcriber())

    client = OpenAI(
        api_key=config.openai.api_key, max_retries=config.openai.max_retries
    )
    return OpenAITranscriber(client, config.openai.model_name)


@lru_cache
def get_media_toolkit() -> MediaToolkit:
    return FFmpegToolkit.from_config(get_config().media)


@lru_cache
def get_source_acquirer() -> SourceAcquirer:
    config = get_config()
    return SourceAcquirer(
        captions=YouTubeCaptionProvider(YouTubeTranscriptApi()),
        downloader=YtDlpAudioDownloader(config.youtube.socket_timeout_seconds),
        config=config.youtube,
    )


@lru_cache
def get_pipeline() -> TranscriptionPipeline:
    """Returns the transcription pipeline wired to the configured adapters."""
    config = get_config()
    return TranscriptionPipeline(
        transcription_service=get_transcription_service(),
        toolkit=get_media_toolkit(),
        storage=get_storage(),
        acquirer=get_source_acquirer(),
        config=config.pipeline,
        bucket_name=config.minio.bucket_name,
    )
