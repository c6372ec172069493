"""FastAPI application entry point."""

from ddtrace import patch_all
from fastapi import FastAPI

from routes import transcriptions_router, uploads_router

patch_all()

app = FastAPI(title="Transcription Service")
app.include_router(transcriptions_router)
app.include_router(uploads_router)
