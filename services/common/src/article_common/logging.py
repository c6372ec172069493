import logging
import os
import sys
import threading

from pythonjsonlogger import jsonlogger

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(threadName)s %(message)s %(trace_id)s %(span_id)s"
UVICORN_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")

_lock = threading.Lock()
_handler: logging.Handler | None = None


def setup_logging(level: str | None = None) -> logging.Logger:
    """
    Configures structured JSON logging on stdout and returns the root logger.

    The first call installs one JSON handler on the root logger and routes
    the uvicorn loggers through it; later calls only return the logger, so
    every module can call this at import time. ``trace_id`` and ``span_id``
    are filled in by ddtrace log injection when tracing is active.

    Args:
        level: Log level name; defaults to ``LOG_LEVEL`` or INFO.

    Returns:
        logging.Logger: The configured root logger instance.
    """
    global _handler
    root_logger = logging.getLogger()
    with _lock:
        if _handler is not None:
            return root_logger

        formatter = jsonlogger.JsonFormatter(
            LOG_FORMAT,
            rename_fields={"levelname": "level", "threadName": "thread"},
            static_fields={"service": os.getenv("SERVICE_NAME", "transcription-api")},
        )
        _handler = logging.StreamHandler(sys.stdout)
        _handler.setFormatter(formatter)

        root_logger.setLevel((level or os.getenv("LOG_LEVEL", "INFO")).upper())
        root_logger.addHandler(_handler)

        for logger_name in UVICORN_LOGGERS:
            uvicorn_logger = logging.getLogger(logger_name)
            uvicorn_logger.handlers = [_handler]
            uvicorn_logger.propagate = False

    return root_logger
