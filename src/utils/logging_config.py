"""Centralized logging configuration with environment variable support."""

import os
import logging
import sys
from pythonjsonlogger import jsonlogger


def _names(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class LoggingConfig:
    """Logging settings for the schedule functions."""

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json").lower()
    LOG_SERVICE_NAME = os.environ.get("LOG_SERVICE_NAME", "poolschedule-backend")
    LOG_CORRELATION_ID_HEADER = os.environ.get("LOG_CORRELATION_ID_HEADER", "X-Correlation-ID")
    LOG_SLOW_OPERATION_THRESHOLD_MS = int(os.environ.get("LOG_SLOW_OPERATION_THRESHOLD_MS", "1000"))
    # supabase-py talks to PostgREST over httpx; their request logs drown the schedule logs
    LOG_QUIET_LOGGERS = _names(os.environ.get("LOG_QUIET_LOGGERS", "httpx,httpcore,postgrest,supabase"))

    @classmethod
    def build_formatter(cls) -> logging.Formatter:
        """JSON formatter tagged with the service name, or a plain text one."""
        if cls.LOG_FORMAT == "json":
            return jsonlogger.JsonFormatter(
                "%(timestamp)s %(levelname)s %(name)s %(message)s",
                timestamp=True,
                static_fields={"service": cls.LOG_SERVICE_NAME},
            )
        return logging.Formatter(
            f"%(asctime)s - {cls.LOG_SERVICE_NAME} - %(name)s - %(levelname)s - %(message)s"
        )

    @classmethod
    def setup_logging(cls) -> None:
        """Route every log line to stdout, where Vercel collects it."""
        level = getattr(logging, cls.LOG_LEVEL, logging.INFO)
        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(cls.build_formatter())
        root_logger.addHandler(handler)

        for name in cls.LOG_QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)
