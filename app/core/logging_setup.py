"""Shared structlog/stdlib logging bootstrap for the API process."""

import logging
import logging.config
import sys

import structlog
from structlog.dev import ConsoleRenderer

_CONFIGURED = False


def _is_local_environment(environment: str) -> bool:
    return environment.lower() in ("", "local", "development", "dev", "test")


def configure_logging(log_level: str, environment: str = "local") -> None:
    """Configure structured logging with environment-appropriate format.

    - Local/development: Human-readable console output with colors
    - Production: JSON output for log aggregation
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="backslashreplace")

    is_local = _is_local_environment(environment)

    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer = ConsoleRenderer(colors=True, pad_event_to=40) if is_local else (
        structlog.processors.JSONRenderer()
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structured": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                    "foreign_pre_chain": shared_processors,
                }
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "structured",
                    "stream": "ext://sys.stdout",
                }
            },
            "root": {
                "handlers": ["default"],
                "level": log_level,
            },
            # Silence chatty libs that spam debug logs at INFO level
            "loggers": {
                "uvicorn.access": {"level": "INFO"},
                "uvicorn.error": {"level": "INFO"},
                "asyncpg": {"level": "WARNING"},
            },
        }
    )

    _CONFIGURED = True
