"""
Tool: Logging Setup
Purpose: structlog on top of stdlib logging for the CLI and the dispatcher

Usage:
    from cassius_notify.logging_config import setup_logging, get_logger

    config = load_config()
    setup_logging(config.logging, catalog_version=config.catalog.version)
    logger = get_logger(__name__)
    logger.info("preferences_saved", user_id="alice", category="IMPORTS")

Settings come from the `logging` section of notifications.yaml.
CASSIUS_LOG_LEVEL and CASSIUS_LOG_FORMAT override it per process.
"""

from __future__ import annotations

import logging
import os
import sys

import structlog

from cassius_notify.config_models import LoggingConfig

LEVEL_ENV = "CASSIUS_LOG_LEVEL"
FORMAT_ENV = "CASSIUS_LOG_FORMAT"


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format.lower() == "json":
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer()


def setup_logging(
    settings: LoggingConfig | None = None,
    level: str | None = None,
    catalog_version: str | None = None,
) -> None:
    """
    Route structlog and stdlib records through one stderr handler.

    Args:
        settings: Logging section of the configuration (defaults if None)
        level: Explicit level, e.g. from --log-level; wins over everything
        catalog_version: Bound to every event so digests and saves can be
            traced to the catalog they were computed with
    """
    settings = settings or LoggingConfig()
    level = level or os.environ.get(LEVEL_ENV) or settings.level
    log_format = os.environ.get(FORMAT_ENV) or settings.format

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # stdout carries the CLI's JSON output
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(log_format),
        ],
    ))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    structlog.contextvars.clear_contextvars()
    if catalog_version is not None:
        structlog.contextvars.bind_contextvars(catalog_version=catalog_version)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


__all__ = ["get_logger", "setup_logging"]
