"""Logging for the storefront: structlog on top of the standard library.

The environment is resolved once from PROTEAN_ENV (falling back to
ENVIRONMENT) and drives both the level and the renderer: JSON lines in
production and staging, a coloured console with rich tracebacks elsewhere.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

JSON_ENVIRONMENTS = ("production", "staging")

LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}


def get_environment() -> str:
    """Name of the running environment, lower-cased."""
    return (os.getenv("PROTEAN_ENV") or os.getenv("ENVIRONMENT") or "development").lower()


def get_log_level(env: str | None = None) -> str:
    """LOG_LEVEL if set, otherwise the default level of the environment."""
    env = env or get_environment()
    return os.getenv("LOG_LEVEL", LEVELS.get(env, "INFO")).upper()


def build_processors(env: str) -> list:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if env in JSON_ENVIRONMENTS:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.RichTracebackFormatter(max_frames=5),
            )
        )
    return processors


def setup_stdlib_logging(level: str) -> None:
    """Route stdlib logging to stdout, plus a rotating file when LOG_DIR is set."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    log_dir = os.getenv("LOG_DIR")
    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                filename=path / "storefront.log",
                maxBytes=5 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
        )

    logging.basicConfig(level=level, format="%(message)s", handlers=handlers, force=True)

    # httpx logs every coupon request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def setup_structlog(env: str) -> None:
    structlog.configure(
        processors=build_processors(env),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging() -> None:
    """Configure all logging for the application."""
    env = get_environment()
    setup_stdlib_logging(get_log_level(env))
    setup_structlog(env)


def add_context(**kwargs: Any) -> None:
    """Add context variables that will be included in all subsequent log messages."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
