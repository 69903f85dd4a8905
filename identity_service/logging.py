from __future__ import annotations

import logging
import os
from typing import Any

import structlog

SERVICE_NAME = "identity-service"


def _resolve_level(level: str | None) -> int:
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    return getattr(logging, name, logging.INFO)


def _resolve_format(app_env: str | None) -> str:
    if "LOG_FORMAT" in os.environ:
        return os.environ["LOG_FORMAT"].lower()
    if (app_env or os.getenv("APP_ENV")) == "dev":
        return "console"
    return "json"


def _add_service(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def setup_logging(*, level: str | None = None, app_env: str | None = None) -> None:
    """Route structlog and stdlib logging through one JSON (or console) renderer.

    - ISO/UTC timestamp, level, event name and bound fields on every line
    - contextvars are merged so request_id bound by the middleware reaches
      service and repository logs
    - exc_info is rendered into the event instead of a separate traceback
    """

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _add_service,
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if _resolve_format(app_env) == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=_resolve_level(level),
        handlers=[handler],
        force=True,
    )


def get_logger(*args: Any, **kwargs: Any) -> structlog.stdlib.BoundLogger:  # convenience
    return structlog.get_logger(*args, **kwargs)
