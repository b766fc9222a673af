"""Logging configuration using structlog.

Every event carries the run context (project, environment, pull request)
once ``bind_run_context`` has been called, and configured secrets are
masked before anything is rendered.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Iterable

import structlog

from vercel_deploy.config import Settings, get_settings
from vercel_deploy.utils.text import mask_secrets


def redact_secrets(secrets: Iterable[str]) -> structlog.types.Processor:
    """Build a processor that masks ``secrets`` in string event values."""
    secrets = [secret for secret in secrets if secret]

    def processor(logger: Any, method_name: str, event_dict: dict) -> dict:
        if not secrets:
            return event_dict
        for key, value in event_dict.items():
            if isinstance(value, str):
                event_dict[key] = mask_secrets(value, secrets)
        return event_dict

    return processor


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structured logging for a pipeline run."""
    settings = settings or get_settings()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.log_file:
        log_file = Path(settings.log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, settings.log_level),
        handlers=handlers,
        force=True,
    )

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        redact_secrets([settings.vercel_token, settings.github_token]),
    ]

    # CI logs do not render ANSI colours
    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_run_context(**fields: Any) -> None:
    """Attach run-wide fields to every later event; ``None`` values are skipped."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        **{key: value for key, value in fields.items() if value is not None}
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
