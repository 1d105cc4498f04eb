"""Structured logging configuration using structlog."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, merge_contextvars

if TYPE_CHECKING:
    from job_counter_core.config.settings import Settings

# Third-party loggers that flood DEBUG output during browser sessions
_NOISY_LOGGERS = ("asyncio", "playwright")


def configure_logging(settings: Settings) -> None:
    """Route structlog and stdlib logging through one formatter.

    Records go to stderr so the CLI summary on stdout stays readable.
    When settings.log_file is set, a JSON copy of every record is appended
    there as well, which is what unattended scheduled runs keep.
    """
    shared = _shared_processors()
    level = _resolve_level(settings.log_level)

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(_stream_handler(settings.log_format, shared))
    if settings.log_file is not None:
        root_logger.addHandler(_file_handler(settings.log_file, shared))
    root_logger.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def bind_run_context(run_id: str, **context: Any) -> None:
    """Attach run_id (and any extra run-wide fields) to every later log entry."""
    bind_contextvars(run_id=run_id, **context)


def clear_run_context() -> None:
    """Clear all bound context variables."""
    clear_contextvars()


def _shared_processors() -> list[structlog.types.Processor]:
    """Processors applied to both structlog and foreign stdlib records."""
    return [
        merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _formatter(
    shared: list[structlog.types.Processor],
    *renderers: structlog.types.Processor,
) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderers],
        foreign_pre_chain=shared,
    )


def _stream_handler(
    log_format: str, shared: list[structlog.types.Processor]
) -> logging.Handler:
    """stderr handler rendering JSON or coloured console lines."""
    renderer: structlog.types.Processor
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_formatter(shared, renderer))
    return handler


def _file_handler(path: Path, shared: list[structlog.types.Processor]) -> logging.Handler:
    """Append-mode JSON lines handler; exceptions are kept as structured dicts."""
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(
        _formatter(
            shared,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        )
    )
    return handler


def _resolve_level(level_name: str) -> int:
    """Convert a level name string to a logging level int."""
    mapping: dict[str, int] = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return mapping.get(level_name.upper(), logging.INFO)
