from __future__ import annotations

import logging
from logging.config import dictConfig

import structlog
import structlog.types
from structlog.contextvars import merge_contextvars
from structlog.stdlib import BoundLogger

LOGGER_NAMESPACE = "quicklook_thumbnail"


def _resolve_level(level: str) -> str:
    resolved = logging.getLevelName(level.upper())
    if isinstance(resolved, str):
        return "INFO"
    return level.upper()


def _renderers(log_format: str) -> list[structlog.types.Processor]:
    if log_format == "console":
        return [structlog.dev.ConsoleRenderer(colors=False)]
    return [
        structlog.processors.format_exc_info,
        structlog.processors.EventRenamer("message"),
        structlog.processors.JSONRenderer(),
    ]


def configure_logging(level: str = "INFO", log_format: str = "json") -> None:
    """Route structlog events through stdlib logging to stderr.

    ``log_format`` is ``"json"`` (one object per line) or ``"console"``.
    Third-party loggers stay at WARNING; only this package follows *level*.
    """

    level = _resolve_level(level)
    shared: list[structlog.types.Processor] = [
        merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
    ]

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": shared,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        *_renderers(log_format),
                    ],
                }
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "formatter": "structlog",
                    "stream": "ext://sys.stderr",
                }
            },
            "loggers": {
                "": {"handlers": ["stderr"], "level": "WARNING"},
                LOGGER_NAMESPACE: {"level": level},
            },
        }
    )

    structlog.configure(
        processors=[
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> BoundLogger:
    """Helper returning a structured logger bound to *name*.

    The logger always sits on top of a stdlib logger, so events are subject to
    stdlib levels and handlers even before :func:`configure_logging` runs.
    """
    return structlog.wrap_logger(
        logging.getLogger(name or LOGGER_NAMESPACE),
        wrapper_class=structlog.stdlib.BoundLogger,
    )
