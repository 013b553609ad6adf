"""structlog setup for the OKR backend.

Application events and stdlib records (uvicorn, SQLAlchemy) share one
processor chain and one stdout handler, so every line carries the same
service, level, timestamp and request id fields.
"""

import logging
import logging.config

import structlog
from asgi_correlation_id.context import correlation_id

# Third-party loggers that only add noise at INFO
_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine")


def add_correlation_id(logger, method, event_dict):
    """Copy the current request id (X-Request-ID) onto the entry."""
    cid = correlation_id.get(None)
    if cid:
        event_dict["correlation_id"] = cid
    return event_dict


def add_service_name(service: str):
    """Build a processor that stamps every entry with the emitting service."""

    def _processor(logger, method, event_dict):
        event_dict.setdefault("service", service)
        return event_dict

    return _processor


def _shared_processors(service: str) -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_correlation_id,
        add_service_name(service),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


def configure_structlog(
    log_level: str = "INFO",
    json_logs: bool = True,
    service: str = "okr-backend",
) -> None:
    """Route structlog and stdlib logging through a single renderer.

    Must run before app modules create their loggers, because loggers are
    cached on first use.

    Args:
        log_level: Root log level name
        json_logs: JSON lines when True, colored console output when False
        service: Value of the "service" field on every entry
    """
    processors = _shared_processors(service)
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    renderer,
                ],
                "foreign_pre_chain": processors,
            },
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "structured",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {"handlers": ["stdout"], "level": log_level},
        "loggers": {name: {"level": "WARNING"} for name in _QUIET_LOGGERS},
    })

    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
