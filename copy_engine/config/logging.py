"""Structured Logging Configuration.

- JSON format for production (easy parsing by log aggregators)
- Human-readable format for development
- Request and task correlation IDs
- Sensitive data filtering (brokerage credentials, authorization ids)

Usage:
    from copy_engine.config.logging import setup_logging

    setup_logging()  # Call once at startup
    logger = logging.getLogger(__name__)
    logger.info("replicate.started", extra={"leader_id": 1})
"""

import logging
import sys
from typing import Any

import structlog
from structlog.typing import EventDict

from copy_engine import __version__
from copy_engine.config.settings import Settings, get_settings

# ============================================================================
# SENSITIVE DATA FILTER
# ============================================================================


# Compared after lower-casing and mapping "-" to "_" (HTTP header names)
SENSITIVE_KEYS = frozenset({
    "password",
    "secret",
    "api_key",
    "token",
    "authorization",
    "authorization_id",
    "consumer_key",
    "snaptrade_consumer_key",
})

REDACTED = "[REDACTED]"


def _is_sensitive(key: Any) -> bool:
    return isinstance(key, str) and key.lower().replace("-", "_") in SENSITIVE_KEYS


def _redact(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: REDACTED if _is_sensitive(k) else _redact(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(_redact(item) for item in value)
    return value


def filter_sensitive_data(
    logger: logging.Logger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Replace values of sensitive keys with '[REDACTED]', at any depth.

    Brokerage payloads are logged as nested dicts and lists (holdings,
    activities, request headers), so containers are walked recursively.
    """
    for key, value in list(event_dict.items()):
        event_dict[key] = REDACTED if _is_sensitive(key) else _redact(value)
    return event_dict


# ============================================================================
# CUSTOM PROCESSORS
# ============================================================================


def service_context_processor(settings: Settings) -> structlog.types.Processor:
    """Build a processor stamping service name, environment and version."""

    def add_service_context(
        logger: logging.Logger,
        method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        event_dict["service"] = "copy-engine"
        event_dict["environment"] = settings.environment
        event_dict["version"] = __version__
        return event_dict

    return add_service_context


# ============================================================================
# LOGGING SETUP
# ============================================================================

# Third-party loggers that flood INFO (access logs, SQL, HTTP connection pool)
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "celery.worker.strategy")


def _renderer(settings: Settings) -> structlog.types.Processor:
    if settings.log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def setup_logging(settings: Settings | None = None) -> None:
    """Configure structlog and route stdlib logging through it.

    Modules keep using ``logging.getLogger(__name__)`` with ``extra={...}``;
    ExtraAdder lifts those fields into the structured event. Call once per
    process: in the FastAPI lifespan and on Celery ``worker_process_init``.
    """
    settings = settings or get_settings()

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        service_context_processor(settings),
        filter_sensitive_data,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(settings),
            ],
            foreign_pre_chain=pre_chain,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(settings.log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.db_echo else logging.WARNING
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


# ============================================================================
# CORRELATION CONTEXT
# ============================================================================


def bind_request_context(
    request_id: str,
    user_id: int | None = None,
    **extra: Any,
) -> None:
    """Bind correlation context to all subsequent log calls.

    HTTP middleware binds the request id; Celery tasks bind the task id.
    """
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=request_id,
        user_id=user_id,
        **extra,
    )


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
