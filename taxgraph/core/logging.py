"""structlog setup for calculations and the scenario engine.

Events emitted while a scenario is calculated carry its ``scenario_id`` and
``tax_year`` from the context variables below.
"""

import logging
import sys
from contextvars import ContextVar
from typing import Any

import orjson
import structlog
from structlog.types import Processor

from taxgraph.core.config import settings

scenario_id_ctx: ContextVar[str | None] = ContextVar("scenario_id", default=None)
tax_year_ctx: ContextVar[int | None] = ContextVar("tax_year", default=None)


def _add_context_vars(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Attach the scenario and tax year being calculated, if any."""
    if scenario_id := scenario_id_ctx.get():
        event_dict.setdefault("scenario_id", scenario_id)
    if tax_year := tax_year_ctx.get():
        event_dict.setdefault("tax_year", tax_year)
    return event_dict


def _orjson_serializer(obj: Any, **kwargs: Any) -> str:
    """Render an event with orjson; Decimal amounts become strings."""
    return orjson.dumps(obj, default=str).decode("utf-8")


def configure_logging() -> None:
    """Configure structlog.

    ``TAXGRAPH_LOG_FORMAT`` picks the renderer; when unset, the console
    renderer is used in development and JSON everywhere else.
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _add_context_vars,
    ]

    log_format = settings.log_format.lower() if settings.log_format else None
    use_json = log_format == "json" or (
        log_format is None and settings.environment != "development"
    )

    if use_json:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.EventRenamer("message"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(serializer=_orjson_serializer),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if settings.debug else logging.INFO,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger, optionally named."""
    return structlog.get_logger(name)
