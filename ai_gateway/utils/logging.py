"""structlog setup for the gateway.

Every event carries ``service``, ``level`` and an ISO timestamp.  Output is a
coloured console stream while developing and one JSON object per line in
production; the composition root decides which by passing ``json_output``
derived from the resolved app environment.

Records from the stdlib ``logging`` tree (httpx, the openai SDK) go through
the same renderer.  Those two libraries log every request at INFO, so they
are held at WARNING unless the gateway itself runs at DEBUG.
"""

import logging
import sys
from typing import TextIO

import structlog

SERVICE_NAME = "idea-ai-gateway"

_CHATTY_LIBRARIES = ("httpx", "httpcore", "openai")


def _add_service_name(_logger, _method_name: str, event_dict: dict) -> dict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        _add_service_name,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def _renderer(json_output: bool) -> structlog.types.Processor:
    if json_output:
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=True)


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = False,
    stream: TextIO | None = None,
) -> structlog.BoundLogger:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR).
        json_output: Render JSON lines instead of console output.
        stream: Destination for both pipelines; ``sys.stdout`` by default.

    Returns:
        A bound logger for the gateway itself.
    """
    level_name = log_level.upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    shared = _shared_processors()
    renderer = _renderer(json_output)

    structlog.configure(
        processors=[*shared, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *shared,
                renderer,
            ],
        )
    )
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    library_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _CHATTY_LIBRARIES:
        logging.getLogger(name).setLevel(library_level)

    return structlog.get_logger(logger_name=SERVICE_NAME)


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a logger bound with ``logger_name=name``, configuring defaults first if needed."""
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)
