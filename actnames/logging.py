import logging
import sys

import structlog

# HTTP client chatter would otherwise interleave with CLI tables
_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")

_renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

_processors = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="%H:%M:%S"),
    _renderer,
]


def configure_logging(level: str = "INFO"):
    structlog.configure(
        processors=_processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelNamesMapping()[level.upper()]),
        logger_factory=structlog.WriteLoggerFactory(file=sys.stderr),
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None):
    return structlog.get_logger(name or "actnames")


_formatter = {
    "()": structlog.stdlib.ProcessorFormatter,
    "processor": _renderer,
    "foreign_pre_chain": _processors[:-1],
}

# uvicorn's own loggers rendered through the same chain as ours
UVICORN_LOG_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {"server": _formatter},
    "handlers": {
        "server": {"formatter": "server", "class": "logging.StreamHandler", "stream": "ext://sys.stderr"},
    },
    "loggers": {
        "uvicorn": {"handlers": ["server"], "level": "INFO", "propagate": False},
        "uvicorn.error": {"level": "INFO"},
        "uvicorn.access": {"handlers": ["server"], "level": "INFO", "propagate": False},
    },
}
