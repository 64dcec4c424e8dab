"""structlog + stdlib logging for the API process.

structlog events and foreign stdlib records (uvicorn, httpx) end up in the
same ``ProcessorFormatter``. Records are handed to a ``QueueListener``
thread, so writing a log line never blocks the event loop.
"""

from __future__ import annotations

import atexit
import copy
import logging
import logging.config
import queue
import sys
from datetime import datetime, timezone
from logging.handlers import QueueHandler, QueueListener
from typing import Any, Optional

import structlog

from marquee.infrastructure.config.schema import AppConfig

log = structlog.get_logger(__name__)

# Transport loggers pinned regardless of the configured level.
_QUIET_LOGGERS: dict[str, str] = {"httpx": "WARNING", "httpcore": "WARNING"}

_listener: Optional[QueueListener] = None


def _drop_color_message(_: Any, __: Any, event_dict: dict[str, Any]) -> dict[str, Any]:
    # uvicorn duplicates "event" as an ANSI-coloured "color_message".
    event_dict.pop("color_message", None)
    return event_dict


def _add_record_created_timestamp_utc(
    _: Any, __: Any, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Timestamp foreign records with ``LogRecord.created``.

    Formatting happens later on the listener thread, so "now" would be
    the wrong time.
    """
    record = event_dict.get("_record")
    if isinstance(record, logging.LogRecord):
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        event_dict["timestamp"] = dt.isoformat().replace("+00:00", "Z")
    return event_dict


def _foreign_pre_chain() -> list[structlog.typing.Processor]:
    return [
        _drop_color_message,
        structlog.contextvars.merge_contextvars,
        _add_record_created_timestamp_utc,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
    ]


def _formatter_kwargs(config: AppConfig) -> dict[str, Any]:
    renderer: structlog.typing.Processor
    if config.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()
    return {
        "foreign_pre_chain": _foreign_pre_chain(),
        "processors": [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    }


def _quiet_level(name: str) -> Optional[str]:
    for prefix, level in _QUIET_LOGGERS.items():
        if name == prefix or name.startswith(f"{prefix}."):
            return level
    return None


def build_logging_config(config: AppConfig) -> dict[str, Any]:
    """dictConfig for ``uvicorn.run(log_config=...)``, rendered by structlog.

    uvicorn's loggers follow ``config.log_level``; the transport loggers in
    ``_QUIET_LOGGERS`` keep their pinned level.
    """
    level = config.log_level
    loggers: dict[str, dict[str, Any]] = {
        "uvicorn": {"handlers": ["default"], "level": level, "propagate": False},
        "uvicorn.error": {"level": level},
        "uvicorn.access": {"handlers": ["access"], "level": level, "propagate": False},
    }
    loggers.update({name: {"level": lvl} for name, lvl in _QUIET_LOGGERS.items()})

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structlog": {
                "()": structlog.stdlib.ProcessorFormatter,
                **_formatter_kwargs(config),
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "structlog",
                "stream": "ext://sys.stderr",
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "structlog",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": loggers,
        "root": {"handlers": ["default"], "level": level},
    }


class _EventDictQueueHandler(QueueHandler):
    """Enqueues a shallow copy of the record, leaving ``record.msg`` as is.

    The stock ``prepare()`` stringifies ``msg``, which would destroy the
    event dict that ``wrap_for_formatter`` put there.
    """

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        return copy.copy(record)


def _stream_handler(
    stream: Any, formatter: logging.Formatter, *, errors: bool
) -> logging.Handler:
    handler = logging.StreamHandler(stream=stream)
    handler.setFormatter(formatter)
    if errors:
        handler.addFilter(lambda r: r.levelno >= logging.ERROR)
    else:
        handler.addFilter(lambda r: r.levelno < logging.ERROR)
    return handler


def _stop_listener() -> None:
    global _listener
    listener, _listener = _listener, None
    if listener is not None:
        listener.stop()


def _route_through_queue(config: AppConfig) -> None:
    """Send every stdlib record through one queue.

    The listener writes ERROR and above to stderr, everything else to stdout.
    """
    global _listener
    _stop_listener()

    formatter = structlog.stdlib.ProcessorFormatter(**_formatter_kwargs(config))
    records: queue.Queue[logging.LogRecord] = queue.Queue()

    root = logging.getLogger()
    root.handlers[:] = [_EventDictQueueHandler(records)]
    root.setLevel(config.log_level)

    for name in list(logging.root.manager.loggerDict):
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.propagate = True
        logger.setLevel(_quiet_level(name) or config.log_level)

    _listener = QueueListener(
        records,
        _stream_handler(sys.stdout, formatter, errors=False),
        _stream_handler(sys.stderr, formatter, errors=True),
        respect_handler_level=True,
    )
    _listener.start()
    atexit.register(_stop_listener)


def configure_logging(config: AppConfig) -> dict[str, Any]:
    """Configure structlog and stdlib logging; returns the uvicorn dictConfig."""
    structlog.configure(
        processors=[
            _drop_color_message,
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    cfg = build_logging_config(config)
    logging.config.dictConfig(cfg)
    _route_through_queue(config)

    log.info(
        "logging_configured", log_format=config.log_format, log_level=config.log_level
    )
    return cfg
