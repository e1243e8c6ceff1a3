"""structlog setup for the feed service.

Every record goes through the stdlib root handler so uvicorn, httpx and
our own loggers share one renderer. Range fetches bind their data type
and window with structlog.contextvars; those fields then appear on every
line logged while the fetch runs, including throttle and upstream lines.
"""

import logging
import os

import structlog

# httpx and httpcore announce each outbound request at INFO; a single
# range fetch can make hundreds of them.
_NOISY_LOGGERS = ("httpx", "httpcore")


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(log_level: str = "INFO", log_format: str | None = None) -> None:
    """Install the structlog pipeline on the root logger.

    ``log_format`` falls back to LOG_FORMAT, then to "console". Use
    "json" when the output is shipped somewhere.
    """
    log_format = (log_format or os.environ.get("LOG_FORMAT", "console")).lower()

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
