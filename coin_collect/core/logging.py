import logging
import sys

import structlog

# Driver loggers that flood DEBUG output with per-statement and per-chunk lines.
_QUIET_LOGGERS = ("aiosqlite", "PIL", "asyncio")


def configure_logging(log_level: str = "INFO", *, app_env: str = "dev") -> None:
    """Route structlog through stdlib logging.

    Local development gets the console renderer; any other environment emits
    one JSON object per line.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    renderer = (
        structlog.dev.ConsoleRenderer()
        if app_env == "dev"
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
