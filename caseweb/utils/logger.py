"""
Logging setup for caseweb.

All output goes through loguru. Records emitted by uvicorn, SQLAlchemy and httpx
through the standard ``logging`` module are forwarded to the same sinks.
"""

import inspect
import logging
import sys
from pathlib import Path

from loguru import logger as _logger

from ..settings import Settings, settings

INTERCEPTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi", "sqlalchemy")

# httpx logs every storage request at INFO
QUIET_LOGGERS = ("httpx", "httpcore")

DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Forward standard library log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        level: str | int
        try:
            level = _logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging internals so loguru reports the original caller
        frame, depth = inspect.currentframe(), 0
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        _logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(config: Settings, log_file: Path | None = None) -> None:
    """
    Configure the console sink and, when enabled, a rotating file sink.

    Args:
        config: Settings providing level, format and file rotation options
        log_file: File sink path; defaults to ``caseweb.log`` in the log directory
    """
    format = config.log_format or DEFAULT_FORMAT

    _logger.remove()
    _logger.add(
        sys.stderr,
        level=config.log_level,
        format=format,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if config.log_to_file:
        log_path = log_file or config.get_log_dir() / "caseweb.log"
        log_path.parent.mkdir(parents=True, exist_ok=True)
        _logger.add(
            str(log_path),
            level=config.log_level,
            format=format,
            rotation=config.log_rotation,
            retention=config.log_retention,
            compression="zip",
            backtrace=True,
            diagnose=False,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in INTERCEPTED_LOGGERS:
        logging.getLogger(name).handlers = [InterceptHandler()]
    for name in QUIET_LOGGERS:
        quiet = logging.getLogger(name)
        quiet.handlers = [InterceptHandler()]
        quiet.setLevel(logging.WARNING)


setup_logging(settings)

logger = _logger
