"""
logging_config.py — Loguru setup for Visita360

Every module logs through logging.getLogger("visita360.*") or loguru's
logger directly; both end up in the same loguru sinks.

Business Rules:
- Production (APP_URL not on a local host) writes JSON lines to stdout
- Development writes a colored one-line format
- LOG_LEVEL sets the minimum level (default INFO)
- httpx, httpcore, uvicorn.access, sqlalchemy.engine and apscheduler stay at WARNING

Called by: visita360/main.py (lifespan startup), scripts/seed_sample_data.py
Depends on: environment (LOG_LEVEL, APP_URL)
"""

import logging
import os
import sys

from loguru import logger

_LOCAL_HOSTS = ("localhost", "127.0.0.1", "0.0.0.0")
_QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine", "apscheduler")
_DEV_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "{message}"
)


def _is_production(app_url: str) -> bool:
    return not any(host in app_url for host in _LOCAL_HOSTS)


def setup_logging() -> None:
    """Replace loguru's default sink and route stdlib logging into it."""
    logger.remove()

    level = os.getenv("LOG_LEVEL", "INFO").upper()
    production = _is_production(os.getenv("APP_URL", "http://localhost:8000"))

    if production:
        logger.add(sys.stdout, level=level, format="{message}", serialize=True)
    else:
        logger.add(sys.stdout, level=level, format=_DEV_FORMAT, colorize=True)

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info("Logging configured", level=level, production=production)


class _InterceptHandler(logging.Handler):
    """stdlib LogRecord → loguru, keeping the caller's location."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())
