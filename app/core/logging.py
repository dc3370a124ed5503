"""
➡️ But : Configurer les logs structurés (structlog) de toute l'application.

setup_logging() branche structlog sur le logging standard :

console lisible en dev, JSON en prod (LOG_FORMAT=json),

niveau pris dans settings.LOG_LEVEL.

Dans les modules :

logger = structlog.get_logger(__name__)
logger.info("roll_recorded", game_id=..., index=...)
"""

import logging
import sys
from typing import Optional

import structlog

from app.core.config import settings

_VALID_LOG_FORMATS = {"json", "console"}
_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _build_formatter(*, json_mode: bool, colors: bool = False) -> logging.Formatter:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_mode
        else structlog.dev.ConsoleRenderer(colors=colors)
    )
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )


def setup_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Configure structlog + le root logger stdlib.
    Lève ValueError si LOG_LEVEL / LOG_FORMAT sont invalides.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    if level_name not in _VALID_LOG_LEVELS:
        raise ValueError(f"Invalid LOG_LEVEL={level_name!r}")

    fmt = (log_format or settings.LOG_FORMAT).lower()
    if fmt not in _VALID_LOG_FORMATS:
        raise ValueError(f"Invalid LOG_FORMAT={fmt!r}. Must be 'json' or 'console'.")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level_name))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_build_formatter(json_mode=(fmt == "json"), colors=sys.stdout.isatty()))
    root_logger.addHandler(handler)

    # httpx (TestClient) log chaque requête
    logging.getLogger("httpx").setLevel(logging.WARNING)
