"""core.logging_config

Logging setup for *recipe_bridge*.

Modules log through ``logging.getLogger(__name__)``; this helper only wires a
handler onto the package logger for applications that do not configure
logging themselves.

Environment Variables:
- LOG_LEVEL: DEBUG, INFO, WARNING or ERROR [default: INFO]
"""

from __future__ import annotations

import logging
import os

PACKAGE_LOGGER = 'recipe_bridge'
LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


def get_log_level(default: str = 'INFO') -> int:
    """Resolve ``LOG_LEVEL`` to a numeric level, falling back to *default*."""
    name = os.getenv('LOG_LEVEL', default).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.getLevelName(default.upper())


def configure_logging(level: int | str | None = None) -> logging.Logger:
    """Attach one stream handler to the package logger. Safe to call twice."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level if isinstance(level, int) else get_log_level())

    if not any(getattr(h, '_recipe_bridge', False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._recipe_bridge = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
