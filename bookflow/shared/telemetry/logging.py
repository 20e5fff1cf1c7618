"""Process logging for the workflow engine."""

import logging
import sys

from bookflow.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Client libraries that log every request at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine")


def setup_logging() -> None:
    """Send logs to stdout at DEBUG (settings.debug) or INFO.

    Step attempts and run outcomes are logged at INFO/WARNING, so the
    default level is enough to audit workflow runs.
    """
    settings = get_settings()
    level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    if not settings.debug:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger(__name__).info(
        "%s %s logging at %s", settings.app_name, settings.app_version, logging.getLevelName(level)
    )


def get_logger(name: str) -> logging.Logger:
    """Module logger; call with __name__."""
    return logging.getLogger(name)
