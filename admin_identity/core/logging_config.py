import logging
import sys

from admin_identity.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Install one stream handler on the package logger (idempotent)."""
    logger = logging.getLogger("admin_identity")
    logger.setLevel((level or settings.LOG_LEVEL).upper())

    if not any(getattr(h, "_admin_identity", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._admin_identity = True
        logger.addHandler(handler)
