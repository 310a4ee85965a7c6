import logging
from logging.handlers import RotatingFileHandler

from .config import settings

__all__ = ["get_logger"]

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: str = "app") -> logging.Logger:
    """Return a configured logger. Safe to call multiple times (won't duplicate handlers).

    Configurable via environment variables:
    - LOG_LEVEL: default INFO
    - LOG_FILE: optional path to enable rotating file logging
    """
    root = logging.getLogger("app")

    if not root.handlers:
        root.setLevel(getattr(logging, settings.LOG_LEVEL, logging.INFO))
        fmt = logging.Formatter(LOG_FORMAT)

        sh = logging.StreamHandler()
        sh.setFormatter(fmt)
        root.addHandler(sh)

        if settings.LOG_FILE:
            try:
                fh = RotatingFileHandler(
                    settings.LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
                )
                fh.setFormatter(fmt)
                root.addHandler(fh)
            except OSError:
                # Keep console logging if the file can't be opened
                root.exception("Failed to create file log handler for %s", settings.LOG_FILE)

    # Module loggers ("app.services.x") propagate to the configured "app" logger
    return logging.getLogger(name)
