"""Logging setup shared by the whole service."""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> None:
    """Configure the ``app`` logger hierarchy to write to stdout.

    Safe to call more than once; the handler is only attached the first time.
    """
    app_logger = logging.getLogger("app")
    app_logger.setLevel(level.upper())

    if not any(getattr(h, "_reporting_handler", False) for h in app_logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        handler._reporting_handler = True  # type: ignore[attr-defined]
        app_logger.addHandler(handler)

    # Composed queries are logged by the repository at DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``app`` namespace."""
    if name != "app" and not name.startswith("app."):
        name = f"app.{name}"
    return logging.getLogger(name)
