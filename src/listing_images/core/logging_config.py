"""Logging setup for the listing images CLI and pipeline."""

import os
import sys
import logging
from typing import Optional

ROOT_LOGGER = "listing-images"

FORMATS = {
    "structured": (
        "%(asctime)s | %(name)s | %(levelname)-8s | "
        "%(filename)s:%(lineno)d | %(funcName)s() | %(message)s"
    ),
    "simple": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}


def _env(name: str, default: str) -> str:
    return os.getenv(f"LISTING_IMAGES_{name}") or os.getenv(name) or default


def setup_logger(
    name: str = ROOT_LOGGER,
    level: Optional[str] = None,
    format_type: str = "structured",
) -> logging.Logger:
    """
    Configure a logger from arguments and the environment.

    Log lines go to stderr so that command output on stdout (``classify``)
    stays machine readable.

    Args:
        name: Logger name (defaults to "listing-images")
        level: Log level override (defaults to env var or INFO)
        format_type: Logging format ("structured" or "simple")

    Returns:
        Configured logger instance

    Environment Variables:
        LISTING_IMAGES_LOG_LEVEL / LOG_LEVEL: DEBUG, INFO, WARNING, ERROR
        LISTING_IMAGES_LOG_FORMAT / LOG_FORMAT: "structured" or "simple"
    """
    logger = logging.getLogger(name)

    requested = (level or _env("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, requested, None)
    logger.setLevel(log_level if isinstance(log_level, int) else logging.INFO)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        format_name = _env("LOG_FORMAT", format_type).lower()
        handler.setFormatter(
            logging.Formatter(
                FORMATS.get(format_name, FORMATS["simple"]), datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """
    Logger for one part of the pipeline, named under ``listing-images``.

    ``get_logger("processor")`` returns ``listing-images.processor``.
    """
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return setup_logger(name)


def set_debug_logging(logger: logging.Logger) -> None:
    """Switch a logger and the root logger to DEBUG (used by ``--debug``)."""
    logger.setLevel(logging.DEBUG)
    logging.getLogger().setLevel(logging.DEBUG)


# Create default logger instance
logger = setup_logger()
