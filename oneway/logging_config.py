"""
Structured logging configuration for OneWay.

Provides JSON-formatted logs with a feature field for correlating records
emitted by containers, effects and the registry.

Environment Variables:
    ONEWAY_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR) - default: INFO
    ONEWAY_LOG_FORMAT: Log format (json, text) - default: json

Usage:
    from oneway.logging_config import setup_logging, get_logger

    setup_logging()
    logger = get_logger(__name__, feature="TodoFeature")
    logger.info("Committed state")
"""

import logging
import sys
from typing import Optional

from pythonjsonlogger import jsonlogger


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """
    Configure root logger with structured logging.

    Explicit arguments win over OneWayConfig.from_env() values:
    - level: DEBUG, INFO, WARNING, ERROR (default: INFO)
    - fmt: json, text (default: json)
    """
    from .config import OneWayConfig

    config = OneWayConfig.from_env()
    log_level = (level or config.log_level).upper()
    log_format = (fmt or config.log_format).lower()

    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    resolved = level_map.get(log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(resolved)
    handler.addFilter(FeatureFilter())

    if log_format == "json":
        formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s %(feature)s",
            rename_fields={
                "asctime": "timestamp",
                "name": "logger",
                "levelname": "level",
            },
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s [feature=%(feature)s]",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Silence noisy libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str, feature: Optional[str] = None) -> logging.LoggerAdapter:
    """
    Get a logger stamped with the feature id.

    Args:
        name: Logger name (typically __name__)
        feature: Feature id for correlating logs

    Returns:
        LoggerAdapter with feature in extra fields
    """
    logger = logging.getLogger(name)
    return logging.LoggerAdapter(logger, {"feature": feature or "N/A"})


class FeatureFilter(logging.Filter):
    """
    Logging filter that adds feature to all log records.

    Ensures every record has a feature field, even if not set via LoggerAdapter.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "feature"):
            record.feature = "N/A"  # type: ignore
        return True
