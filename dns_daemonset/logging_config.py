"""Logging configuration for the DNS DaemonSet reconciler."""

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for different log levels."""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        if sys.stderr.isatty():  # Only use colors for terminal output
            record = logging.makeLogRecord(record.__dict__)
            log_color = self.COLORS.get(record.levelname, '')
            record.levelname = f"{log_color}{record.levelname}{self.RESET}"
            record.name = f"\033[34m{record.name}{self.RESET}"  # Blue for logger name

        return super().format(record)


def setup_logging(log_level: Optional[str] = None) -> None:
    """Setup centralized logging configuration for the reconciler and its scripts."""

    if log_level is None:
        log_level = os.getenv("LOG_LEVEL", "INFO")

    # Logs go to stderr so that rendered manifests on stdout stay parseable
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stderr)
        ],
        force=True,
    )

    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        if isinstance(handler, logging.StreamHandler):
            handler.setFormatter(ColoredFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    configure_package_loggers()
    configure_external_loggers()


def configure_package_loggers() -> None:
    """Configure logging for the reconciler's own modules."""
    package_level = os.getenv("DNS_LOG_LEVEL")
    if not package_level:
        return

    package_loggers = [
        'dns_daemonset',
        'dns_daemonset.synthesizer',
        'dns_daemonset.drift_analyzer',
        'scripts',
    ]

    for logger_name in package_loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(getattr(logging, package_level.upper(), logging.INFO))


def configure_external_loggers() -> None:
    """Configure logging levels for external libraries."""
    external_loggers = {
        'kubernetes': logging.WARNING,
        'urllib3': logging.WARNING,
        'asyncio': logging.WARNING,
    }

    for logger_name, level in external_loggers.items():
        logging.getLogger(logger_name).setLevel(level)


def get_script_logger(script_name: str) -> logging.Logger:
    """Get a properly configured logger for a tooling script."""
    return logging.getLogger(f"scripts.{script_name}")
