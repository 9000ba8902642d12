"""
Logging module - structured logging with a HUMAN progress level.
"""

from .human import HumanBoundLogger, HumanFormatter, HumanLog, HumanLogHandler
from .levels import HUMAN
from .setup import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "HUMAN",
    "HumanBoundLogger",
    "HumanFormatter",
    "HumanLog",
    "HumanLogHandler",
]
