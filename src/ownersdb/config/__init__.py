"""
Configuration module for ownersdb.

Exports the main components for convenient imports.
"""

from .loader import load_config
from .schema import AppConfig, CacheConfig, LoggingConfig, OutputConfig

__all__ = [
    "load_config",
    "AppConfig",
    "CacheConfig",
    "LoggingConfig",
    "OutputConfig",
]
