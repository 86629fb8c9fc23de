"""
EventDesk Core Config - Public API
====================================
Runtime settings (data directory, file names, logging).
"""

from core.config.settings import (
    DEFAULT_EXPORT_NAMES,
    DEFAULT_FILE_NAMES,
    StorageSettings,
)

__all__ = [
    "DEFAULT_EXPORT_NAMES",
    "DEFAULT_FILE_NAMES",
    "StorageSettings",
]
