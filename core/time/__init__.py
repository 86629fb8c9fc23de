"""
EventDesk Core Time - Public API
==================================
Schedule field validation for event dates and times.
"""

from core.time.temporal import (
    MAX_YEAR,
    MIN_YEAR,
    is_valid_date,
    is_valid_time,
    require_valid_date,
    require_valid_time,
)

__all__ = [
    "MIN_YEAR",
    "MAX_YEAR",
    "is_valid_date",
    "is_valid_time",
    "require_valid_date",
    "require_valid_time",
]
