"""
EventDesk Command Layer - Outcomes
====================================
Every mutating operation produces exactly one Outcome.
REJECTED outcomes are first-class results, not exceptions.
"""

from core.commands.outcomes import (
    OperationOutcome,
    OperationStatus,
)
from core.commands.rejection import (
    CAPACITY_CODES,
    QUANTITY_CODES,
    ReasonCode,
    RejectionReason,
)

__all__ = [
    # ── Outcomes ──────────────────────────────────────────────
    "OperationOutcome",
    "OperationStatus",
    # ── Rejection ─────────────────────────────────────────────
    "RejectionReason",
    "ReasonCode",
    "CAPACITY_CODES",
    "QUANTITY_CODES",
]
