"""
EventDesk Command Layer - Rejection Model
===========================================
Structured rejection reasons for denied operations.

Every rejection must be:
- Deterministic (same input -> same rejection)
- Machine-readable (code)
- Human-readable (message)
- Attributable (policy_name)
"""

from __future__ import annotations

from dataclasses import dataclass


# ══════════════════════════════════════════════════════════════
# REJECTION REASON (frozen explanation structure)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for an operation rejection.

    Fields:
        code:        Machine-readable rejection code (e.g. 'INSUFFICIENT_AVAILABLE').
        message:     Human-readable explanation.
        policy_name: Name of the rule that caused the rejection.
    """

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
        }


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Known rejection codes.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Lookup ────────────────────────────────────────────────
    NOT_FOUND = "NOT_FOUND"

    # ── Quantity / capacity ───────────────────────────────────
    INVALID_QUANTITY = "INVALID_QUANTITY"
    NEGATIVE_QUANTITY = "NEGATIVE_QUANTITY"
    INSUFFICIENT_AVAILABLE = "INSUFFICIENT_AVAILABLE"
    OVER_DEALLOCATION = "OVER_DEALLOCATION"
    BELOW_ALLOCATED = "BELOW_ALLOCATED"
    NOTHING_ALLOCATED = "NOTHING_ALLOCATED"

    # ── Registration ──────────────────────────────────────────
    REGISTRATION_CLOSED = "REGISTRATION_CLOSED"
    DUPLICATE_REGISTRATION = "DUPLICATE_REGISTRATION"
    NOT_REGISTERED = "NOT_REGISTERED"
    ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"

    # ── Accounts ──────────────────────────────────────────────
    PERMISSION_DENIED = "PERMISSION_DENIED"
    USERNAME_TAKEN = "USERNAME_TAKEN"
    PASSWORD_TOO_SHORT = "PASSWORD_TOO_SHORT"
    SELF_DELETION = "SELF_DELETION"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"


CAPACITY_CODES = frozenset({
    ReasonCode.INSUFFICIENT_AVAILABLE,
    ReasonCode.OVER_DEALLOCATION,
    ReasonCode.BELOW_ALLOCATED,
    ReasonCode.NOTHING_ALLOCATED,
})

QUANTITY_CODES = frozenset({
    ReasonCode.INVALID_QUANTITY,
    ReasonCode.NEGATIVE_QUANTITY,
})
