"""
EventDesk Command Layer - Operation Outcome Contract
======================================================
Every mutating operation produces exactly one Outcome.

ACCEPTED -> the operation was applied.
REJECTED -> state unchanged, reason is mandatory.

Rules:
- Exactly one outcome per operation
- Outcome is immutable (frozen dataclass)
- REJECTED must contain reason (RejectionReason)
- ACCEPTED must NOT contain reason
- ACCEPTED may carry a value (new id, actual quantity, ...)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from core.commands.rejection import (
    CAPACITY_CODES,
    QUANTITY_CODES,
    ReasonCode,
    RejectionReason,
)
from core.errors import (
    CapacityError,
    EventDeskError,
    NotFoundError,
    ValidationError,
)


# ══════════════════════════════════════════════════════════════
# OPERATION STATUS
# ══════════════════════════════════════════════════════════════

class OperationStatus(Enum):
    """Binary decision. No middle ground."""
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


# ══════════════════════════════════════════════════════════════
# OPERATION OUTCOME
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class OperationOutcome:
    """
    Result of a core operation.

    Fields:
        status: ACCEPTED or REJECTED.
        reason: RejectionReason (mandatory if REJECTED, None if ACCEPTED).
        value:  Optional payload of an accepted operation.

    Invariants:
        - REJECTED + reason is None -> ValueError
        - ACCEPTED + reason is not None -> ValueError
    """

    status: OperationStatus
    reason: Optional[RejectionReason] = None
    value: Any = None

    def __post_init__(self):
        if not isinstance(self.status, OperationStatus):
            raise ValueError(
                f"status must be OperationStatus, got {type(self.status).__name__}."
            )

        if self.status == OperationStatus.REJECTED and self.reason is None:
            raise ValueError(
                "REJECTED outcome must include a RejectionReason. "
                "No silent rejections allowed."
            )

        if self.status == OperationStatus.ACCEPTED and self.reason is not None:
            raise ValueError(
                "ACCEPTED outcome must NOT include a RejectionReason."
            )

    @classmethod
    def accept(cls, value: Any = None) -> OperationOutcome:
        return cls(status=OperationStatus.ACCEPTED, value=value)

    @classmethod
    def reject(cls, code: str, message: str, policy_name: str) -> OperationOutcome:
        return cls(
            status=OperationStatus.REJECTED,
            reason=RejectionReason(
                code=code, message=message, policy_name=policy_name,
            ),
        )

    @classmethod
    def from_reason(cls, reason: RejectionReason) -> OperationOutcome:
        return cls(status=OperationStatus.REJECTED, reason=reason)

    @property
    def is_accepted(self) -> bool:
        return self.status == OperationStatus.ACCEPTED

    @property
    def is_rejected(self) -> bool:
        return self.status == OperationStatus.REJECTED

    @property
    def code(self) -> Optional[str]:
        return self.reason.code if self.reason else None

    def __bool__(self) -> bool:
        return self.is_accepted

    def raise_for_rejection(self) -> OperationOutcome:
        """
        Convert a rejection into the matching typed exception.

        Returns self when accepted, so calls can be chained.
        """
        if self.is_accepted:
            return self
        code = self.reason.code
        message = self.reason.message
        if code == ReasonCode.NOT_FOUND:
            raise NotFoundError(message)
        if code in CAPACITY_CODES:
            raise CapacityError(message, code=code)
        if code in QUANTITY_CODES:
            raise ValidationError("quantity", None, message)
        raise EventDeskError(message, code=code)
