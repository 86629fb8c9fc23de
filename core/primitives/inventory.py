"""
EventDesk Inventory Primitive - Shared Stock Record
=====================================================
An InventoryItem is shared stock that events reserve quantities from.

RULES (NON-NEGOTIABLE):
- Quantities are integers
- 0 <= allocated_quantity <= total_quantity, always
- A rejected operation leaves the item unchanged
- Rejections are returned as outcomes, never raised
- Items are never deleted

allocated_quantity is a cache of the events' allocation ledgers.
The repository recomputes it from the events on every load.

This file contains NO persistence logic.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.commands.outcomes import OperationOutcome
from core.commands.rejection import ReasonCode


@dataclass
class InventoryItem:
    """
    Mutable stock record.

    Fields:
        item_id:            Unique, monotonic id
        name:               Display name
        total_quantity:     Units owned (>= 0)
        allocated_quantity: Units reserved by events
        description:        Free text (may contain commas)
    """
    item_id: int
    name: str
    total_quantity: int
    allocated_quantity: int = 0
    description: str = ""

    @property
    def available_quantity(self) -> int:
        return self.total_quantity - self.allocated_quantity

    def allocate(self, quantity: int) -> OperationOutcome:
        """Reserve `quantity` units if that many are available."""
        if quantity <= 0:
            return OperationOutcome.reject(
                ReasonCode.INVALID_QUANTITY,
                f"Allocation quantity must be positive, got {quantity}.",
                "InventoryItem.allocate",
            )
        if quantity > self.available_quantity:
            return OperationOutcome.reject(
                ReasonCode.INSUFFICIENT_AVAILABLE,
                f"Not enough '{self.name}' available: "
                f"{self.available_quantity} available, {quantity} requested.",
                "InventoryItem.allocate",
            )
        self.allocated_quantity += quantity
        return OperationOutcome.accept(quantity)

    def deallocate(self, quantity: int) -> OperationOutcome:
        """Return `quantity` reserved units to the available pool."""
        if quantity <= 0:
            return OperationOutcome.reject(
                ReasonCode.INVALID_QUANTITY,
                f"Deallocation quantity must be positive, got {quantity}.",
                "InventoryItem.deallocate",
            )
        if quantity > self.allocated_quantity:
            return OperationOutcome.reject(
                ReasonCode.OVER_DEALLOCATION,
                f"Cannot deallocate {quantity} of '{self.name}': "
                f"only {self.allocated_quantity} allocated.",
                "InventoryItem.deallocate",
            )
        self.allocated_quantity -= quantity
        return OperationOutcome.accept(quantity)

    def set_total_quantity(self, new_total: int) -> OperationOutcome:
        if new_total < 0:
            return OperationOutcome.reject(
                ReasonCode.NEGATIVE_QUANTITY,
                f"Total quantity cannot be negative, got {new_total}.",
                "InventoryItem.set_total_quantity",
            )
        if new_total < self.allocated_quantity:
            return OperationOutcome.reject(
                ReasonCode.BELOW_ALLOCATED,
                f"New total quantity ({new_total}) cannot be less than "
                f"allocated ({self.allocated_quantity}).",
                "InventoryItem.set_total_quantity",
            )
        self.total_quantity = new_total
        return OperationOutcome.accept(new_total)

    def to_dict(self) -> dict:
        return {
            "item_id": self.item_id,
            "name": self.name,
            "total_quantity": self.total_quantity,
            "allocated_quantity": self.allocated_quantity,
            "available_quantity": self.available_quantity,
            "description": self.description,
        }
