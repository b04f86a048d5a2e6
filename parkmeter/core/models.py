"""Domain models for the parkmeter allocation engine.

All models in this module use only Python standard library types,
ensuring zero external dependencies in the core domain.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import TypeAlias


class VehicleCategory(Enum):
    """Billing category of a demand unit."""

    BIKE = "bike"
    CAR = "car"
    TRUCK = "truck"


@dataclass(frozen=True)
class DemandUnit:
    """A classified request for a slot (a vehicle).

    Size classes are totally ordered starting at 1; whether a slot can
    host the unit is decided by the slot class, not by this record.
    """

    category: VehicleCategory
    size_class: int

    def __post_init__(self) -> None:
        """Validate demand unit invariants on creation."""
        if self.size_class < 1:
            raise ValueError(
                f"size_class must be >= 1, got {self.size_class}"
            )


FitPredicate: TypeAlias = Callable[[int], bool]


@dataclass(frozen=True)
class SlotClass:
    """A kind of slot and the sizes it can host."""

    name: str
    fits: FitPredicate

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("name must be a non-empty string")

    def accepts(self, unit: DemandUnit) -> bool:
        """Can a slot of this class host the given unit?"""
        return self.fits(unit.size_class)


SMALL = SlotClass("small", lambda size: size == 1)
MEDIUM = SlotClass("medium", lambda size: size <= 2)
LARGE = SlotClass("large", lambda size: True)

_SLOT_CLASSES: dict[str, SlotClass] = {
    cls.name: cls for cls in (SMALL, MEDIUM, LARGE)
}


def register_slot_class(slot_class: SlotClass) -> SlotClass:
    """Add a slot class to the registry so it can be looked up by name.

    Args:
        slot_class: The class to register.

    Returns:
        The registered slot class.

    Raises:
        ValueError: If a class with the same name is already registered.
    """
    key = slot_class.name.strip().lower()
    if key in _SLOT_CLASSES:
        raise ValueError(f"Slot class {slot_class.name!r} is already registered")
    _SLOT_CLASSES[key] = slot_class
    return slot_class


def get_slot_class(name: str) -> SlotClass:
    """Look up a registered slot class by name (case-insensitive)."""
    try:
        return _SLOT_CLASSES[name.strip().lower()]
    except KeyError:
        known = ", ".join(cls.name for cls in registered_slot_classes())
        raise ValueError(f"Unknown slot class: {name!r} (registered: {known})") from None


def registered_slot_classes() -> tuple[SlotClass, ...]:
    """All registered slot classes in registration order."""
    return tuple(_SLOT_CLASSES.values())


@dataclass
class Slot:
    """A single allocatable unit owned by an allocation pool.

    State Transitions:
        - Empty → Occupied (occupy)
        - Occupied → Empty (vacate)

    Note: This dataclass is intentionally mutable; the owning pool is the
    only writer and serializes all changes under its lock.
    """

    id: int
    slot_class: SlotClass
    occupant: DemandUnit | None = None
    admitted_at: datetime | None = None
    ticket: str | None = None

    def __post_init__(self) -> None:
        """Validate slot invariants on creation."""
        if self.id < 1:
            raise ValueError(f"id must be >= 1, got {self.id}")
        self._check_consistency()

    @property
    def is_occupied(self) -> bool:
        return self.occupant is not None

    def can_host(self, unit: DemandUnit) -> bool:
        """Is this slot empty and of a class that fits the unit?"""
        return not self.is_occupied and self.slot_class.accepts(unit)

    def occupy(self, unit: DemandUnit, admitted_at: datetime, ticket: str) -> None:
        """Transition slot to occupied."""
        if self.is_occupied:
            raise ValueError(f"Slot {self.id} is already occupied")
        if not self.slot_class.accepts(unit):
            raise ValueError(
                f"Slot {self.id} ({self.slot_class.name}) cannot host "
                f"size class {unit.size_class}"
            )
        self.occupant = unit
        self.admitted_at = admitted_at
        self.ticket = ticket

    def vacate(self) -> None:
        """Transition slot back to empty."""
        if not self.is_occupied:
            raise ValueError(f"Slot {self.id} is already empty")
        self.occupant = None
        self.admitted_at = None
        self.ticket = None

    def _check_consistency(self) -> None:
        states = {
            self.occupant is None,
            self.admitted_at is None,
            self.ticket is None,
        }
        if len(states) != 1:
            raise ValueError(
                "occupant, admitted_at and ticket must be set or cleared together"
            )


@dataclass(frozen=True)
class Handle:
    """Proof of a successful admission, used to request release.

    The ticket is unique per admission; once the slot is released the
    handle is stale and cannot release or bill again.
    """

    slot_id: int
    unit: DemandUnit
    ticket: str
    admitted_at: datetime


@dataclass(frozen=True)
class Confirmation:
    """Structured result of a successful settlement."""

    backend: str  # e.g. "credit_card"
    amount: Decimal
    reference: str
    settled_at: datetime


@dataclass(frozen=True)
class Receipt:
    """Summary of a completed release."""

    slot_id: int
    unit: DemandUnit
    fee: Decimal
    elapsed: timedelta
    confirmation: Confirmation


@dataclass(frozen=True)
class SlotView:
    """Read-only snapshot of a slot."""

    slot_id: int
    slot_class: str
    occupant: DemandUnit | None
    admitted_at: datetime | None

    @property
    def is_occupied(self) -> bool:
        return self.occupant is not None


@dataclass(frozen=True)
class ClassOccupancy:
    """Slot counts for one slot class."""

    total: int
    occupied: int

    @property
    def available(self) -> int:
        return self.total - self.occupied


@dataclass(frozen=True)
class PoolStats:
    """Aggregate statistics about an allocation pool."""

    total_slots: int
    occupied_slots: int
    by_class: Mapping[str, ClassOccupancy]  # class name -> counts (immutable at runtime)
    sessions_completed: int
    revenue: Decimal

    def __post_init__(self) -> None:
        """Convert mutable dict to immutable proxy."""
        object.__setattr__(self, "by_class", MappingProxyType(dict(self.by_class)))

    @property
    def available_slots(self) -> int:
        return self.total_slots - self.occupied_slots
