"""Error taxonomy for the parkmeter core.

None of these errors is fatal to a pool: every failure path leaves slot
occupancy exactly as it was. Retry policy belongs to the caller.
"""

from decimal import Decimal


class ParkingError(Exception):
    """Base class for all parkmeter domain errors."""


class UnknownCategory(ParkingError, ValueError):
    """A label could not be classified into a demand unit."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"Unknown vehicle type: {label!r}")


class NoCapacity(ParkingError):
    """No empty slot can host the unit.

    Attributes:
        size_class: Size class of the rejected unit.
        fitting_slots_exist: False when the pool has no slot of any class
            that fits this size at all (as opposed to all being full).
    """

    def __init__(self, size_class: int, fitting_slots_exist: bool):
        self.size_class = size_class
        self.fitting_slots_exist = fitting_slots_exist
        reason = "all fitting slots are occupied" if fitting_slots_exist else "no slot fits this size"
        super().__init__(f"No capacity for size class {size_class}: {reason}")


class ReleaseError(ParkingError):
    """Base class for errors raised when releasing a slot."""


class AlreadyEmpty(ReleaseError):
    """The slot is unoccupied or the handle no longer matches its occupant."""

    def __init__(self, slot_id: int, stale: bool = False):
        self.slot_id = slot_id
        self.stale = stale
        if stale:
            message = f"Handle for slot {slot_id} is stale"
        else:
            message = f"Slot {slot_id} is already empty"
        super().__init__(message)


class SettlementFailure(ReleaseError):
    """The settlement backend declined or failed to collect a fee.

    The slot stays occupied; the caller may retry with the same or a
    different backend.
    """

    def __init__(self, message: str, amount: Decimal | None = None, backend: str | None = None):
        self.amount = amount
        self.backend = backend
        super().__init__(message)
