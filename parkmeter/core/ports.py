"""Port interfaces for the parkmeter allocation engine.

These abstract base classes define the boundaries between core
domain logic and external adapters. Implementations live in the
adapters/ package (and in core for the driving port).

Port Interface Categories:

1. **Driven Ports** (core calls out to adapters)
   - SettlementPort: Collect a computed fee
   - ClockPort: Current time for admission and release stamps

2. **Driving Ports** (drivers call into core)
   - AllocationPort: Slot construction, admission, release, status
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal

from .models import (
    Confirmation,
    DemandUnit,
    Handle,
    PoolStats,
    Receipt,
    SlotClass,
    SlotView,
)


# ============================================================================
# DRIVEN PORTS (Core calls out to adapters)
# ============================================================================


class SettlementPort(ABC):
    """Port for collecting payment of a fee.

    Adapters implementing this port finalize payment through some backend
    (credit card, PayPal, crypto wallet, ...). The pool never inspects
    which backend it used beyond success or failure.
    """

    @abstractmethod
    def settle(self, amount: Decimal) -> Confirmation:
        """Collect payment of a fee.

        Args:
            amount: Fee to collect, in currency units.

        Returns:
            Confirmation tagged with the backend name.

        Raises:
            SettlementFailure: If the backend declines the payment.
        """


class ClockPort(ABC):
    """Port for reading the current time.

    Injected so tests can simulate elapsed duration without real delays.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time as a timezone-aware datetime."""


# ============================================================================
# DRIVING PORTS (Drivers call into core)
# ============================================================================


class AllocationPort(ABC):
    """Port for admitting and releasing demand units.

    Driving port: the CLI driver (or any other caller) invokes these
    methods. Implementations must be safe to call from multiple threads.
    """

    @abstractmethod
    def add_slot(self, slot_class: SlotClass) -> int:
        """Append a new empty slot to the search order.

        Returns:
            The new slot's id.
        """

    @abstractmethod
    def admit(self, unit: DemandUnit) -> Handle:
        """Bind the unit to the first empty slot whose class fits it.

        Raises:
            NoCapacity: If no slot qualifies. Never waits.
        """

    @abstractmethod
    def release(self, handle: Handle, sink: SettlementPort) -> Receipt:
        """Bill the occupancy named by the handle and free its slot.

        The slot is freed only after the sink confirms payment.

        Raises:
            AlreadyEmpty: If the slot is empty or the handle is stale.
            SettlementFailure: If the sink fails; the slot stays occupied.
            ValueError: If the handle names a slot this pool does not own.
        """

    @abstractmethod
    def get_slot(self, slot_id: int) -> SlotView:
        """Snapshot a single slot.

        Raises:
            ValueError: If the slot does not exist.
        """

    @abstractmethod
    def slots(self) -> tuple[SlotView, ...]:
        """Snapshot all slots in search order."""

    @abstractmethod
    def stats(self) -> PoolStats:
        """Aggregate occupancy and revenue statistics."""
