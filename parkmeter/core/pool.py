"""Allocation pool: implements AllocationPort over an ordered set of slots.

This is the core service that binds demand units to slots, tracks how
long each slot is held, and collects the fee on release through a
settlement port.

Concurrency model:
- A single pool lock serializes the admission scan-and-mark and every
  change to slot occupancy, so two admissions never pick the same slot.
- Each slot also has a release lock. A release holds it for the whole
  bill-settle-free sequence while calling the sink outside the pool
  lock; the slot stays occupied during settlement, so admissions skip
  it and other slots are never held up by a slow backend.
"""

import logging
import threading
import uuid
from collections import Counter
from datetime import timedelta
from decimal import Decimal

from .billing import FeeCalculator
from .clock import SystemClock
from .errors import AlreadyEmpty, NoCapacity, SettlementFailure
from .models import (
    ClassOccupancy,
    DemandUnit,
    Handle,
    PoolStats,
    Receipt,
    Slot,
    SlotClass,
    SlotView,
)
from .ports import AllocationPort, ClockPort, SettlementPort

logger = logging.getLogger(__name__)


class AllocationPool(AllocationPort):
    """Core implementation of AllocationPort.

    Admission is first-fit in slot construction order: the first empty
    slot whose class accepts the unit wins. This is not optimal packing,
    but the tie-break is reproducible.

    Each admission scans every slot. Bucketing slots by class would avoid
    the full scan for large pools without changing the contract.
    """

    def __init__(
        self,
        fee_calculator: FeeCalculator | None = None,
        clock: ClockPort | None = None,
    ):
        """Initialize an empty pool.

        Args:
            fee_calculator: Fee policy applied on release. Defaults to
                FeeCalculator() with the standard rate table.
            clock: Time source for admission and release stamps. Defaults
                to SystemClock().
        """
        self.fee_calculator = fee_calculator or FeeCalculator()
        self.clock = clock or SystemClock()
        self._lock = threading.Lock()
        self._slots: list[Slot] = []
        self._release_locks: list[threading.Lock] = []
        self._sessions_completed = 0
        self._revenue = Decimal("0.00")

    def add_slot(self, slot_class: SlotClass) -> int:
        """Append a new empty slot; existing slots never move."""
        with self._lock:
            slot = Slot(id=len(self._slots) + 1, slot_class=slot_class)
            self._slots.append(slot)
            self._release_locks.append(threading.Lock())

        logger.debug(f"Added slot {slot.id} ({slot_class.name})")
        return slot.id

    def admit(self, unit: DemandUnit) -> Handle:
        """Occupy the first empty slot that fits the unit.

        Raises:
            NoCapacity: If no empty slot fits. Returned immediately; the
                pool never queues arrivals.
        """
        with self._lock:
            slot = next((s for s in self._slots if s.can_host(unit)), None)
            if slot is None:
                fitting_exists = any(s.slot_class.accepts(unit) for s in self._slots)
                error = NoCapacity(unit.size_class, fitting_slots_exist=fitting_exists)
            else:
                admitted_at = self.clock.now()
                ticket = uuid.uuid4().hex
                slot.occupy(unit, admitted_at, ticket)
                error = None

        if error is not None:
            logger.warning(
                f"No capacity for {unit.category.value}",
                extra={
                    "size_class": unit.size_class,
                    "fitting_slots_exist": error.fitting_slots_exist,
                },
            )
            raise error

        logger.info(
            f"{unit.category.value} admitted to slot {slot.id}",
            extra={
                "slot_id": slot.id,
                "slot_class": slot.slot_class.name,
                "ticket": ticket,
            },
        )
        return Handle(slot_id=slot.id, unit=unit, ticket=ticket, admitted_at=admitted_at)

    def release(self, handle: Handle, sink: SettlementPort) -> Receipt:
        """Bill the occupancy, settle the fee, then free the slot.

        Raises:
            ValueError: If the handle names a slot this pool does not own.
            AlreadyEmpty: If the slot is empty or the handle is stale.
            SettlementFailure: If the sink fails. The slot stays occupied.
        """
        slot, release_lock = self._lookup(handle.slot_id)

        with release_lock:
            with self._lock:
                self._check_handle(slot, handle)
                admitted_at = slot.admitted_at
                unit = slot.occupant
                now = self.clock.now()

            elapsed = now - admitted_at
            if elapsed < timedelta(0):
                logger.warning(
                    f"Clock went backwards for slot {slot.id}; billing as zero elapsed",
                    extra={"slot_id": slot.id, "elapsed": str(elapsed)},
                )
                elapsed = timedelta(0)

            fee = self.fee_calculator.compute_fee(unit.category, elapsed)

            try:
                confirmation = sink.settle(fee)
            except SettlementFailure as e:
                logger.warning(
                    f"Settlement declined for slot {slot.id}: {e}",
                    extra={"slot_id": slot.id, "fee": str(fee)},
                )
                raise
            except Exception as e:
                logger.error(
                    f"Settlement backend error for slot {slot.id}: {e}",
                    exc_info=True,
                )
                raise SettlementFailure(
                    f"Settlement backend error: {e}", amount=fee
                ) from e

            with self._lock:
                slot.vacate()
                self._sessions_completed += 1
                self._revenue += fee

        logger.info(
            f"{unit.category.value} released from slot {slot.id}",
            extra={
                "slot_id": slot.id,
                "fee": str(fee),
                "elapsed_seconds": elapsed.total_seconds(),
                "backend": confirmation.backend,
            },
        )
        return Receipt(
            slot_id=slot.id,
            unit=unit,
            fee=fee,
            elapsed=elapsed,
            confirmation=confirmation,
        )

    def get_slot(self, slot_id: int) -> SlotView:
        slot, _ = self._lookup(slot_id)
        with self._lock:
            return self._view(slot)

    def slots(self) -> tuple[SlotView, ...]:
        with self._lock:
            return tuple(self._view(slot) for slot in self._slots)

    def stats(self) -> PoolStats:
        with self._lock:
            totals = Counter(slot.slot_class.name for slot in self._slots)
            occupied = Counter(
                slot.slot_class.name for slot in self._slots if slot.is_occupied
            )
            return PoolStats(
                total_slots=len(self._slots),
                occupied_slots=sum(occupied.values()),
                by_class={
                    name: ClassOccupancy(total=count, occupied=occupied[name])
                    for name, count in totals.items()
                },
                sessions_completed=self._sessions_completed,
                revenue=self._revenue,
            )

    def _lookup(self, slot_id: int) -> tuple[Slot, threading.Lock]:
        with self._lock:
            if not 1 <= slot_id <= len(self._slots):
                raise ValueError(f"Slot {slot_id} not found")
            index = slot_id - 1
            return self._slots[index], self._release_locks[index]

    @staticmethod
    def _check_handle(slot: Slot, handle: Handle) -> None:
        """Guard clause for release; caller holds the pool lock."""
        if not slot.is_occupied:
            logger.warning(f"Release requested for empty slot {slot.id}")
            raise AlreadyEmpty(slot.id)
        if slot.ticket != handle.ticket:
            logger.warning(
                f"Stale handle for slot {slot.id}",
                extra={"slot_id": slot.id, "ticket": handle.ticket},
            )
            raise AlreadyEmpty(slot.id, stale=True)

    @staticmethod
    def _view(slot: Slot) -> SlotView:
        return SlotView(
            slot_id=slot.id,
            slot_class=slot.slot_class.name,
            occupant=slot.occupant,
            admitted_at=slot.admitted_at,
        )
