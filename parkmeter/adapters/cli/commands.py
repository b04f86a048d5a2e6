"""CLI command implementations for the parking demo driver.

This adapter maps CLI commands (park, leave, status, slots) to
AllocationPort operations. It keeps the handles issued at admission,
keyed by ticket, so users can refer to a stay by its ticket string.
"""

import logging
import threading
from typing import Any

from parkmeter.core.classification import classify
from parkmeter.core.errors import NoCapacity, ParkingError, UnknownCategory
from parkmeter.core.models import Handle
from parkmeter.core.ports import AllocationPort, SettlementPort

logger = logging.getLogger(__name__)


class CLICommandHandler:
    """Handles CLI commands by delegating to AllocationPort.

    Every command returns a dictionary with a "status" of "success" or
    "error"; domain errors never escape as exceptions.
    """

    def __init__(self, allocation: AllocationPort, settlement: SettlementPort):
        """Initialize the CLI command handler.

        Args:
            allocation: AllocationPort implementation to execute commands.
            settlement: Settlement backend used when a vehicle leaves.
        """
        self.allocation = allocation
        self.settlement = settlement
        self._handles: dict[str, Handle] = {}
        self._lock = threading.Lock()

    def park(self, label: str, verbose: bool = False) -> dict[str, Any]:
        """Classify a vehicle label and admit it to the pool."""
        try:
            unit = classify(label)
            handle = self.allocation.admit(unit)
        except UnknownCategory as e:
            logger.error(f"Failed to park vehicle: {e}")
            return {"status": "error", "operation": "park", "message": str(e)}
        except NoCapacity as e:
            return {
                "status": "error",
                "operation": "park",
                "message": f"No spot available for {label}",
                "fitting_slots_exist": e.fitting_slots_exist,
            }

        with self._lock:
            self._handles[handle.ticket] = handle

        result = {
            "status": "success",
            "operation": "park",
            "ticket": handle.ticket,
            "slot_id": handle.slot_id,
            "message": f"{unit.category.value} parked at spot {handle.slot_id}",
        }
        if verbose:
            result["admitted_at"] = handle.admitted_at.isoformat()
            result["size_class"] = unit.size_class
        return result

    def leave(
        self,
        ticket: str,
        settlement: SettlementPort | None = None,
    ) -> dict[str, Any]:
        """Release the stay named by a ticket and collect the fee.

        Args:
            ticket: Ticket returned by park.
            settlement: Backend for this payment only. Defaults to the
                handler's configured backend.
        """
        with self._lock:
            handle = self._handles.get(ticket)
        if handle is None:
            return {
                "status": "error",
                "operation": "leave",
                "ticket": ticket,
                "message": f"Unknown ticket {ticket}",
            }

        try:
            receipt = self.allocation.release(handle, settlement or self.settlement)
        except ParkingError as e:
            logger.error(f"Failed to release ticket {ticket}: {e}")
            return {
                "status": "error",
                "operation": "leave",
                "ticket": ticket,
                "message": str(e),
            }

        with self._lock:
            self._handles.pop(ticket, None)

        return {
            "status": "success",
            "operation": "leave",
            "ticket": ticket,
            "slot_id": receipt.slot_id,
            "fee": str(receipt.fee),
            "elapsed_seconds": receipt.elapsed.total_seconds(),
            "backend": receipt.confirmation.backend,
            "reference": receipt.confirmation.reference,
            "message": f"Spot {receipt.slot_id} is now free",
        }

    def status(self) -> dict[str, Any]:
        """Report aggregate occupancy and revenue."""
        stats = self.allocation.stats()
        return {
            "status": "success",
            "operation": "status",
            "total_slots": stats.total_slots,
            "occupied_slots": stats.occupied_slots,
            "available_slots": stats.available_slots,
            "by_class": {
                name: {"total": counts.total, "occupied": counts.occupied}
                for name, counts in stats.by_class.items()
            },
            "sessions_completed": stats.sessions_completed,
            "revenue": str(stats.revenue),
        }

    def list_slots(self) -> dict[str, Any]:
        """List every slot in search order."""
        return {
            "status": "success",
            "operation": "slots",
            "slots": [
                {
                    "slot_id": view.slot_id,
                    "slot_class": view.slot_class,
                    "occupied": view.is_occupied,
                    "vehicle": view.occupant.category.value if view.occupant else None,
                    "admitted_at": view.admitted_at.isoformat() if view.admitted_at else None,
                }
                for view in self.allocation.slots()
            ],
        }
