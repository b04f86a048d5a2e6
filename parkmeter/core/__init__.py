"""Core domain logic for the parkmeter allocation engine.

This package contains zero external dependencies and represents
the pure business logic of the application. Settlement backends and
drivers are handled by the adapters package.
"""

from .billing import FeeCalculator
from .classification import classify
from .errors import (
    AlreadyEmpty,
    NoCapacity,
    ParkingError,
    ReleaseError,
    SettlementFailure,
    UnknownCategory,
)
from .models import (
    LARGE,
    MEDIUM,
    SMALL,
    Confirmation,
    DemandUnit,
    Handle,
    PoolStats,
    Receipt,
    SlotClass,
    SlotView,
    VehicleCategory,
)
from .pool import AllocationPool

__all__ = [
    "LARGE",
    "MEDIUM",
    "SMALL",
    "AllocationPool",
    "AlreadyEmpty",
    "Confirmation",
    "DemandUnit",
    "FeeCalculator",
    "Handle",
    "NoCapacity",
    "ParkingError",
    "PoolStats",
    "Receipt",
    "ReleaseError",
    "SettlementFailure",
    "SlotClass",
    "SlotView",
    "UnknownCategory",
    "VehicleCategory",
    "classify",
]
