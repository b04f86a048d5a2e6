"""Classification of vehicle labels into demand units."""

from types import MappingProxyType

from .errors import UnknownCategory
from .models import DemandUnit, VehicleCategory

VEHICLE_TABLE = MappingProxyType({
    "bike": DemandUnit(VehicleCategory.BIKE, 1),
    "car": DemandUnit(VehicleCategory.CAR, 2),
    "truck": DemandUnit(VehicleCategory.TRUCK, 3),
})


def classify(label: str) -> DemandUnit:
    """Map a vehicle label to its demand unit.

    Matching ignores case and surrounding whitespace. Unknown labels are
    rejected rather than defaulted so a unit is never admitted under the
    wrong size class.

    Raises:
        UnknownCategory: If the label is not a string in the table.
    """
    if not isinstance(label, str):
        raise UnknownCategory(label)
    unit = VEHICLE_TABLE.get(label.strip().lower())
    if unit is None:
        raise UnknownCategory(label)
    return unit
