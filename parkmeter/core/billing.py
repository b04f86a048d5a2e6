"""Fee calculation for released slots.

Pure computation, no side effects.
"""

from collections.abc import Mapping
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType

from .models import VehicleCategory

CENT = Decimal("0.01")

DEFAULT_RATES: Mapping[VehicleCategory, Decimal] = MappingProxyType({
    VehicleCategory.BIKE: Decimal("1.00"),
    VehicleCategory.CAR: Decimal("2.00"),
    VehicleCategory.TRUCK: Decimal("3.00"),
})
DEFAULT_RATE = Decimal("2.00")
DEFAULT_BILLING_UNIT = timedelta(hours=1)


class FeeCalculator:
    """Maps (category, elapsed) to a fee.

    Elapsed time is rounded up to whole billing units with a minimum of
    one unit, so even an instant stay is charged one unit.
    """

    def __init__(
        self,
        rates: Mapping[VehicleCategory, Decimal] | None = None,
        default_rate: Decimal = DEFAULT_RATE,
        billing_unit: timedelta = DEFAULT_BILLING_UNIT,
    ):
        """Initialize the calculator.

        Args:
            rates: Per-category rate per billing unit. Defaults to
                DEFAULT_RATES.
            default_rate: Rate for categories missing from the table.
            billing_unit: Smallest chargeable time increment.

        Raises:
            ValueError: If a rate is negative or the billing unit is not positive.
        """
        table = dict(DEFAULT_RATES if rates is None else rates)
        for category, rate in table.items():
            if rate < 0:
                raise ValueError(f"rate for {category.value} must be non-negative, got {rate}")
        if default_rate < 0:
            raise ValueError(f"default_rate must be non-negative, got {default_rate}")
        if billing_unit <= timedelta(0):
            raise ValueError(f"billing_unit must be positive, got {billing_unit}")

        self.rates: Mapping[VehicleCategory, Decimal] = MappingProxyType(table)
        self.default_rate = default_rate
        self.billing_unit = billing_unit

    def rate(self, category: VehicleCategory) -> Decimal:
        """Rate per billing unit, falling back to the default rate."""
        return self.rates.get(category, self.default_rate)

    def billable_units(self, elapsed: timedelta) -> int:
        """Whole billing units charged for a stay, never less than one."""
        if elapsed < timedelta(0):
            raise ValueError(f"elapsed must be non-negative, got {elapsed}")
        # timedelta division is exact in integer microseconds
        whole, remainder = divmod(elapsed, self.billing_unit)
        units = whole + (1 if remainder else 0)
        return max(1, units)

    def compute_fee(self, category: VehicleCategory, elapsed: timedelta) -> Decimal:
        """Fee for a stay of the given duration.

        Raises:
            ValueError: If elapsed is negative.
        """
        units = self.billable_units(elapsed)
        return (self.rate(category) * units).quantize(CENT, rounding=ROUND_HALF_UP)
