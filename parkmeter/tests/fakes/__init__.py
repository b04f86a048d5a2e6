"""Fake implementations of core ports for testing.

These in-memory implementations allow core domain logic to be tested
without real time passing or a payment backend:

- FakeClock: Manually advanced clock
- FakeSettlementPort: Captured settlements with configurable failure
"""

from .clock import FakeClock
from .settlement import FakeSettlementPort

__all__ = [
    "FakeClock",
    "FakeSettlementPort",
]
