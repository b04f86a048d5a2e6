"""PayPal settlement adapter.

Implements SettlementPort by debiting a PayPal account. The account is
simulated in memory with an optional prepaid balance.
"""

import logging
import threading
import uuid
from datetime import UTC, datetime
from decimal import Decimal

from parkmeter.core.errors import SettlementFailure
from parkmeter.core.models import Confirmation
from parkmeter.core.ports import SettlementPort

logger = logging.getLogger(__name__)

BACKEND = "paypal"


class PayPalSettlementAdapter(SettlementPort):
    """Debits fees from a PayPal balance."""

    def __init__(self, balance: Decimal | None = None):
        """Initialize PayPal settlement adapter.

        Args:
            balance: Funds available in the account. None means the
                account is backed by an unlimited funding source.
        """
        if balance is not None and balance < 0:
            raise ValueError(f"balance must be non-negative, got {balance}")
        self._balance = balance
        self._lock = threading.Lock()

    @property
    def balance(self) -> Decimal | None:
        with self._lock:
            return self._balance

    def settle(self, amount: Decimal) -> Confirmation:
        """Debit the fee from the account."""
        if amount <= 0:
            raise SettlementFailure(
                f"Invalid payment amount: {amount}", amount=amount, backend=BACKEND
            )

        with self._lock:
            if self._balance is not None:
                if amount > self._balance:
                    raise SettlementFailure(
                        f"PayPal payment declined: insufficient balance {self._balance}",
                        amount=amount,
                        backend=BACKEND,
                    )
                self._balance -= amount

        confirmation = Confirmation(
            backend=BACKEND,
            amount=amount,
            reference=f"PP-{uuid.uuid4().hex[:12].upper()}",
            settled_at=datetime.now(UTC),
        )
        logger.info(
            f"Paid ${amount} using PayPal",
            extra={"reference": confirmation.reference},
        )
        return confirmation
