"""Credit card settlement adapter.

Implements SettlementPort by authorizing a card charge. No real gateway
is contacted; a per-charge credit limit can be configured so declines
are reproducible.
"""

import logging
import uuid
from datetime import UTC, datetime
from decimal import Decimal

from parkmeter.core.errors import SettlementFailure
from parkmeter.core.models import Confirmation
from parkmeter.core.ports import SettlementPort

logger = logging.getLogger(__name__)

BACKEND = "credit_card"


class CreditCardSettlementAdapter(SettlementPort):
    """Charges fees to a credit card."""

    def __init__(self, credit_limit: Decimal | None = None):
        """Initialize credit card settlement adapter.

        Args:
            credit_limit: Largest single charge the card accepts. None
                means unlimited.

        Raises:
            ValueError: If credit_limit is negative.
        """
        if credit_limit is not None and credit_limit < 0:
            raise ValueError(f"credit_limit must be non-negative, got {credit_limit}")
        self.credit_limit = credit_limit

    def settle(self, amount: Decimal) -> Confirmation:
        """Authorize a charge for the fee."""
        if amount <= 0:
            raise SettlementFailure(
                f"Invalid charge amount: {amount}", amount=amount, backend=BACKEND
            )
        if self.credit_limit is not None and amount > self.credit_limit:
            raise SettlementFailure(
                f"Card declined: {amount} exceeds credit limit {self.credit_limit}",
                amount=amount,
                backend=BACKEND,
            )

        confirmation = Confirmation(
            backend=BACKEND,
            amount=amount,
            reference=f"CC-{uuid.uuid4().hex[:12].upper()}",
            settled_at=datetime.now(UTC),
        )
        logger.info(
            f"Paid ${amount} using credit card",
            extra={"reference": confirmation.reference},
        )
        return confirmation
