"""Cryptocurrency settlement adapter.

Implements SettlementPort by transferring from a wallet simulated in
memory. The reference mimics a transaction hash.
"""

import hashlib
import logging
import threading
import uuid
from datetime import UTC, datetime
from decimal import Decimal

from parkmeter.core.errors import SettlementFailure
from parkmeter.core.models import Confirmation
from parkmeter.core.ports import SettlementPort

logger = logging.getLogger(__name__)

BACKEND = "crypto"


class CryptoSettlementAdapter(SettlementPort):
    """Pays fees from a crypto wallet."""

    def __init__(self, wallet_balance: Decimal | None = None):
        if wallet_balance is not None and wallet_balance < 0:
            raise ValueError(f"wallet_balance must be non-negative, got {wallet_balance}")
        self._wallet_balance = wallet_balance
        self._lock = threading.Lock()

    @property
    def wallet_balance(self) -> Decimal | None:
        with self._lock:
            return self._wallet_balance

    def settle(self, amount: Decimal) -> Confirmation:
        """Transfer the fee out of the wallet."""
        if amount <= 0:
            raise SettlementFailure(
                f"Invalid transfer amount: {amount}", amount=amount, backend=BACKEND
            )

        with self._lock:
            if self._wallet_balance is not None:
                if amount > self._wallet_balance:
                    raise SettlementFailure(
                        f"Crypto transfer rejected: wallet holds {self._wallet_balance}",
                        amount=amount,
                        backend=BACKEND,
                    )
                self._wallet_balance -= amount

        tx_hash = hashlib.sha256(f"{uuid.uuid4()}:{amount}".encode()).hexdigest()
        confirmation = Confirmation(
            backend=BACKEND,
            amount=amount,
            reference=f"0x{tx_hash[:40]}",
            settled_at=datetime.now(UTC),
        )
        logger.info(
            f"Paid ${amount} using cryptocurrency",
            extra={"reference": confirmation.reference},
        )
        return confirmation
