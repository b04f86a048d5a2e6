"""Settlement adapters for collecting parking fees.

Implementations support multiple payment backends:
- Credit card (optional credit limit per charge)
- PayPal (optional prepaid balance)
- Crypto wallet (optional wallet balance)
"""

from .credit_card import CreditCardSettlementAdapter
from .crypto import CryptoSettlementAdapter
from .paypal import PayPalSettlementAdapter

__all__ = [
    "CreditCardSettlementAdapter",
    "CryptoSettlementAdapter",
    "PayPalSettlementAdapter",
]
