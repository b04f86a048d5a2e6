"""External adapters for the parkmeter allocation engine.

This package provides implementations of the core port interfaces and
drivers that call into the core.

Adapter Organization:

- settlement/: Payment backends for collecting fees (credit card, PayPal, crypto)
- cli/: Command handlers for the interactive demo driver
"""
