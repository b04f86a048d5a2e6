"""Test suite for the parkmeter allocation engine.

Organized into three categories:

1. core/: Unit tests for core domain logic
   - Minimal dependencies, fast execution
   - Uses in-memory fakes for ports

2. adapters/: Tests for settlement adapters and the CLI driver

3. fakes/: Port implementations for testing
   - In-memory implementations of SettlementPort and ClockPort
"""
