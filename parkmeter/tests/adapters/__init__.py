"""Tests for adapter implementations.

Settlement adapters run entirely in memory, so no external services are
required.
"""
