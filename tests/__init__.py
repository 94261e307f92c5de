"""Tests for the legacy adapter package.

Network interactions are simulated with ``httpx.MockTransport`` and backoff
sleeps are recorded instead of awaited, so the suite runs offline and fast.
"""
