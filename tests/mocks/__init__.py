"""
txlander Test Mocks
===================
Reusable fakes for isolated testing.
"""

from tests.mocks.mock_rpc import FakeLedger, make_tx

__all__ = [
    "FakeLedger",
    "make_tx",
]
