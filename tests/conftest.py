"""
txlander Test Configuration
===========================
Shared fixtures and pytest markers for the test suite.
"""

import pytest
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


# ============================================================================
# PYTEST MARKERS
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "network: marks tests that require network access"
    )
    config.addinivalue_line(
        "markers", "integration: wires the coordinator through the real RPC gateway"
    )


# ============================================================================
# SHARED FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def quiet_logger(monkeypatch):
    """Keep console output out of test runs (file logging still happens)."""
    from txlander.shared.system.logging import Logger

    monkeypatch.setattr(Logger, "_silent_mode", True)
    yield


@pytest.fixture
def ledger():
    """Fresh in-memory ledger."""
    from tests.mocks.mock_rpc import FakeLedger

    return FakeLedger()
