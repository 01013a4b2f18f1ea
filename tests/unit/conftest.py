"""
Unit Test Configuration
=======================
Fixtures for pure logic tests - NO I/O ALLOWED.

All unit tests should be completely isolated from:
- Network (RPC, HTTP)
- File system (except tmp_path)
"""

import pytest


# ============================================================================
# AUTOUSE: ENFORCE I/O ISOLATION
# ============================================================================


@pytest.fixture(autouse=True)
def isolate_unit_tests(monkeypatch):
    """
    Automatically disable all network I/O for unit tests.
    Any test that accidentally tries to make a network call will fail.
    """
    def block_network(*args, **kwargs):
        raise RuntimeError(
            "Network I/O detected in unit test! "
            "Unit tests must be pure logic with no external dependencies. "
            "Use the FakeLedger from tests/mocks instead."
        )

    monkeypatch.setattr("httpx.AsyncClient.send", block_network)
    monkeypatch.setattr("httpx.Client.send", block_network)


# ============================================================================
# SUBMISSION FIXTURES
# ============================================================================


@pytest.fixture
def fast_config():
    """Millisecond-scale timings so protocol tests finish quickly."""
    from txlander.execution.coordinator import SubmitterConfig

    return SubmitterConfig(
        confirmation_timeout_ms=500,
        confirm_level="confirmed",
        poll_interval_sec=0.01,
        rebroadcast_interval_sec=0.01,
        diagnosis_timeout_sec=0.2,
        simulation_level="processed",
    )


@pytest.fixture
def coordinator(ledger, fast_config):
    """SubmissionCoordinator wired to the FakeLedger."""
    from txlander.execution.coordinator import SubmissionCoordinator

    return SubmissionCoordinator(ledger, config=fast_config)
