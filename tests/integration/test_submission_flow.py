"""
Submission Flow Integration Test
================================
SubmissionCoordinator -> SolanaRpcGateway -> (mocked) solana-py AsyncClient,
with real solders signing. Exercises the wiring between layers without a
live cluster.
"""

import json
import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from solders.hash import Hash
from solders.keypair import Keypair
from solders.rpc.responses import GetSignatureStatusesResp, SimulateTransactionResp
from solders.system_program import TransferParams, transfer


class ScriptedCluster:
    """Mimics a cluster that only includes the tx after a few deliveries."""

    def __init__(self, deliveries_needed=3, err=None, logs=None):
        self.deliveries_needed = deliveries_needed
        self.err = err
        self.logs = logs or []
        self.deliveries = 0
        self.signature = None

        self.client = MagicMock()
        self.client.get_latest_blockhash = AsyncMock(side_effect=self._blockhash)
        self.client.send_raw_transaction = AsyncMock(side_effect=self._send)
        self.client.get_signature_statuses = AsyncMock(side_effect=self._statuses)
        self.client.simulate_transaction = AsyncMock(side_effect=self._simulate)
        self.client.close = AsyncMock()

    async def _blockhash(self, commitment=None):
        return SimpleNamespace(value=SimpleNamespace(blockhash=Hash.default()))

    async def _send(self, raw, opts=None):
        from solders.transaction import VersionedTransaction

        self.deliveries += 1
        self.signature = VersionedTransaction.from_bytes(raw).signatures[0]
        return SimpleNamespace(value=self.signature)

    async def _statuses(self, signatures, search_transaction_history=False):
        value = None
        if self.deliveries >= self.deliveries_needed:
            value = {
                "slot": 777,
                "confirmations": 1,
                "err": self.err,
                "status": {"Ok": None} if self.err is None else {"Err": self.err},
                "confirmationStatus": "confirmed",
            }
        return GetSignatureStatusesResp.from_json(json.dumps({
            "jsonrpc": "2.0",
            "result": {"context": {"slot": 778}, "value": [value]},
            "id": 1,
        }))

    async def _simulate(self, tx, sig_verify=False, commitment=None):
        return SimulateTransactionResp.from_json(json.dumps({
            "jsonrpc": "2.0",
            "result": {
                "context": {"slot": 779},
                "value": {
                    "err": self.err,
                    "accounts": None,
                    "logs": self.logs,
                    "returnData": None,
                    "unitsConsumed": 1500,
                },
            },
            "id": 1,
        }))


@pytest.fixture
def fast_config():
    from txlander.execution.coordinator import SubmitterConfig

    return SubmitterConfig(
        confirmation_timeout_ms=1000,
        poll_interval_sec=0.01,
        rebroadcast_interval_sec=0.01,
        diagnosis_timeout_sec=0.5,
    )


def transfer_ix(payer):
    return transfer(
        TransferParams(from_pubkey=payer.pubkey(), to_pubkey=Keypair().pubkey(), lamports=10)
    )


@pytest.mark.integration
class TestSubmissionFlow:
    @pytest.mark.asyncio
    async def test_lands_after_rebroadcasts(self, fast_config):
        from txlander.execution.coordinator import SubmissionCoordinator
        from txlander.shared.infrastructure.rpc_gateway import SolanaRpcGateway

        cluster = ScriptedCluster(deliveries_needed=3)
        payer = Keypair()

        async with SolanaRpcGateway("http://localhost:8899", client=cluster.client) as rpc:
            coordinator = SubmissionCoordinator(rpc, config=fast_config)
            sig = await coordinator.submit([transfer_ix(payer)], payer)

        assert sig == str(cluster.signature)
        assert cluster.deliveries >= 3
        cluster.client.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_rejection_diagnosed_from_program_log(self, fast_config):
        from txlander.execution.coordinator import SubmissionCoordinator
        from txlander.execution.errors import TransactionFailed
        from txlander.shared.infrastructure.rpc_gateway import SolanaRpcGateway

        cluster = ScriptedCluster(
            deliveries_needed=1,
            err={"InstructionError": [0, {"Custom": 6001}]},
            logs=[
                "Program 11111111111111111111111111111111 invoke [1]",
                "Program log: Instruction: Withdraw",
                "Program log: Withdrawal exceeds free collateral",
                "Program 11111111111111111111111111111111 failed: custom program error: 0x1771",
            ],
        )
        payer = Keypair()

        async with SolanaRpcGateway("http://localhost:8899", client=cluster.client) as rpc:
            coordinator = SubmissionCoordinator(rpc, config=fast_config)
            with pytest.raises(TransactionFailed) as excinfo:
                await coordinator.submit([transfer_ix(payer)], payer)

        assert excinfo.value.message == "Transaction failed: Withdrawal exceeds free collateral"
        cluster.client.simulate_transaction.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_rejection_without_program_log_reports_wire_error(self, fast_config):
        from txlander.execution.coordinator import SubmissionCoordinator
        from txlander.execution.diagnoser import DiagnosisKind
        from txlander.execution.errors import TransactionFailed
        from txlander.shared.infrastructure.rpc_gateway import SolanaRpcGateway

        cluster = ScriptedCluster(
            deliveries_needed=1,
            err={"InstructionError": [0, {"Custom": 6001}]},
            logs=["Program 11111111111111111111111111111111 invoke [1]"],
        )
        payer = Keypair()

        async with SolanaRpcGateway("http://localhost:8899", client=cluster.client) as rpc:
            coordinator = SubmissionCoordinator(rpc, config=fast_config)
            with pytest.raises(TransactionFailed) as excinfo:
                await coordinator.submit([transfer_ix(payer)], payer)

        assert excinfo.value.message == '{"InstructionError":[0,{"Custom":6001}]}'
        assert excinfo.value.diagnosis.kind is DiagnosisKind.RAW_ERROR

    @pytest.mark.asyncio
    async def test_fieldless_rejection_reports_wire_error(self, fast_config):
        from txlander.execution.coordinator import SubmissionCoordinator
        from txlander.execution.errors import TransactionFailed
        from txlander.shared.infrastructure.rpc_gateway import SolanaRpcGateway

        cluster = ScriptedCluster(deliveries_needed=1, err="AccountInUse")
        payer = Keypair()

        async with SolanaRpcGateway("http://localhost:8899", client=cluster.client) as rpc:
            coordinator = SubmissionCoordinator(rpc, config=fast_config)
            with pytest.raises(TransactionFailed) as excinfo:
                await coordinator.submit([transfer_ix(payer)], payer)

        assert excinfo.value.message == '"AccountInUse"'
