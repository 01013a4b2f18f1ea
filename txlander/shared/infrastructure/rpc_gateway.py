"""
Solana RPC Gateway (Async)
==========================
The network surface consumed by the submission pipeline.

`LedgerRpc` is the protocol the pipeline depends on; `SolanaRpcGateway`
implements it over solana-py's AsyncClient. Every transport or RPC-level
failure is re-raised as NetworkUnavailable so callers deal with one
exception type for "this exchange did not happen".
"""

from __future__ import annotations

import json
from typing import Any, Optional, Protocol, Union

import httpx
from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment, Confirmed, Finalized, Processed
from solana.rpc.core import RPCException
from solana.rpc.types import TxOpts
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from config.settings import Settings
from txlander.execution.errors import NetworkUnavailable
from txlander.execution.types import ConfirmationLevel, SimulationResult, StatusSnapshot
from txlander.shared.system.logging import Logger


_TRANSPORT_ERRORS = (SolanaRpcException, RPCException, httpx.HTTPError, OSError)

_COMMITMENTS = {
    ConfirmationLevel.PROCESSED: Processed,
    ConfirmationLevel.CONFIRMED: Confirmed,
    ConfirmationLevel.FINALIZED: Finalized,
}

_STATUS_LEVELS = {level.value: level for level in ConfirmationLevel}


class LedgerRpc(Protocol):
    """Request/response surface of the ledger network."""

    async def get_latest_blockhash(self) -> Any:
        ...

    async def send_raw(self, raw: bytes, skip_preflight: bool = True) -> str:
        ...

    async def get_status(self, signature: str) -> Optional[StatusSnapshot]:
        """
        One status snapshot. `error` carries the wire JSON value
        (`"AccountInUse"`, `{"InstructionError": [0, {"Custom": 1}]}`).
        """
        ...

    async def simulate(self, raw: bytes, level: ConfirmationLevel) -> SimulationResult:
        ...


def commitment_for(level: Union[str, ConfirmationLevel]) -> Commitment:
    """Map a ConfirmationLevel onto solana-py's Commitment."""
    return _COMMITMENTS[ConfirmationLevel.parse(level)]


def wire_value(resp: Any) -> Any:
    """`result.value` of a solana-py response, decoded to plain JSON values."""
    return json.loads(resp.to_json())["result"]["value"]


def level_from_status(status: Optional[dict]) -> Optional[ConfirmationLevel]:
    """
    Interpret one wire-format signature status.

    Nodes that predate `confirmationStatus` report `confirmations: null` for
    rooted (finalized) transactions.
    """
    if status is None:
        return None
    confirmation_status = status.get("confirmationStatus")
    if confirmation_status is not None:
        return _STATUS_LEVELS.get(confirmation_status)
    if status.get("confirmations") is None:
        return ConfirmationLevel.FINALIZED
    return ConfirmationLevel.PROCESSED


class SolanaRpcGateway:
    """
    LedgerRpc over solana-py AsyncClient.

    Usage:
        async with SolanaRpcGateway(Settings.RPC_URL) as rpc:
            blockhash = await rpc.get_latest_blockhash()
    """

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        commitment: Union[str, ConfirmationLevel] = ConfirmationLevel.CONFIRMED,
        timeout: Optional[float] = None,
        client: Optional[AsyncClient] = None,
    ):
        self.rpc_url = rpc_url or Settings.RPC_URL
        self.commitment = commitment_for(commitment)
        self._client = client or AsyncClient(
            self.rpc_url,
            commitment=self.commitment,
            timeout=timeout or Settings.RPC_REQUEST_TIMEOUT_S,
        )

    async def __aenter__(self) -> "SolanaRpcGateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.close()

    async def get_latest_blockhash(self) -> Any:
        """Freshness token (solders Hash) bound into the message at sign time."""
        try:
            resp = await self._client.get_latest_blockhash(commitment=self.commitment)
        except _TRANSPORT_ERRORS as e:
            raise NetworkUnavailable("getLatestBlockhash", e) from e
        blockhash = resp.value.blockhash
        Logger.debug(f"[RPC] Fresh blockhash: {str(blockhash)[:16]}...")
        return blockhash

    async def send_raw(self, raw: bytes, skip_preflight: bool = True) -> str:
        opts = TxOpts(
            skip_preflight=skip_preflight,
            skip_confirmation=True,
            preflight_commitment=self.commitment,
        )
        try:
            resp = await self._client.send_raw_transaction(raw, opts=opts)
        except _TRANSPORT_ERRORS as e:
            raise NetworkUnavailable("sendTransaction", e) from e
        return str(resp.value)

    async def get_status(self, signature: str) -> Optional[StatusSnapshot]:
        try:
            resp = await self._client.get_signature_statuses(
                [Signature.from_string(signature)]
            )
        except _TRANSPORT_ERRORS as e:
            raise NetworkUnavailable("getSignatureStatuses", e) from e

        statuses = wire_value(resp)
        status = statuses[0] if statuses else None
        if status is None:
            return None
        return StatusSnapshot(
            level=level_from_status(status),
            error=status.get("err"),
            slot=status.get("slot"),
        )

    async def simulate(
        self,
        raw: bytes,
        level: Union[str, ConfirmationLevel] = ConfirmationLevel.PROCESSED,
    ) -> SimulationResult:
        tx = VersionedTransaction.from_bytes(raw)
        try:
            resp = await self._client.simulate_transaction(
                tx, sig_verify=False, commitment=commitment_for(level)
            )
        except _TRANSPORT_ERRORS as e:
            raise NetworkUnavailable("simulateTransaction", e) from e
        value = wire_value(resp)
        return SimulationResult(
            error=value.get("err"),
            logs=list(value.get("logs") or []),
        )
