"""
Transaction Assembler
=====================
Turns instructions + signers + a fresh blockhash into signed wire bytes.

The coordinator only needs the `TransactionAssembler` protocol; callers with
their own message format (lookup tables, legacy messages, hardware signers)
inject their own implementation.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.transaction import VersionedTransaction

from txlander.execution.types import SignedTransaction
from txlander.shared.system.logging import Logger


class TransactionAssembler(Protocol):
    def assemble(
        self,
        instructions: Sequence[Any],
        payer: Any,
        signers: Sequence[Any],
        blockhash: Any,
    ) -> SignedTransaction:
        ...


class SoldersAssembler:
    """Compiles a v0 message and signs it with the payer and extra signers."""

    def assemble(
        self,
        instructions: Sequence[Instruction],
        payer: Keypair,
        signers: Sequence[Keypair],
        blockhash: Any,
    ) -> SignedTransaction:
        if not instructions:
            raise ValueError("Cannot assemble a transaction with no instructions")

        message = MessageV0.try_compile(
            payer=payer.pubkey(),
            instructions=list(instructions),
            address_lookup_table_accounts=[],
            recent_blockhash=blockhash,
        )

        keypairs = [payer]
        for signer in signers:
            if signer.pubkey() not in [k.pubkey() for k in keypairs]:
                keypairs.append(signer)

        tx = VersionedTransaction(message, keypairs)
        Logger.debug(f"[SUBMIT] TX built: {len(instructions)} ixs, {len(keypairs)} signers")
        return SignedTransaction.from_versioned(tx)
