"""
txlander CLI
============
Command-line interface using Typer + Rich.

Commands:
    txlander submit <base64-tx>
    txlander status <signature>
    txlander diagnose <base64-tx>
"""

import asyncio
import base64
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from solders.transaction import VersionedTransaction

from config.settings import Settings
from txlander.execution.coordinator import SubmissionCoordinator, SubmitterConfig
from txlander.execution.diagnoser import FailureDiagnoser
from txlander.execution.errors import NetworkUnavailable, SubmissionError, serialize_error
from txlander.execution.types import ConfirmationLevel, SignedTransaction
from txlander.shared.infrastructure.rpc_gateway import SolanaRpcGateway

app = typer.Typer(
    name="txlander",
    help="txlander - reliable Solana transaction submission",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()


def _decode_signed(payload: str) -> SignedTransaction:
    try:
        raw = base64.b64decode(payload, validate=True)
        tx = VersionedTransaction.from_bytes(raw)
    except Exception as e:
        console.print(f"[bold red]❌ Not a base64 signed transaction: {e}[/bold red]")
        raise typer.Exit(1)
    return SignedTransaction(raw=raw, signature=str(tx.signatures[0]))


def _parse_level(value: str) -> ConfirmationLevel:
    try:
        return ConfirmationLevel.parse(value)
    except ValueError as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        raise typer.Exit(1)


# ═══════════════════════════════════════════════════════════════════════════════
# COMMAND: SUBMIT
# ═══════════════════════════════════════════════════════════════════════════════

@app.command()
def submit(
    transaction: str = typer.Argument(..., help="Signed transaction, base64"),
    timeout_ms: int = typer.Option(
        Settings.CONFIRM_TIMEOUT_MS, "--timeout-ms", min=1, help="Confirmation deadline"
    ),
    level: str = typer.Option(
        Settings.CONFIRM_LEVEL, "--level", help="processed | confirmed | finalized"
    ),
    rpc_url: Optional[str] = typer.Option(None, "--rpc-url", help="Override RPC_URL"),
):
    """
    Land a pre-signed transaction: rebroadcast until confirmed, then report.

    \b
    Examples:
        txlander submit AQAB...== --level finalized
    """
    tx = _decode_signed(transaction)
    confirm_level = _parse_level(level)
    console.print(Panel.fit(
        f"[bold cyan]🚀 Submitting[/bold cyan] {tx.signature}\n"
        f"Level: {confirm_level.value} | Timeout: {timeout_ms} ms",
        border_style="cyan",
    ))

    async def run() -> str:
        async with SolanaRpcGateway(rpc_url) as rpc:
            coordinator = SubmissionCoordinator(rpc, config=SubmitterConfig.from_settings())
            return await coordinator.submit_signed(
                tx, timeout_ms=timeout_ms, confirm_level=confirm_level
            )

    try:
        signature = asyncio.run(run())
    except SubmissionError as e:
        console.print(f"[bold red]❌ {e.message}[/bold red]")
        raise typer.Exit(1)
    console.print(f"[bold green]✅ Landed:[/bold green] {signature}")


# ═══════════════════════════════════════════════════════════════════════════════
# COMMAND: STATUS
# ═══════════════════════════════════════════════════════════════════════════════

@app.command()
def status(
    signature: str = typer.Argument(..., help="Transaction signature (base58)"),
    rpc_url: Optional[str] = typer.Option(None, "--rpc-url", help="Override RPC_URL"),
):
    """Show the current status of a signature."""

    async def run():
        async with SolanaRpcGateway(rpc_url) as rpc:
            return await rpc.get_status(signature)

    try:
        snapshot = asyncio.run(run())
    except NetworkUnavailable as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        raise typer.Exit(1)

    table = Table(title=f"Status {signature[:16]}...")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    if snapshot is None:
        table.add_row("level", "[yellow]not found[/yellow]")
    else:
        table.add_row("level", snapshot.level.value if snapshot.level else "-")
        table.add_row("slot", str(snapshot.slot))
        table.add_row("error", serialize_error(snapshot.error) if snapshot.failed else "-")
    console.print(table)

    if snapshot is not None and snapshot.failed:
        raise typer.Exit(1)


# ═══════════════════════════════════════════════════════════════════════════════
# COMMAND: DIAGNOSE
# ═══════════════════════════════════════════════════════════════════════════════

@app.command()
def diagnose(
    transaction: str = typer.Argument(..., help="Signed transaction, base64"),
    level: str = typer.Option(
        Settings.SIMULATION_LEVEL, "--level", help="Commitment to simulate against"
    ),
    rpc_url: Optional[str] = typer.Option(None, "--rpc-url", help="Override RPC_URL"),
):
    """Dry-run a transaction and print the most specific failure reason."""
    tx = _decode_signed(transaction)
    simulation_level = _parse_level(level)

    async def run():
        async with SolanaRpcGateway(rpc_url) as rpc:
            return await FailureDiagnoser(rpc, level=simulation_level).diagnose(tx)

    diagnosis = asyncio.run(run())
    console.print(f"[bold]{diagnosis.kind.value}[/bold]: {diagnosis.message}")
    if diagnosis.detail and not diagnosis.is_specific:
        console.print(f"[dim]{diagnosis.detail}[/dim]")


def main():
    app()


if __name__ == "__main__":
    main()
