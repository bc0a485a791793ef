"""
Avi Faucet command line: request devnet/testnet SOL for an address.

Example:
    avi-faucet -a <address> -n devnet -m 2 -x rpc
"""

import asyncio
import sys
from typing import Optional

import click
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from avi_faucet.api.utils.validators import AddressValidator
from avi_faucet.core.exceptions.base import FaucetError
from avi_faucet.core.logger.logger import configure_cli_logging, get_logger
from avi_faucet.core.service.funding.endpoints import SOLANA_NETWORKS, redact_url, resolve_rpc_url
from avi_faucet.core.service.funding.funding_service import FundingService
from avi_faucet.core.service.funding.models import (
    FundingMethod,
    FundingRequest,
    lamports_to_sol,
    sol_to_lamports,
)
from avi_faucet.infra.config.settings import get_settings

logger = get_logger(__name__)
console = Console()

CLI_METHODS = [
    FundingMethod.RPC.value,
    FundingMethod.CLI.value,
    FundingMethod.POW.value,
    FundingMethod.FAUCET.value,
    FundingMethod.DEVNET.value,
]


class FaucetCommand(click.Command):
    """Usage errors exit 1 like every other validation failure."""

    def parse_args(self, ctx: click.Context, args):
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = 1
            raise


def _fail(message: str) -> None:
    console.print(f"[bold red]❌ Failed:[/] {escape(message)}")
    sys.exit(1)


@click.command(cls=FaucetCommand, context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--address", "-a", required=True, help="Solana address to receive the airdrop")
@click.option("--rpc", "-r", default=None, help="Custom RPC URL")
@click.option(
    "--network", "-n",
    type=click.Choice(sorted(SOLANA_NETWORKS)),
    default="devnet",
    show_default=True,
    help="Network to fund on",
)
@click.option("--amount", "-m", type=float, default=5.0, show_default=True, help="Amount in SOL")
@click.option(
    "--method", "-x",
    type=click.Choice(CLI_METHODS),
    default=FundingMethod.RPC.value,
    show_default=True,
    help="Funding method",
)
@click.option("--helius", "-H", default=None, help="Use Helius RPC with this API key ('env' reads HELIUS_API_KEY)")
@click.option("--balance", "-b", is_flag=True, help="Print the address balance and exit")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logs on stderr")
@click.pass_context
def main(
    ctx: click.Context,
    address: str,
    rpc: Optional[str],
    network: str,
    amount: float,
    method: str,
    helius: Optional[str],
    balance: bool,
    verbose: bool,
):
    """Request devnet/testnet SOL for an address."""
    configure_cli_logging(verbose)

    obj = ctx.obj or {}
    settings = obj.get("settings") or get_settings()
    service: FundingService = obj.get("service") or FundingService(settings)

    address = address.strip()
    if not AddressValidator.validate_solana_address(address):
        console.print("[bold red]Error:[/] Invalid Solana address")
        sys.exit(1)

    if amount <= 0:
        console.print("[bold red]Error:[/] Amount must be positive")
        sys.exit(1)

    try:
        rpc_url = resolve_rpc_url(network, rpc_override=rpc, helius_key=helius, settings=settings)
    except FaucetError as e:
        console.print(f"[bold red]Error:[/] {escape(e.message)}")
        sys.exit(1)

    lamports = sol_to_lamports(amount)

    if balance:
        try:
            current = asyncio.run(service.get_balance(address, rpc_url))
        except Exception as e:
            logger.error(f"Balance lookup failed: {e}")
            _fail(f"Could not fetch balance: {e}")
        console.print(f"[bold cyan]Balance:[/] {lamports_to_sol(current)} SOL ({current} lamports)")
        return

    table = Table(show_header=False, box=box.ROUNDED)
    table.add_row("[bold cyan]Address", address)
    table.add_row("[bold cyan]Network", network)
    table.add_row("[bold cyan]RPC", redact_url(rpc_url))
    table.add_row("[bold cyan]Amount", f"{lamports_to_sol(lamports)} SOL")
    table.add_row("[bold cyan]Method", method)
    console.print(Panel(table, title="[bold]🦞 Avi Faucet", border_style="cyan"))

    request = FundingRequest(
        address=address,
        network=network,
        amount=lamports,
        method=FundingMethod(method),
        rpc_url=rpc_url,
    )
    result = asyncio.run(service.fund(request))

    if not result.success:
        _fail(result.error or "Unknown error")

    console.print("[bold green]✅ Success![/]")
    if result.signature:
        console.print(f"   Signature: {escape(result.signature)}")
    if result.source and result.source.value != method:
        console.print(f"   [dim]Served by {result.source.value} fallback[/]")
    if result.message:
        console.print(f"   [yellow]{escape(result.message)}[/]")


if __name__ == "__main__":
    main()
