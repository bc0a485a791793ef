"""Airdrop through the locally installed Solana wallet CLI."""

from typing import List, Optional

from avi_faucet.core.service.funding.executor import COMMAND_NOT_FOUND, ExternalExecutor, SubprocessExecutor
from avi_faucet.core.service.funding.models import (
    FundingMethod,
    FundingRequest,
    FundingResult,
    lamports_to_sol,
)
from avi_faucet.core.service.funding.strategies.base import FundingStrategy, HttpClientFactory

SOLANA_CLI_INSTALL_HINT = "Install the Solana CLI: https://docs.solana.com/cli/install-solana-cli-tools"


class CliStrategy(FundingStrategy):
    """
    Shells out to ``solana airdrop``.

    Success is the exit status alone; the CLI's output is not parsed, so no
    signature is captured.
    """

    kind = FundingMethod.CLI

    def __init__(
        self,
        executor: Optional[ExternalExecutor] = None,
        binary: str = "solana",
        client_factory: Optional[HttpClientFactory] = None,
    ):
        super().__init__(client_factory)
        self.executor = executor or SubprocessExecutor()
        self.binary = binary

    def build_command(self, request: FundingRequest) -> List[str]:
        argv = [self.binary, "airdrop", lamports_to_sol(request.amount), request.address]
        if request.rpc_url:
            argv.extend(["-u", request.rpc_url])
        return argv

    async def fund(self, request: FundingRequest) -> FundingResult:
        argv = self.build_command(request)
        self.logger.info("Requesting airdrop via wallet CLI", extra={"address": request.address})

        result = await self.executor.run(argv)

        if result.returncode == COMMAND_NOT_FOUND:
            return FundingResult.failed(
                f"'{self.binary}' not found. {SOLANA_CLI_INSTALL_HINT}",
                install_hint=True,
                source=self.kind,
            )

        if not result.ok:
            detail = (result.stderr or result.stdout).strip()
            error = f"Command failed with exit code {result.returncode}"
            if detail:
                error = f"{error}: {detail}"
            self.logger.warning(error)
            return FundingResult.failed(error, source=self.kind)

        return FundingResult(success=True, source=self.kind)
