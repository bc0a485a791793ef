"""Proof-of-work mining through the external devnet-pow tool."""

import os
from typing import List, Optional, Sequence

from avi_faucet.core.service.funding.executor import ExternalExecutor, SubprocessExecutor
from avi_faucet.core.service.funding.models import (
    FundingMethod,
    FundingRequest,
    FundingResult,
    lamports_to_sol,
)
from avi_faucet.core.service.funding.strategies.base import FundingStrategy, HttpClientFactory

POW_INSTALL_HINT = "devnet-pow not found. Install it with: cargo install devnet-pow"


class PowStrategy(FundingStrategy):
    """
    Mines devnet SOL with ``devnet-pow``.

    The tool pays a keypair it generates itself, not the requested address.
    A successful result says so and the caller has to move the funds.
    """

    kind = FundingMethod.POW

    def __init__(
        self,
        executor: Optional[ExternalExecutor] = None,
        search_paths: Sequence[str] = ("./devnet-pow", "~/.cargo/bin/devnet-pow"),
        binary_name: str = "devnet-pow",
        client_factory: Optional[HttpClientFactory] = None,
    ):
        super().__init__(client_factory)
        self.executor = executor or SubprocessExecutor()
        self.search_paths = list(search_paths)
        self.binary_name = binary_name

    def locate(self) -> Optional[str]:
        """First executable among the search paths, then PATH."""
        for path in self.search_paths:
            if self.executor.is_executable(path):
                return os.path.expanduser(path)
        return self.executor.which(self.binary_name)

    def build_command(self, binary: str, request: FundingRequest) -> List[str]:
        argv = [binary, "mine", "--target-lamports", str(request.amount)]
        if request.rpc_url:
            argv.extend(["-u", request.rpc_url])
        return argv

    async def fund(self, request: FundingRequest) -> FundingResult:
        binary = self.locate()
        if not binary:
            self.logger.warning("devnet-pow executable not found", extra={"search_paths": self.search_paths})
            return FundingResult.failed(POW_INSTALL_HINT, install_hint=True, source=self.kind)

        self.logger.info(
            "Mining devnet SOL with devnet-pow",
            extra={"binary": binary, "lamports": request.amount, "requested_address": request.address}
        )

        result = await self.executor.run(self.build_command(binary, request), inherit_io=True)
        if not result.ok:
            return FundingResult.failed(f"devnet-pow exited with code {result.returncode}", source=self.kind)

        return FundingResult(
            success=True,
            source=self.kind,
            message=(
                f"Mined {lamports_to_sol(request.amount)} SOL to the keypair generated by devnet-pow; "
                f"transfer it to {request.address} manually"
            ),
        )
