"""Funding service: dispatches funding requests to strategies."""

import functools
from typing import Any, Optional

from avi_faucet.core.logger.logger import logger
from avi_faucet.core.service.funding.endpoints import redact_url
from avi_faucet.core.service.funding.executor import ExternalExecutor, SubprocessExecutor
from avi_faucet.core.service.funding.models import (
    FundingMethod,
    FundingRequest,
    FundingResult,
    NetworkStatus,
)
from avi_faucet.core.service.funding.strategies.base import (
    FundingStrategy,
    HttpClientFactory,
    StrategyRegistry,
)
from avi_faucet.core.service.funding.strategies.cli import CliStrategy
from avi_faucet.core.service.funding.strategies.faucet_api import DevnetFaucetStrategy, FaucetApiStrategy
from avi_faucet.core.service.funding.strategies.pow import PowStrategy
from avi_faucet.core.service.funding.strategies.relay import RelayStrategy
from avi_faucet.core.service.funding.strategies.rpc import RpcStrategy, rpc_call
from avi_faucet.core.http_client import create_temp_client
from avi_faucet.infra.config.settings import Settings, get_settings


class FundingService:
    """Service for funding test addresses through interchangeable strategies."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        executor: Optional[ExternalExecutor] = None,
        client_factory: Optional[HttpClientFactory] = None,
    ):
        self.settings = settings or get_settings()
        self.executor = executor or SubprocessExecutor()
        self.client_factory = client_factory or functools.partial(create_temp_client, settings=self.settings)
        self.registry = StrategyRegistry()

        rpc = RpcStrategy(self.client_factory)
        for strategy in (
            rpc,
            CliStrategy(self.executor, self.settings.SOLANA_CLI_BINARY, self.client_factory),
            PowStrategy(
                self.executor,
                self.settings.POW_BINARY_PATHS,
                self.settings.POW_BINARY_NAME,
                self.client_factory,
            ),
            FaucetApiStrategy(self.settings.FAUCET_API_URL, self.client_factory),
            DevnetFaucetStrategy(self.settings.DEVNET_FAUCET_URL, rpc, self.client_factory),
            RelayStrategy(self.settings.RELAY_API_URL, self.settings.CDP_API_KEY, self.client_factory),
        ):
            self.register(strategy)

    def register(self, strategy: FundingStrategy) -> None:
        """Add or replace the strategy for its method."""
        self.registry.register(strategy)

    def strategy_for(self, method: FundingMethod) -> Optional[FundingStrategy]:
        return self.registry.get(method)

    async def fund(self, request: FundingRequest) -> FundingResult:
        """
        Run the strategy selected by ``request.method``.

        The request is attempted exactly once; retrying is the caller's call.

        Args:
            request: Funding request with address, amount and method

        Returns:
            FundingResult from the chosen strategy
        """
        strategy = self.strategy_for(request.method)
        if strategy is None:
            return FundingResult.failed(f"Unsupported method: {request.method}")

        logger.info(
            f"Dispatching funding request via {request.method.value}",
            extra={
                "address": request.address,
                "network": request.network,
                "amount": request.amount,
                "rpc_url": redact_url(request.rpc_url) if request.rpc_url else None,
            }
        )

        result = await strategy.fund(request)

        if result.success:
            logger.info(f"Funding succeeded for {request.address}", extra={"signature": result.signature})
        else:
            logger.warning(f"Funding failed for {request.address}: {result.error}")

        return result

    async def get_balance(self, address: str, rpc_url: str) -> int:
        """
        Balance of an address in lamports.

        Raises:
            JsonRpcError, httpx.HTTPError: The endpoint could not answer
        """
        result: Any = await rpc_call(self.client_factory, rpc_url, "getBalance", [address])
        if isinstance(result, dict):
            return int(result.get("value", 0))
        return int(result or 0)

    async def get_network_status(self, network: str, rpc_url: str) -> NetworkStatus:
        """
        Current slot and node version. Each field falls back independently
        (0 / "unknown") when its call fails.
        """
        slot = 0
        version = "unknown"

        try:
            slot = int(await rpc_call(self.client_factory, rpc_url, "getSlot", request_id=1) or 0)
        except Exception as e:
            logger.error(f"getSlot failed: {e}")

        try:
            result = await rpc_call(self.client_factory, rpc_url, "getVersion", request_id=2)
            if isinstance(result, dict) and result.get("solana-core"):
                version = str(result["solana-core"])
        except Exception as e:
            logger.error(f"getVersion failed: {e}")

        return NetworkStatus(network=network, slot=slot, version=version)
