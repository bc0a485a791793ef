"""Funding controllers for the HTTP relay service."""

from contextlib import nullcontext
from typing import Dict, Optional

from avi_faucet.api.utils.validators import AddressValidator
from avi_faucet.core.logger.logger import logger
from avi_faucet.core.service.funding.endpoints import (
    DEFAULT_NETWORK,
    DEFAULT_RELAY_NETWORK,
    RELAY_NETWORKS,
    SOLANA_NETWORKS,
    default_relay_token,
    relay_token_config,
    resolve_rpc_url,
)
from avi_faucet.core.service.funding.funding_service import FundingService
from avi_faucet.core.service.funding.models import (
    AirdropRequest,
    AirdropResponse,
    FundingMethod,
    FundingRequest,
    NetworkStatus,
    RelayAirdropRequest,
    RelayAirdropResponse,
    RelayNetworkInfo,
    RelayStatus,
    TokenAllowance,
    lamports_to_sol,
)
from avi_faucet.core.service.funding.rate_limiter import FundingRateLimiter, claim_key
from avi_faucet.infra.config.settings import Settings


class AirdropController:
    """
    Solana airdrops: validate, rate-limit, dispatch, record.

    Every outcome is returned as an AirdropResponse; nothing here raises for
    a bad address or an upstream failure.
    """

    def __init__(
        self,
        settings: Settings,
        funding_service: FundingService,
        rate_limiter: FundingRateLimiter,
        method: FundingMethod = FundingMethod.RPC,
    ):
        self.settings = settings
        self.funding_service = funding_service
        self.rate_limiter = rate_limiter
        self.method = method

    def rpc_url_for(self, network: str) -> str:
        """SOLANA_RPC_URL replaces the devnet endpoint when configured."""
        override = self.settings.SOLANA_RPC_URL if network == DEFAULT_NETWORK else None
        return resolve_rpc_url(network, rpc_override=override, settings=self.settings)

    async def airdrop(self, body: AirdropRequest) -> AirdropResponse:
        address = body.address.strip()
        network = (body.network or DEFAULT_NETWORK).strip().lower()

        if not AddressValidator.validate_solana_address(address):
            return AirdropResponse(success=False, message="Invalid Solana address")

        # Unknown networks are served from devnet
        if network not in SOLANA_NETWORKS:
            logger.warning(f"Unknown network '{network}', using {DEFAULT_NETWORK}")
            network = DEFAULT_NETWORK
        rpc_url = self.rpc_url_for(network)

        key = claim_key(address)
        async with self.rate_limiter.lock or nullcontext():
            decision = await self.rate_limiter.check(key)
            if not decision.allowed:
                return AirdropResponse(success=False, message=decision.message)

            lamports = self.settings.AIRDROP_LAMPORTS
            result = await self.funding_service.fund(FundingRequest(
                address=address,
                network=network,
                amount=lamports,
                method=self.method,
                rpc_url=rpc_url,
            ))

            if not result.success:
                return AirdropResponse(success=False, message=result.error or "Airdrop failed")

            await self.rate_limiter.record(key)

        return AirdropResponse(
            success=True,
            tx_signature=result.signature,
            message=f"Airdropped {lamports_to_sol(lamports)} SOL to {address}",
            lamports=lamports,
        )

    async def status(self) -> NetworkStatus:
        return await self.funding_service.get_network_status(DEFAULT_NETWORK, self.rpc_url_for(DEFAULT_NETWORK))


class RelayController:
    """Multi-chain airdrops through the token relay."""

    def __init__(
        self,
        settings: Settings,
        funding_service: FundingService,
        rate_limiter: FundingRateLimiter,
    ):
        self.settings = settings
        self.funding_service = funding_service
        self.rate_limiter = rate_limiter

    def _failure(self, message: str, network: Optional[str] = None, token: Optional[str] = None) -> RelayAirdropResponse:
        return RelayAirdropResponse(success=False, message=message, network=network, token=token)

    async def airdrop(self, body: RelayAirdropRequest) -> RelayAirdropResponse:
        address = body.address.strip()
        network = (body.network or DEFAULT_RELAY_NETWORK).strip().lower()

        if network not in RELAY_NETWORKS:
            return self._failure(f"Unsupported network: {network}")

        token = (body.token or default_relay_token(network)).strip().lower()
        allowance = relay_token_config(network, token)
        if allowance is None:
            return self._failure(f"Unsupported token '{token}' on {network}", network=network)

        is_valid, error_message = AddressValidator.validate_address_for_network(address, network)
        if not is_valid:
            return self._failure(error_message, network=network, token=token)

        key = claim_key(address, network, token)
        async with self.rate_limiter.lock or nullcontext():
            decision = await self.rate_limiter.check(key)
            if not decision.allowed:
                return self._failure(decision.message, network=network, token=token)

            result = await self.funding_service.fund(FundingRequest(
                address=address,
                network=network,
                amount=0,
                method=FundingMethod.RELAY,
                token=token,
            ))

            if not result.success:
                return self._failure(result.error or "Relay request failed", network=network, token=token)

            await self.rate_limiter.record(key)

        logger.info("Relay airdrop sent", extra={"network": network, "token": token, "tx_hash": result.signature})
        return RelayAirdropResponse(
            success=True,
            message=f"Sent {allowance['amount']} {token.upper()} to {address} on {network}",
            tx_hash=result.signature,
            network=network,
            token=token,
            amount=allowance["amount"],
        )

    def status(self) -> RelayStatus:
        return RelayStatus(
            configured=bool(self.settings.CDP_API_KEY),
            relay_url=self.settings.RELAY_API_URL,
            networks=list(RELAY_NETWORKS.keys()),
            rate_limit_secs=self.settings.RATE_LIMIT_SECS,
        )

    def networks(self) -> Dict[str, RelayNetworkInfo]:
        return {
            name: RelayNetworkInfo(
                family=config["family"],
                tokens={token: TokenAllowance(**allowance) for token, allowance in config["tokens"].items()},
            )
            for name, config in RELAY_NETWORKS.items()
        }
