"""Multi-chain token relay (Coinbase Developer Platform faucet API)."""

from typing import Any, Dict, Optional

from avi_faucet.core.http_client import RELAY_SERVICE
from avi_faucet.core.service.funding.endpoints import (
    RELAY_NETWORKS,
    SOLANA_FAMILY,
    relay_network_family,
    relay_token_config,
)
from avi_faucet.core.service.funding.models import FundingMethod, FundingRequest, FundingResult
from avi_faucet.core.service.funding.strategies.base import FundingStrategy, HttpClientFactory
from avi_faucet.core.service.funding.strategies.faucet_api import extract_message


class RelayStrategy(FundingStrategy):
    """
    Asks the relay to send testnet tokens on the requested network.

    Network and token are checked against the allow-lists and the API key is
    checked before anything leaves the process.
    """

    kind = FundingMethod.RELAY

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str],
        client_factory: Optional[HttpClientFactory] = None,
    ):
        super().__init__(client_factory)
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def endpoint_for(self, network: str) -> str:
        family = relay_network_family(network)
        if family == SOLANA_FAMILY:
            return f"{self.base_url}/solana/faucet"
        return f"{self.base_url}/evm/faucet"

    def build_payload(self, request: FundingRequest) -> Dict[str, Any]:
        payload = {"address": request.address, "token": request.token}
        if relay_network_family(request.network) != SOLANA_FAMILY:
            payload["network"] = request.network
        return payload

    async def fund(self, request: FundingRequest) -> FundingResult:
        if request.network not in RELAY_NETWORKS:
            return FundingResult.failed(f"Unsupported network: {request.network}", source=self.kind)

        if not request.token or relay_token_config(request.network, request.token) is None:
            return FundingResult.failed(
                f"Unsupported token '{request.token}' on {request.network}", source=self.kind
            )

        if not self.configured:
            self.logger.error("CDP_API_KEY not configured")
            return FundingResult.failed("Relay not configured: CDP_API_KEY is not set", source=self.kind)

        url = self.endpoint_for(request.network)
        self.logger.info(
            "Requesting tokens from relay",
            extra={"address": request.address, "network": request.network, "token": request.token}
        )

        try:
            async with self.client_factory(RELAY_SERVICE) as client:
                response = await client.post(
                    url,
                    json=self.build_payload(request),
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
                try:
                    body = response.json()
                except ValueError:
                    body = None
        except Exception as e:
            self.logger.error(f"Relay call failed: {e!r}")
            return FundingResult.failed(str(e) or type(e).__name__, source=self.kind)

        if not response.is_success:
            message = extract_message(body, f"Relay returned HTTP {response.status_code}")
            self.logger.warning(f"Relay rejected request: {message}", extra={"status_code": response.status_code})
            return FundingResult.failed(message, source=self.kind)

        signature = None
        if isinstance(body, dict):
            signature = body.get("transactionHash") or body.get("transactionSignature")

        return FundingResult(success=True, signature=signature, source=self.kind)
