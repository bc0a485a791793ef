"""
Third-party faucet HTTP APIs.

Both strategies POST the address and amount to a fixed external endpoint with
a wall-clock timeout. The devnet variant hands the request to the direct RPC
strategy when the faucet call raises for any reason.
"""

from typing import Any, Dict, Optional

from avi_faucet.core.http_client import FAUCET_API_SERVICE
from avi_faucet.core.service.funding.models import (
    FundingMethod,
    FundingRequest,
    FundingResult,
    lamports_to_sol,
)
from avi_faucet.core.service.funding.strategies.base import FundingStrategy, HttpClientFactory
from avi_faucet.core.service.funding.strategies.rpc import RpcStrategy

SIGNATURE_FIELDS = ("signature", "txSignature", "tx_signature", "transactionSignature", "tx_hash")


class FaucetApiError(Exception):
    """Non-2xx answer from a faucet API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def extract_message(body: Any, fallback: str) -> str:
    if isinstance(body, dict):
        for field in ("message", "error", "errorMessage"):
            value = body.get(field)
            if isinstance(value, str) and value:
                return value
            if isinstance(value, dict) and value.get("message"):
                return str(value["message"])
    return fallback


def extract_signature(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    for field in SIGNATURE_FIELDS:
        if body.get(field):
            return str(body[field])
    return None


class FaucetApiStrategy(FundingStrategy):
    """POSTs to the public faucet API configured by FAUCET_API_URL."""

    kind = FundingMethod.FAUCET

    def __init__(self, url: str, client_factory: Optional[HttpClientFactory] = None):
        super().__init__(client_factory)
        self.url = url

    def build_payload(self, request: FundingRequest) -> Dict[str, Any]:
        return {
            "address": request.address,
            "amount": lamports_to_sol(request.amount),
            "network": request.network,
        }

    async def request_funds(self, request: FundingRequest) -> FundingResult:
        """
        Call the faucet and interpret its answer.

        Raises:
            FaucetApiError: Non-2xx status
            httpx.HTTPError: Transport failure or timeout
            ValueError: Malformed JSON on a 2xx answer
        """
        async with self.client_factory(FAUCET_API_SERVICE) as client:
            response = await client.post(self.url, json=self.build_payload(request))

            if not response.is_success:
                try:
                    body = response.json()
                except ValueError:
                    body = None
                message = extract_message(body, f"Faucet API returned HTTP {response.status_code}")
                raise FaucetApiError(response.status_code, message)

            body = response.json() if response.content else {}

        return FundingResult(success=True, signature=extract_signature(body), source=self.kind)

    async def fund(self, request: FundingRequest) -> FundingResult:
        self.logger.info("Requesting airdrop from faucet API", extra={"address": request.address, "url": self.url})
        try:
            return await self.request_funds(request)
        except FaucetApiError as e:
            self.logger.warning(f"Faucet API rejected request: {e.message}", extra={"status_code": e.status_code})
            return FundingResult.failed(e.message, source=self.kind)
        except Exception as e:
            self.logger.error(f"Faucet API call failed: {e!r}")
            return FundingResult.failed(str(e) or type(e).__name__, source=self.kind)


class DevnetFaucetStrategy(FaucetApiStrategy):
    """
    Devnet faucet API with an explicit fallback: any exception raised while
    calling the faucet (HTTP error status, transport error, timeout, malformed
    JSON) sends the same request to the direct RPC strategy instead. The
    result's ``source`` tells which path produced it.
    """

    kind = FundingMethod.DEVNET

    def __init__(
        self,
        url: str,
        fallback: Optional[RpcStrategy] = None,
        client_factory: Optional[HttpClientFactory] = None,
    ):
        super().__init__(url, client_factory)
        self.fallback = fallback or RpcStrategy(client_factory)

    async def fund(self, request: FundingRequest) -> FundingResult:
        self.logger.info("Requesting airdrop from devnet faucet", extra={"address": request.address, "url": self.url})
        try:
            return await self.request_funds(request)
        except Exception as e:
            self.logger.warning(
                "Devnet faucet failed, falling back to direct RPC",
                extra={"cause": str(e) or type(e).__name__, "address": request.address}
            )

        result = await self.fallback.fund(request)
        result.source = FundingMethod.RPC
        return result
