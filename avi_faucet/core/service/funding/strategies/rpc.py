"""Direct JSON-RPC airdrop against a Solana endpoint."""

from typing import Any, Dict, List, Optional

from avi_faucet.core.http_client import RPC_SERVICE
from avi_faucet.core.service.funding.models import FundingMethod, FundingRequest, FundingResult
from avi_faucet.core.service.funding.strategies.base import FundingStrategy, HttpClientFactory


class JsonRpcError(Exception):
    """Error object returned by a JSON-RPC endpoint."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code


async def rpc_call(
    client_factory: HttpClientFactory,
    url: str,
    method: str,
    params: Optional[List[Any]] = None,
    request_id: int = 1,
) -> Any:
    """
    Issue one JSON-RPC 2.0 call and return its ``result``.

    Responses below 500 are parsed, so rate-limit answers that carry a
    JSON-RPC error body surface their message.

    Raises:
        JsonRpcError: The endpoint answered with an error object
        httpx.HTTPError: Transport failure or 5xx status
        ValueError: The body was not JSON
    """
    payload = {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": method,
        "params": params or [],
    }

    async with client_factory(RPC_SERVICE) as client:
        response = await client.post(url, json=payload)
        if response.status_code >= 500:
            response.raise_for_status()
        data: Dict[str, Any] = response.json()

    error = data.get("error")
    if error:
        if isinstance(error, dict):
            raise JsonRpcError(error.get("message") or str(error), error.get("code"))
        raise JsonRpcError(str(error))

    return data.get("result")


class RpcStrategy(FundingStrategy):
    """requestAirdrop straight to the resolved RPC endpoint."""

    kind = FundingMethod.RPC

    async def fund(self, request: FundingRequest) -> FundingResult:
        if not request.rpc_url:
            return FundingResult.failed("No RPC endpoint resolved", source=self.kind)

        self.logger.info(
            "Requesting airdrop over JSON-RPC",
            extra={"address": request.address, "lamports": request.amount, "network": request.network}
        )

        try:
            signature = await rpc_call(
                self.client_factory,
                request.rpc_url,
                "requestAirdrop",
                [request.address, request.amount],
            )
        except JsonRpcError as e:
            self.logger.warning(f"RPC returned error: {e.message}")
            return FundingResult.failed(f"RPC Error: {e.message}", source=self.kind)
        except ValueError as e:
            self.logger.error(f"RPC response was not JSON: {e}")
            return FundingResult.failed(f"Parse error: {e}", source=self.kind)
        except Exception as e:
            self.logger.error(f"RPC airdrop failed: {e}")
            return FundingResult.failed(f"Request failed: {str(e) or type(e).__name__}", source=self.kind)

        if not signature:
            return FundingResult.failed("No result from RPC", source=self.kind)

        return FundingResult(success=True, signature=str(signature), source=self.kind)
