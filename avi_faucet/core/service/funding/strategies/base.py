"""
Strategy abstraction for funding requests.
Every way of obtaining test tokens implements FundingStrategy and is looked up
by its FundingMethod through a StrategyRegistry.
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

import httpx

from avi_faucet.core.http_client import create_temp_client
from avi_faucet.core.logger.logger import get_logger
from avi_faucet.core.service.funding.models import FundingMethod, FundingRequest, FundingResult

# service name -> fresh AsyncClient; tests swap in a client on a MockTransport
HttpClientFactory = Callable[[str], httpx.AsyncClient]


class FundingStrategy(ABC):
    """
    Abstract base class for funding strategies.

    Implementations turn every upstream or transport failure into a failed
    FundingResult instead of raising, so callers only ever see one shape.
    """

    kind: FundingMethod

    def __init__(self, client_factory: Optional[HttpClientFactory] = None):
        self.client_factory = client_factory or create_temp_client
        self.logger = get_logger(f"{__name__}.{self.kind.value}")

    @abstractmethod
    async def fund(self, request: FundingRequest) -> FundingResult:
        """
        Request funds for the address in the request.

        Args:
            request: Funding request with address, amount and resolved endpoint

        Returns:
            FundingResult with the signature when the upstream returned one
        """
        pass


class StrategyRegistry:
    """Registry for funding strategies"""

    def __init__(self):
        self._strategies: Dict[FundingMethod, FundingStrategy] = {}
        self.logger = get_logger(__name__)

    def register(self, strategy: FundingStrategy) -> None:
        self._strategies[strategy.kind] = strategy
        self.logger.debug(f"Registered funding strategy: {strategy.kind.value}")

    def get(self, method: FundingMethod) -> Optional[FundingStrategy]:
        return self._strategies.get(method)

    def methods(self) -> List[FundingMethod]:
        return list(self._strategies.keys())
