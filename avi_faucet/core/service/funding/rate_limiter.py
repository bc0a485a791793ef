"""Rate limiter for funding service."""

import asyncio
import math
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

import redis.asyncio as redis
from pydantic import BaseModel

from avi_faucet.core.exceptions.handler import ServiceError, ServiceErrorCode
from avi_faucet.core.logger.logger import get_logger

logger = get_logger(__name__)


def claim_key(address: str, network: Optional[str] = None, token: Optional[str] = None) -> str:
    """Address alone in Solana mode; address, network and token for the relay."""
    parts = [address]
    if network:
        parts.append(network)
    if token:
        parts.append(token)
    return ":".join(parts)


class RateLimitDecision(BaseModel):
    allowed: bool
    retry_after: int = 0

    @property
    def message(self) -> str:
        return f"Rate limited. Try again in {self.retry_after} seconds"


class ClaimStore(ABC):
    """Storage for last successful claim timestamps."""

    @abstractmethod
    async def get(self, key: str) -> Optional[float]:
        pass

    @abstractmethod
    async def set(self, key: str, timestamp: float) -> None:
        pass


class MemoryClaimStore(ClaimStore):
    """
    Process-local claim map. Entries are never evicted and vanish on restart.
    """

    def __init__(self):
        self._claims: Dict[str, float] = {}

    async def get(self, key: str) -> Optional[float]:
        return self._claims.get(key)

    async def set(self, key: str, timestamp: float) -> None:
        self._claims[key] = timestamp

    def __len__(self) -> int:
        return len(self._claims)


class RedisClaimStore(ClaimStore):
    """Claims shared through Redis; each key expires with the rate-limit window."""

    def __init__(self, redis_client: redis.Redis, ttl_seconds: int):
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds
        self.key_prefix = "faucet:claim:"

    def _get_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def _unavailable(self, e: redis.RedisError) -> ServiceError:
        logger.error(f"Redis claim store error: {e}")
        return ServiceError(
            ServiceErrorCode.STORE_UNAVAILABLE,
            "Rate-limit store unavailable",
            status_code=503,
            details={"error": str(e)},
        )

    async def get(self, key: str) -> Optional[float]:
        try:
            value = await self.redis.get(self._get_key(key))
        except redis.RedisError as e:
            raise self._unavailable(e) from e
        return float(value) if value is not None else None

    async def set(self, key: str, timestamp: float) -> None:
        try:
            await self.redis.set(self._get_key(key), str(timestamp), ex=max(1, self.ttl_seconds))
        except redis.RedisError as e:
            raise self._unavailable(e) from e


class FundingRateLimiter:
    """
    One claim per key per window.

    ``check`` and ``record`` are separate calls so a claim is written only
    after the funding strategy succeeded. Two concurrent requests for the same
    key can both pass ``check`` before either records; callers that need the
    pair to be atomic hold ``lock`` around check, fund and record.
    """

    def __init__(
        self,
        store: Optional[ClaimStore] = None,
        window_seconds: int = 3600,
        clock: Callable[[], float] = time.time,
        lock_claims: bool = False,
    ):
        self.store = store or MemoryClaimStore()
        self.window_seconds = window_seconds
        self.clock = clock
        self.lock: Optional[asyncio.Lock] = asyncio.Lock() if lock_claims else None

    async def check(self, key: str) -> RateLimitDecision:
        last_claim = await self.store.get(key)
        if last_claim is None:
            return RateLimitDecision(allowed=True)

        elapsed = self.clock() - last_claim
        if elapsed < self.window_seconds:
            retry_after = math.ceil(self.window_seconds - elapsed)
            logger.info(
                "Rate limit hit",
                extra={"claim_key": key, "retry_after": retry_after}
            )
            return RateLimitDecision(allowed=False, retry_after=retry_after)

        return RateLimitDecision(allowed=True)

    async def record(self, key: str) -> None:
        await self.store.set(key, self.clock())
        logger.debug("Recorded claim", extra={"claim_key": key})
