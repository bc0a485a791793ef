"""
FastAPI dependency injection functions.
Controllers are built once per app in create_app and resolved from app state.
"""

from fastapi import Request

from avi_faucet.api.controller.funding.funding_controller import AirdropController, RelayController
from avi_faucet.core.logger.logger import get_logger
from avi_faucet.core.service.funding.rate_limiter import (
    ClaimStore,
    FundingRateLimiter,
    MemoryClaimStore,
    RedisClaimStore,
)
from avi_faucet.infra.config.redis import get_redis
from avi_faucet.infra.config.settings import Settings

logger = get_logger(__name__)


def build_claim_store(settings: Settings) -> ClaimStore:
    """In-memory claims unless RATE_LIMIT_BACKEND selects Redis."""
    backend = settings.RATE_LIMIT_BACKEND.lower()
    logger.info(f"Rate-limit claim store: {backend}", extra={"window_secs": settings.RATE_LIMIT_SECS})
    if backend == "redis":
        return RedisClaimStore(get_redis(), settings.RATE_LIMIT_SECS)
    return MemoryClaimStore()


def build_rate_limiter(settings: Settings) -> FundingRateLimiter:
    return FundingRateLimiter(
        store=build_claim_store(settings),
        window_seconds=settings.RATE_LIMIT_SECS,
        lock_claims=settings.RATE_LIMIT_LOCK_CLAIMS,
    )


def get_airdrop_controller(request: Request) -> AirdropController:
    """Get the Solana airdrop controller of the running app."""
    return request.app.state.airdrop_controller


def get_relay_controller(request: Request) -> RelayController:
    """Get the relay controller of the running app."""
    return request.app.state.relay_controller
