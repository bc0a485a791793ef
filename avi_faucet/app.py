import json
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError

from avi_faucet.infra.config.settings import Settings, get_settings
from avi_faucet.core.logger.logger import logger
from avi_faucet.core.dependencies import build_rate_limiter
from avi_faucet.core.exceptions.handler import ServiceError, GlobalErrorHandler
from avi_faucet.core.service.funding.funding_service import FundingService
from avi_faucet.core.service.funding.models import FundingMethod, lamports_to_sol
from avi_faucet.core.service.funding.rate_limiter import FundingRateLimiter
from avi_faucet.api.controller.funding.funding_controller import AirdropController, RelayController
from avi_faucet.api.middleware.logging.request_logging import RequestLoggingMiddleware
from avi_faucet.api.router import airdrop, health, relay

SOLANA_MODE = "solana"
RELAY_MODE = "relay"


def create_app(
    settings: Optional[Settings] = None,
    funding_service: Optional[FundingService] = None,
    rate_limiter: Optional[FundingRateLimiter] = None,
) -> FastAPI:
    """
    Build the faucet API.

    FAUCET_MODE picks the surface: ``solana`` serves /airdrop and /status
    against Solana RPC, ``relay`` serves /airdrop, /status and /networks
    against the multi-chain relay. Service and rate limiter can be injected.
    """
    settings = settings or get_settings()
    mode = settings.FAUCET_MODE.lower()
    if mode not in (SOLANA_MODE, RELAY_MODE):
        raise ValueError(f"Unknown FAUCET_MODE: {settings.FAUCET_MODE}")

    funding_service = funding_service or FundingService(settings)
    rate_limiter = rate_limiter or build_rate_limiter(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(json.dumps({
            "message": "Starting faucet",
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "mode": mode,
            "airdrop_sol": lamports_to_sol(settings.AIRDROP_LAMPORTS),
            "rate_limit_secs": settings.RATE_LIMIT_SECS
        }))
        yield
        logger.info(json.dumps({
            "message": "Shutting down faucet",
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "service": settings.APP_NAME
        }))

    app = FastAPI(
        title=settings.APP_NAME,
        description="""
Test-network faucet. Requests devnet/testnet tokens for an address.

## Modes
- **solana**: SOL airdrops through Solana JSON-RPC
- **relay**: testnet tokens on several chains through a token relay

Failures are reported in the response body with `success: false`.
        """,
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )

    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(ServiceError, GlobalErrorHandler.service_error_handler)
    app.add_exception_handler(RequestValidationError, GlobalErrorHandler.validation_error_handler)
    app.add_exception_handler(Exception, GlobalErrorHandler.general_exception_handler)

    app.state.settings = settings
    app.state.mode = mode
    app.state.funding_service = funding_service
    app.state.rate_limiter = rate_limiter

    app.include_router(health.router)

    if mode == SOLANA_MODE:
        app.state.airdrop_controller = AirdropController(
            settings,
            funding_service,
            rate_limiter,
            method=FundingMethod(settings.AIRDROP_METHOD.lower()),
        )
        app.include_router(airdrop.router)
    else:
        app.state.relay_controller = RelayController(settings, funding_service, rate_limiter)
        app.include_router(relay.router)

    return app
