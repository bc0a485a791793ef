"""Multi-chain relay router."""

from typing import Dict

from fastapi import APIRouter, Depends

from avi_faucet.api.controller.funding.funding_controller import RelayController
from avi_faucet.core.dependencies import get_relay_controller
from avi_faucet.core.logger.logger import logger
from avi_faucet.core.service.funding.models import (
    RelayAirdropRequest,
    RelayAirdropResponse,
    RelayNetworkInfo,
    RelayStatus,
)

router = APIRouter(tags=["relay"])


@router.post(
    "/airdrop",
    response_model=RelayAirdropResponse,
    summary="Request testnet tokens on a supported network",
)
async def request_relay_airdrop(
    body: RelayAirdropRequest,
    controller: RelayController = Depends(get_relay_controller),
) -> RelayAirdropResponse:
    """
    Ask the relay to send testnet tokens.

    Network defaults to base-sepolia and token to the network's native coin.
    Unsupported networks or tokens and malformed addresses are refused before
    the relay is contacted. Always answers 200.
    """
    logger.info(
        f"Relay airdrop requested for address: {body.address}",
        extra={"network": body.network, "token": body.token}
    )
    return await controller.airdrop(body)


@router.get("/status", response_model=RelayStatus, summary="Relay configuration snapshot")
async def get_relay_status(controller: RelayController = Depends(get_relay_controller)) -> RelayStatus:
    return controller.status()


@router.get(
    "/networks",
    response_model=Dict[str, RelayNetworkInfo],
    summary="Supported networks, tokens and per-token limits",
)
async def get_networks(controller: RelayController = Depends(get_relay_controller)) -> Dict[str, RelayNetworkInfo]:
    return controller.networks()
