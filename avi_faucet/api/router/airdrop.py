"""Solana airdrop router."""

from fastapi import APIRouter, Depends

from avi_faucet.api.controller.funding.funding_controller import AirdropController
from avi_faucet.core.dependencies import get_airdrop_controller
from avi_faucet.core.logger.logger import logger
from avi_faucet.core.service.funding.models import AirdropRequest, AirdropResponse, NetworkStatus

router = APIRouter(tags=["airdrop"])


@router.post(
    "/airdrop",
    response_model=AirdropResponse,
    summary="Request a devnet/testnet SOL airdrop",
)
async def request_airdrop(
    body: AirdropRequest,
    controller: AirdropController = Depends(get_airdrop_controller),
) -> AirdropResponse:
    """
    Airdrop SOL to an address.

    Always answers 200; ``success`` tells whether the airdrop went through.
    A second claim for the same address inside the rate-limit window is
    refused with the number of seconds left.
    """
    logger.info(f"Airdrop requested for address: {body.address}")
    return await controller.airdrop(body)


@router.get(
    "/status",
    response_model=NetworkStatus,
    summary="Devnet slot and node version",
)
async def get_status(controller: AirdropController = Depends(get_airdrop_controller)) -> NetworkStatus:
    return await controller.status()
