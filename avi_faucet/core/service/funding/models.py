"""Models for funding service."""

from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

LAMPORTS_PER_SOL = 1_000_000_000


def lamports_to_sol(lamports: int) -> str:
    """Render lamports as a SOL amount without float noise."""
    sol = Decimal(lamports) / Decimal(LAMPORTS_PER_SOL)
    return format(sol.normalize(), "f")


def sol_to_lamports(sol: float) -> int:
    return int(Decimal(str(sol)) * LAMPORTS_PER_SOL)


class FundingMethod(str, Enum):
    """Funding strategy kinds"""
    RPC = "rpc"
    CLI = "cli"
    POW = "pow"
    FAUCET = "faucet"
    DEVNET = "devnet"
    RELAY = "relay"


class FundingRequest(BaseModel):
    """A single funding attempt. Built per invocation, never persisted."""
    address: str = Field(..., description="Address to fund")
    network: str = Field("devnet", description="Network name")
    amount: int = Field(LAMPORTS_PER_SOL, description="Amount in the chain's smallest unit")
    method: FundingMethod = Field(FundingMethod.RPC, description="Strategy to use")
    rpc_url: Optional[str] = Field(None, description="Resolved endpoint for RPC-based strategies")
    token: Optional[str] = Field(None, description="Token identifier (relay only)")


class FundingResult(BaseModel):
    """Uniform outcome of every strategy."""
    success: bool
    signature: Optional[str] = None
    error: Optional[str] = None
    message: Optional[str] = None
    install_hint: bool = False
    source: Optional[FundingMethod] = None

    @classmethod
    def failed(cls, error: str, **kwargs) -> "FundingResult":
        return cls(success=False, error=error, **kwargs)


class AirdropRequest(BaseModel):
    """Body of POST /airdrop (Solana mode)."""
    address: str
    network: Optional[str] = None


class AirdropResponse(BaseModel):
    success: bool
    tx_signature: Optional[str] = None
    message: str
    lamports: int = 0


class RelayAirdropRequest(BaseModel):
    """Body of POST /airdrop (relay mode)."""
    address: str
    network: Optional[str] = None
    token: Optional[str] = None


class RelayAirdropResponse(BaseModel):
    success: bool
    message: str
    tx_hash: Optional[str] = None
    network: Optional[str] = None
    token: Optional[str] = None
    amount: Optional[str] = None


class NetworkStatus(BaseModel):
    network: str
    slot: int
    version: str


class RelayStatus(BaseModel):
    configured: bool
    relay_url: str
    networks: List[str]
    rate_limit_secs: int


class TokenAllowance(BaseModel):
    amount: str
    daily_limit: str


class RelayNetworkInfo(BaseModel):
    family: str
    tokens: Dict[str, TokenAllowance]
