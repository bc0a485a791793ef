from typing import List, Optional
from pydantic_settings import BaseSettings
from functools import lru_cache

class Settings(BaseSettings):
    # App Settings
    APP_NAME: str = "Avi Faucet"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    FAUCET_MODE: str = "solana"  # solana or relay

    # Airdrop Settings
    AIRDROP_LAMPORTS: int = 5_000_000_000  # 5 SOL
    SOLANA_RPC_URL: Optional[str] = None  # Overrides the devnet endpoint when set
    AIRDROP_METHOD: str = "rpc"  # Strategy used by the Solana server

    # Rate Limiting
    RATE_LIMIT_SECS: int = 3600
    RATE_LIMIT_BACKEND: str = "memory"  # memory or redis
    RATE_LIMIT_LOCK_CLAIMS: bool = False

    # CORS
    ALLOWED_ORIGINS: List[str] = ["*"]

    # Redis Settings
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_MAX_CONNECTIONS: int = 10

    # Helius RPC
    HELIUS_API_KEY: Optional[str] = None
    HELIUS_RPC_URL: str = "https://devnet.helius-rpc.com"

    # Third-party faucet APIs
    FAUCET_API_URL: str = "https://faucet.solana.com/api/request"
    DEVNET_FAUCET_URL: str = "https://api.devnetfaucet.org/airdrop"
    FAUCET_API_TIMEOUT_SECONDS: float = 30.0

    # Proof-of-work miner
    POW_BINARY_NAME: str = "devnet-pow"
    POW_BINARY_PATHS: List[str] = ["./devnet-pow", "~/.cargo/bin/devnet-pow"]

    # Local wallet CLI
    SOLANA_CLI_BINARY: str = "solana"

    # Multi-chain relay (Coinbase Developer Platform faucet)
    CDP_API_KEY: Optional[str] = None
    RELAY_API_URL: str = "https://api.cdp.coinbase.com/platform/v2"

    # HTTP client
    HTTP_MAX_CONNECTIONS: int = 100
    HTTP_MAX_KEEPALIVE_CONNECTIONS: int = 20

    class Config:
        env_file = ".env"
        case_sensitive = True

@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
