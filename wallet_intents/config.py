from pathlib import Path
from typing import Dict, List

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]

# Stand-in answer for eth_getTransactionCount; no nonce lookup is made
DEFAULT_TRANSACTION_COUNT = "0x117"


class ChainConfig(BaseModel):
    """Endpoint and display metadata for one configured chain."""

    name: str
    rpc_url: str
    explorer_url: str = ""
    native_symbol: str = "ETH"
    native_decimals: int = 18


def _default_chains() -> Dict[int, ChainConfig]:
    return {
        1: ChainConfig(
            name="Ethereum",
            rpc_url="https://cloudflare-eth.com",
            explorer_url="https://etherscan.io",
        ),
        10: ChainConfig(
            name="Optimism",
            rpc_url="https://mainnet.optimism.io",
            explorer_url="https://optimistic.etherscan.io",
        ),
        137: ChainConfig(
            name="Polygon",
            rpc_url="https://polygon-rpc.com",
            explorer_url="https://polygonscan.com",
            native_symbol="MATIC",
        ),
        8453: ChainConfig(
            name="Base",
            rpc_url="https://mainnet.base.org",
            explorer_url="https://basescan.org",
        ),
        42161: ChainConfig(
            name="Arbitrum",
            rpc_url="https://arb1.arbitrum.io/rpc",
            explorer_url="https://arbiscan.io",
        ),
    }


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Chains
    default_chain_id: int = Field(default=1, description="Chain used when a payload names none")
    chains: Dict[int, ChainConfig] = Field(
        default_factory=_default_chains,
        description="Configured chains keyed by chain id (JSON in the CHAINS env var)",
    )

    # Payment requests
    payment_request_schemes: List[str] = Field(
        default_factory=lambda: ["ethereum", "pay"],
        description="URI schemes treated as payment requests",
    )

    # Network collaborators
    ens_api_url: str = Field(
        default="https://api.ensideas.com/ens/resolve",
        description="Base URL of the HTTP name-resolution API",
    )
    request_timeout_seconds: int = Field(default=15, ge=1, description="Timeout for RPC and HTTP calls")

    # Remote sessions
    session_state_path: Path = Field(
        default=BASE_DIR / ".wallet_intents" / "last_session.json",
        description="Where the last session descriptor is persisted",
    )
    transaction_count_placeholder: str = Field(
        default=DEFAULT_TRANSACTION_COUNT,
        description="Value returned for eth_getTransactionCount session requests",
    )


# Global settings instance
settings = Settings()
