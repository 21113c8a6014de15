"""Application configuration using pydantic-settings.

Holds the lending pool address, per-chain RPC endpoints, the signing key and
the confirmation policy for direct and relayed actions.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug logging")

    # ======================
    # Settlement contract
    # ======================
    lending_pool_address: str = Field(
        default="", description="Lending pool contract on the settlement chain"
    )

    # ======================
    # Wallet
    # ======================
    wallet_private_key: Optional[str] = Field(
        default=None, description="Hex private key used for EVM signing"
    )
    wallet_seed_phrase: Optional[str] = Field(
        default=None, description="BIP-39 seed phrase (used when no private key is set)"
    )
    wallet_index: int = Field(default=0, description="Derivation index for the seed phrase")

    # ======================
    # Chain RPC Endpoints
    # ======================
    zeta_rpc_url: str = Field(
        default="https://zetachain-athens-evm.blockpi.network/v1/rpc/public",
        description="ZetaChain Athens EVM RPC URL",
    )
    sepolia_rpc_url: str = Field(
        default="https://ethereum-sepolia-rpc.publicnode.com", description="Sepolia RPC URL"
    )
    base_sepolia_rpc_url: str = Field(
        default="https://sepolia.base.org", description="Base Sepolia RPC URL"
    )
    solana_devnet_rpc_url: str = Field(
        default="https://api.devnet.solana.com", description="Solana Devnet RPC URL"
    )

    # ======================
    # Cross-chain tracking
    # ======================
    zeta_api_url: str = Field(
        default="https://zetachain-athens.blockpi.network/lcd/v1/public",
        description="ZetaChain REST (LCD) endpoint for CCTX queries",
    )

    # ======================
    # Confirmation policy
    # ======================
    direct_confirmations: int = Field(
        default=1, description="Blocks required for a direct settlement-chain call"
    )
    relay_confirmations: int = Field(
        default=3, description="Blocks required for a relayed gateway message"
    )
    approval_confirmations: int = Field(
        default=1, description="Blocks required for an ERC-20 approval"
    )
    confirmation_poll_interval: float = Field(
        default=2.0, description="Seconds between receipt polls"
    )

    # ======================
    # Revert options
    # ======================
    revert_message: str = Field(
        default="Revert", description="Message handed back to the initiator on revert"
    )
    on_revert_gas_limit: int = Field(
        default=100_000_000, description="Gas limit for the onRevert callback"
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def has_wallet(self) -> bool:
        """Check if a signing key is configured."""
        if self.wallet_private_key:
            return True
        return bool(self.wallet_seed_phrase and len(self.wallet_seed_phrase.split()) >= 12)

    def get_rpc_url(self, chain_key: str) -> str:
        """Get RPC URL for a registry chain key."""
        rpc_map = {
            "zeta_testnet": self.zeta_rpc_url,
            "sepolia": self.sepolia_rpc_url,
            "base_sepolia": self.base_sepolia_rpc_url,
            "solana_devnet": self.solana_devnet_rpc_url,
        }
        return rpc_map.get(chain_key.lower(), "")

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "lending_pool_address": self.lending_pool_address or "(not set)",
            "wallet_private_key": "***" if self.wallet_private_key else "(not set)",
            "wallet_seed_phrase": "***" if self.wallet_seed_phrase else "(not set)",
            "wallet_configured": self.has_wallet,
            "chains": {
                "zeta_testnet": {"rpc": self.zeta_rpc_url},
                "sepolia": {"rpc": self.sepolia_rpc_url},
                "base_sepolia": {"rpc": self.base_sepolia_rpc_url},
                "solana_devnet": {"rpc": self.solana_devnet_rpc_url},
            },
            "confirmations": {
                "direct": self.direct_confirmations,
                "relay": self.relay_confirmations,
                "approval": self.approval_confirmations,
            },
            "zeta_api_url": self.zeta_api_url,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
