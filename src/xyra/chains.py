"""Static registry of supported chains and their lending assets.

Supports 4 chains:
- ZetaChain Athens (settlement chain hosting the lending pool)
- Ethereum Sepolia, Base Sepolia (EVM, relayed through the EVM gateway)
- Solana Devnet (SVM, relayed through the gateway program)

Each token maps a chain-local asset to its ZRC-20 representation on the
settlement chain. The tables are built once at import and never mutated.
"""

from dataclasses import dataclass, field
from decimal import ROUND_DOWN, Decimal
from enum import Enum
from typing import Optional

from xyra.errors import UnknownChain

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class VmKind(str, Enum):
    """Virtual machine family of a chain."""
    EVM = "evm"
    SVM = "svm"


@dataclass(frozen=True)
class TokenDescriptor:
    """A lending asset as seen from one chain."""

    symbol: str
    name: str
    decimals: int
    settlement_asset_address: str  # ZRC-20 on the settlement chain
    origin_address: Optional[str] = None  # None = native gas asset

    @property
    def is_native(self) -> bool:
        return self.origin_address is None


@dataclass(frozen=True)
class ChainDescriptor:
    """Configuration for a supported chain."""

    key: str
    numeric_id: int
    vm_kind: VmKind
    label: str
    gateway_address: str
    native_symbol: str
    tokens: tuple[TokenDescriptor, ...] = field(default_factory=tuple)
    is_settlement: bool = False

    def get_token(self, symbol: str) -> Optional[TokenDescriptor]:
        """Find a token on this chain by symbol (case-insensitive)."""
        symbol = symbol.upper()
        for token in self.tokens:
            if token.symbol.upper() == symbol:
                return token
        return None


# ======================
# ZRC-20 assets on ZetaChain Athens
# ======================

ZRC20_ETH_SEPOLIA = "0x05BA149A7bd6dC1F937fA9046A9e05C05f3b18b0"
ZRC20_USDC_SEPOLIA = "0xcC683A782f4B30c138787CB5576a86AF66fdc31d"
ZRC20_ETH_BASE_SEPOLIA = "0x236b0DE675cC8F46AE186897fCCeFe3370C9eDeD"
ZRC20_USDC_BASE_SEPOLIA = "0xd0eFed75622e7AA4555EE44F296dA3744E3ceE19"
ZRC20_SOL_SOLANA = "0xADF73ebA3Ebaa7254E859549A44c74eF7cff7501"
ZRC20_USDC_SOLANA = "0xD10932EB3616a937bd4a2652c87E9FeBbAce53e5"

EVM_GATEWAY = "0x0c487a766110c85d301d96e33579c5b317fa4995"


# ======================
# Chain Configurations
# ======================

CHAINS: dict[str, ChainDescriptor] = {
    # ZetaChain Athens - settlement chain, assets are the ZRC-20s themselves
    "zeta_testnet": ChainDescriptor(
        key="zeta_testnet",
        numeric_id=7001,
        vm_kind=VmKind.EVM,
        label="ZetaChain Athens",
        gateway_address="0x6c533f7fe93fae114d0954697069df33c9b74fd7",  # GatewayZEVM
        native_symbol="ZETA",
        is_settlement=True,
        tokens=(
            TokenDescriptor("ETH.SEPOLIA", "Ethereum (Sepolia)", 18, ZRC20_ETH_SEPOLIA, ZRC20_ETH_SEPOLIA),
            TokenDescriptor("USDC.SEPOLIA", "USD Coin (Sepolia)", 6, ZRC20_USDC_SEPOLIA, ZRC20_USDC_SEPOLIA),
            TokenDescriptor(
                "ETH.BASESEPOLIA", "Ethereum (Base Sepolia)", 18,
                ZRC20_ETH_BASE_SEPOLIA, ZRC20_ETH_BASE_SEPOLIA,
            ),
            TokenDescriptor(
                "USDC.BASESEPOLIA", "USD Coin (Base Sepolia)", 6,
                ZRC20_USDC_BASE_SEPOLIA, ZRC20_USDC_BASE_SEPOLIA,
            ),
            TokenDescriptor("SOL.SOLANA", "Solana", 9, ZRC20_SOL_SOLANA, ZRC20_SOL_SOLANA),
            TokenDescriptor("USDC.SOLANA", "USD Coin (Solana)", 6, ZRC20_USDC_SOLANA, ZRC20_USDC_SOLANA),
        ),
    ),

    # Ethereum Sepolia
    "sepolia": ChainDescriptor(
        key="sepolia",
        numeric_id=11155111,
        vm_kind=VmKind.EVM,
        label="Sepolia",
        gateway_address=EVM_GATEWAY,
        native_symbol="ETH",
        tokens=(
            TokenDescriptor("ETH", "Ethereum", 18, ZRC20_ETH_SEPOLIA),
            TokenDescriptor(
                "USDC", "USD Coin", 6, ZRC20_USDC_SEPOLIA,
                "0x1c7D4B196Cb0C7B01d743Fbc6116a902379C7238",
            ),
        ),
    ),

    # Base Sepolia
    "base_sepolia": ChainDescriptor(
        key="base_sepolia",
        numeric_id=84532,
        vm_kind=VmKind.EVM,
        label="Base Sepolia",
        gateway_address=EVM_GATEWAY,
        native_symbol="ETH",
        tokens=(
            TokenDescriptor("ETH", "Ethereum", 18, ZRC20_ETH_BASE_SEPOLIA),
            TokenDescriptor(
                "USDC", "USD Coin", 6, ZRC20_USDC_BASE_SEPOLIA,
                "0x036CbD53842c5426634e7929541eC2318f3dCF7e",
            ),
        ),
    ),

    # Solana Devnet
    "solana_devnet": ChainDescriptor(
        key="solana_devnet",
        numeric_id=901,
        vm_kind=VmKind.SVM,
        label="Solana Devnet",
        gateway_address="ZETAjseVjuFsxdRxo6MmTCvqFwb3ZHUx56Co3vCmGis",  # gateway program
        native_symbol="SOL",
        tokens=(
            TokenDescriptor("SOL", "Solana", 9, ZRC20_SOL_SOLANA),
            TokenDescriptor(
                "USDC", "USD Coin", 6, ZRC20_USDC_SOLANA,
                "4zMMC9srt5Ri5X14GAgXhaHii3GnPAEERYPJgZJDncDU",
            ),
        ),
    ),
}

_CHAINS_BY_ID: dict[int, ChainDescriptor] = {c.numeric_id: c for c in CHAINS.values()}


# ======================
# Helper Functions
# ======================

def get_chain(key: str) -> ChainDescriptor:
    """Get chain configuration by registry key."""
    chain = CHAINS.get(key.lower())
    if chain is None:
        raise UnknownChain(key)
    return chain


def get_chain_by_id(numeric_id: int) -> ChainDescriptor:
    """Resolve a wallet's live chain id back to its configuration."""
    chain = _CHAINS_BY_ID.get(int(numeric_id))
    if chain is None:
        raise UnknownChain(numeric_id)
    return chain


def get_settlement_chain() -> ChainDescriptor:
    """Get the chain hosting the lending pool."""
    for chain in CHAINS.values():
        if chain.is_settlement:
            return chain
    raise UnknownChain("settlement")


def get_all_chains() -> list[ChainDescriptor]:
    """Get all chain configurations."""
    return list(CHAINS.values())


def find_token_by_settlement_asset(address: str) -> Optional[TokenDescriptor]:
    """Find the settlement-chain token for a ZRC-20 address."""
    settlement = get_settlement_chain()
    address = address.lower()
    for token in settlement.tokens:
        if token.settlement_asset_address.lower() == address:
            return token
    return None


def to_base_units(amount: Decimal, decimals: int) -> int:
    """Convert a human amount to integer base units (truncating dust)."""
    return int(Decimal(amount).scaleb(decimals).to_integral_value(rounding=ROUND_DOWN))


def from_base_units(amount: int, decimals: int) -> Decimal:
    """Convert integer base units to a human amount."""
    return Decimal(amount).scaleb(-decimals)
